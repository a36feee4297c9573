"""Shared graph fixtures."""

import pytest

from social_graph import GraphStore


def make_store(node_keys, pairs, **edge_fields):
    nodes = [{"key": k} for k in node_keys]
    edges = [dict({"from": a, "to": b, "type": "mention"}, **edge_fields) for a, b in pairs]
    return GraphStore(nodes, edges)


@pytest.fixture
def line_store():
    """@a - @b - @c"""
    return make_store(["@a", "@b", "@c"], [("@a", "@b"), ("@b", "@c")])


@pytest.fixture
def two_triangles():
    return make_store(
        ["a1", "a2", "a3", "b1", "b2", "b3"],
        [("a1", "a2"), ("a2", "a3"), ("a3", "a1"),
         ("b1", "b2"), ("b2", "b3"), ("b3", "b1")],
    )


@pytest.fixture
def social_store():
    """Small Moltbook-style graph with handles, ids and a ghost mention."""
    nodes = [
        {"id": "did:1", "handle": "@drift", "name": "Drift", "community": "memory"},
        {"id": "did:2", "handle": "@spin", "name": "SpindriftMend", "community": "memory"},
        {"id": "did:3", "handle": "@lex", "name": "Lex"},
        {"id": "did:4", "handle": "@kaleaon", "name": "Kaleaon", "community": "memory"},
        {"key": "#submolt:agents", "name": "agents"},
    ]
    edges = [
        {"from": "@drift", "to": "@spin", "type": "mention", "strength": 0.9},
        {"from": "@drift", "to": "@lex", "type": "comment"},
        {"from": "@spin", "to": "@lex", "type": "comment"},
        {"from": "@lex", "to": "@ghost", "type": "mention"},
        {"from": "@spin", "to": "#submolt:agents", "type": "submolt"},
        {"from": "@drift", "to": "#submolt:agents", "type": "submolt"},
        {"from": "@spin"},
        {"to": "@drift", "type": "mention"},
    ]
    return GraphStore(nodes, edges)
