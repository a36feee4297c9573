"""Tests for GraphStore construction and key resolution."""

import pytest

from social_graph import Edge, EdgeType, GraphStore, Node, NodeKind, NodeNotFound


class TestNodeParsing:
    def test_key_prefers_explicit_key(self):
        node = Node.from_dict({"key": "k1", "handle": "@h", "id": "i"})
        assert node.key == "k1"
        assert set(node.aliases) == {"i", "@h", "h", "@k1"}

    def test_key_falls_back_to_handle_then_id(self):
        assert Node.from_dict({"handle": "@h", "id": "i"}).key == "@h"
        assert Node.from_dict({"id": "i", "did": "d"}).key == "i"
        assert Node.from_dict({"did": "d"}).key == "d"

    def test_unkeyed_node_is_dropped(self):
        assert Node.from_dict({"name": "nobody"}) is None
        assert Node.from_dict("not a dict") is None

    def test_kind_inferred_from_prefix(self):
        assert Node.from_dict({"key": "#tag:ai"}).kind == NodeKind.TAG
        assert Node.from_dict({"key": "#submolt:agents"}).kind == NodeKind.SUBMOLT
        assert Node.from_dict({"key": "@drift"}).kind == NodeKind.AGENT


class TestEdgeParsing:
    def test_missing_endpoint(self):
        assert Edge.from_dict({"from": "a"}) is None
        assert Edge.from_dict({"to": "b"}) is None
        assert Edge.from_dict({"from": "", "to": "b"}) is None

    def test_unknown_type_kept(self):
        edge = Edge.from_dict({"from": "a", "to": "b", "type": "poke"})
        assert edge is not None
        assert edge.type is None

    def test_fields(self):
        edge = Edge.from_dict({
            "from": "a", "to": "b", "type": "payment",
            "timestamp": "2026-01-01T00:00:00Z", "strength": "0.7", "context": "tip",
        })
        assert edge.type == EdgeType.PAYMENT
        assert edge.strength == 0.7
        assert edge.context == "tip"

    def test_bad_strength_is_absent(self):
        assert Edge.from_dict({"from": "a", "to": "b", "strength": "high"}).strength is None


class TestConstruction:
    def test_malformed_edges_dropped(self, social_store):
        stats = social_store.stats()
        assert stats["dropped_edges"] == 2
        assert stats["edges"] == 6

    def test_adjacency_symmetric(self, social_store):
        for key in social_store.all_keys():
            for neighbor in social_store.neighbors(key):
                assert key in social_store.neighbors(neighbor)

    def test_ghost_nodes(self, social_store):
        assert social_store.is_ghost("@ghost")
        assert social_store.node("@ghost") is None
        assert "@ghost" in social_store.all_keys()
        assert social_store.neighbors("@ghost") == ("@lex",)

    def test_all_keys_order(self, social_store):
        keys = social_store.all_keys()
        assert keys[:5] == ["@drift", "@spin", "@lex", "@kaleaon", "#submolt:agents"]
        assert keys[5:] == ["@ghost"]

    def test_duplicate_node_keys(self):
        store = GraphStore([{"key": "a", "name": "first"}, {"key": "a", "name": "second"}], [])
        assert store.node("a").name == "first"
        assert store.dropped_nodes == 1

    def test_edge_endpoints_canonicalized(self):
        store = GraphStore(
            [{"id": "did:1", "handle": "@drift"}, {"handle": "@spin"}],
            [{"from": "did:1", "to": "spin"}],
        )
        assert store.neighbors("@drift") == ("@spin",)
        assert not store.is_ghost("did:1")
        assert store.edges[0].source == "@drift"

    def test_duplicate_edges_single_adjacency(self):
        store = GraphStore([], [{"from": "a", "to": "b"}, {"from": "b", "to": "a"}])
        assert store.degree("a") == 1
        assert len(store.edges_between("a", "b")) == 2

    def test_empty(self):
        store = GraphStore([], [])
        assert store.all_keys() == []
        assert len(store) == 0


class TestResolveKey:
    def test_raw(self, social_store):
        assert social_store.resolve_key("@drift") == "@drift"

    def test_at_prefixed(self, social_store):
        assert social_store.resolve_key("drift") == "@drift"

    def test_alias_id(self, social_store):
        assert social_store.resolve_key("did:3") == "@lex"

    def test_at_stripped(self):
        store = GraphStore([{"key": "bob"}], [])
        assert store.resolve_key("@bob") == "bob"

    def test_raw_wins_over_prefixed(self):
        store = GraphStore([{"key": "bob"}, {"key": "@bob"}], [])
        assert store.resolve_key("bob") == "bob"
        assert store.resolve_key("@bob") == "@bob"

    def test_case_sensitive(self, social_store):
        assert social_store.resolve_key("@Drift") is None

    def test_not_found(self, social_store):
        assert social_store.resolve_key("@nobody") is None
        assert social_store.resolve_key("") is None
        with pytest.raises(NodeNotFound) as exc:
            social_store.require_key("@nobody")
        assert exc.value.identifier == "@nobody"
        assert "@nobody" in str(exc.value)

    def test_ghost_resolves_to_itself(self, social_store):
        assert social_store.resolve_key("ghost") == "@ghost"
        assert "@ghost" in social_store


class TestAtFormAliases:
    def test_keyed_with_at_edges_without(self):
        store = GraphStore([{"key": "@a"}, {"key": "@b"}], [{"from": "a", "to": "b"}])
        assert store.all_keys() == ["@a", "@b"]
        assert store.neighbors("@a") == ("@b",)
        assert store.resolve_key("a") == "@a"
        assert store.stats()["ghost_nodes"] == 0

    def test_bare_handle_edges_with_at(self):
        store = GraphStore([{"handle": "drift"}, {"handle": "spin"}], [{"from": "@drift", "to": "@spin"}])
        assert store.neighbors("drift") == ("spin",)
        assert not store.is_ghost("@drift")
        assert store.edges[0].source == "drift"

    def test_forms_never_shadow_primary_keys(self):
        store = GraphStore([{"key": "bob"}, {"key": "@bob"}], [{"from": "@bob", "to": "bob"}])
        assert store.neighbors("bob") == ("@bob",)

    def test_tag_keys_get_no_at_forms(self):
        node = Node.from_dict({"key": "#tag:ai"})
        assert node.aliases == ()

    def test_id_keys_get_no_at_forms(self):
        assert Node.from_dict({"id": "did:1"}).aliases == ()
