"""
Graph Store - Frozen in-memory snapshot of the social graph.

Built once per invocation from collector output:
- Key index: every identifier a node is known by -> its canonical key
- Adjacency: undirected, both directions of every edge inserted

Edges may point at keys never declared as nodes (a mention of an account
that never posted). Those "ghost" keys live in the adjacency index like any
other key but carry no Node attributes.

Neighbor order is insertion order (edge order, then endpoint order), so every
traversal over the same input visits keys in the same order.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .config import GraphConfig
from .models import Edge, Node

logger = logging.getLogger("social-graph.store")


class SocialGraphError(Exception):
    """Base class for errors raised by the social graph."""


class NodeNotFound(SocialGraphError, KeyError):
    """An identifier did not resolve under any alias form."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(identifier)

    def __str__(self):
        return f"Node not found: {self.identifier}"


class GraphStore:
    """Read-only node/edge snapshot with alias and adjacency indexes."""

    def __init__(self, nodes: Iterable = (), edges: Iterable = (),
                 config: Optional[GraphConfig] = None):
        self.config = config or GraphConfig()

        self._nodes: Dict[str, Node] = {}
        self._key_index: Dict[str, str] = {}
        self._adjacency: Dict[str, Dict[str, None]] = {}
        self._ghosts: Dict[str, None] = {}
        self._pair_edges: Dict[Tuple[str, str], List[Edge]] = {}
        self._edges: List[Edge] = []
        self.dropped_nodes = 0
        self.dropped_edges = 0

        for raw in nodes:
            node = raw if isinstance(raw, Node) else Node.from_dict(raw)
            if node is None or node.key in self._nodes:
                self.dropped_nodes += 1
                continue
            self._nodes[node.key] = node
        self._build_key_index()

        for raw in edges:
            edge = raw if isinstance(raw, Edge) else Edge.from_dict(raw)
            if edge is None:
                self.dropped_edges += 1
                continue
            self._add_edge(edge)

        logger.debug(
            "GraphStore built: %d nodes, %d ghosts, %d edges (%d dropped)",
            len(self._nodes), len(self._ghosts), len(self._edges), self.dropped_edges,
        )

    # --- Construction ---

    def _build_key_index(self):
        # Primary keys first so an alias can never shadow another node's key
        for key in self._nodes:
            self._key_index[key] = key
        for key, node in self._nodes.items():
            for alias in node.aliases:
                self._key_index.setdefault(alias, key)

    def _canonical(self, key: str) -> str:
        resolved = self._key_index.get(key)
        if resolved is None:
            self._ghosts.setdefault(key, None)
            return key
        return resolved

    def _add_edge(self, edge: Edge):
        source = self._canonical(edge.source)
        target = self._canonical(edge.target)
        if (source, target) != (edge.source, edge.target):
            edge = edge.with_endpoints(source, target)
        self._edges.append(edge)
        self._adjacency.setdefault(source, {})[target] = None
        self._adjacency.setdefault(target, {})[source] = None
        pair = (source, target) if source <= target else (target, source)
        self._pair_edges.setdefault(pair, []).append(edge)

    # --- Key resolution ---

    def resolve_key(self, identifier: Optional[str]) -> Optional[str]:
        """
        Canonical key for an identifier, or None.

        Tries the raw input, then the "@"-prefixed form, then the form with
        a leading "@" stripped. Matching is exact and case-sensitive. Ghost
        keys resolve to themselves.
        """
        if not identifier:
            return None
        with_at = identifier if identifier.startswith("@") else f"@{identifier}"
        without_at = identifier[1:] if identifier.startswith("@") else identifier
        for candidate in (identifier, with_at, without_at):
            if candidate in self._key_index:
                return self._key_index[candidate]
            if candidate in self._ghosts:
                return candidate
        return None

    def require_key(self, identifier: Optional[str]) -> str:
        key = self.resolve_key(identifier)
        if key is None:
            raise NodeNotFound(identifier)
        return key

    # --- Read access ---

    def neighbors(self, key: str) -> Tuple[str, ...]:
        """Neighbor keys in insertion order; empty for unknown keys."""
        return tuple(self._adjacency.get(key, ()))

    def neighbor_set(self, key: str) -> frozenset:
        return frozenset(self._adjacency.get(key, ()))

    def degree(self, key: str) -> int:
        return len(self._adjacency.get(key, ()))

    def has_edge(self, a: str, b: str) -> bool:
        return b in self._adjacency.get(a, ())

    def edges_between(self, a: str, b: str) -> List[Edge]:
        """Edges joining a and b in either direction, in input order."""
        pair = (a, b) if a <= b else (b, a)
        return list(self._pair_edges.get(pair, ()))

    def node(self, key: str) -> Optional[Node]:
        return self._nodes.get(key)

    def is_ghost(self, key: str) -> bool:
        return key in self._ghosts

    def all_keys(self) -> List[str]:
        """Declared node keys in input order, then ghost keys as first seen."""
        return list(self._nodes) + list(self._ghosts)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def __len__(self):
        return len(self._nodes) + len(self._ghosts)

    def __contains__(self, identifier):
        return self.resolve_key(identifier) is not None

    def stats(self) -> dict:
        return {
            "nodes": len(self._nodes),
            "ghost_nodes": len(self._ghosts),
            "edges": len(self._edges),
            "dropped_nodes": self.dropped_nodes,
            "dropped_edges": self.dropped_edges,
            "aliases": len(self._key_index) - len(self._nodes),
        }
