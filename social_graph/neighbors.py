"""
Neighbor Queries - BFS over the undirected adjacency index.

    k_hop_neighbors(store, node, hops)   # Everything within N hops + induced edges
    shortest_path(store, a, b)           # Unweighted BFS path, [] if unreachable
    common_neighbors(store, a, b)        # Adjacency intersection

All three raise NodeNotFound when an identifier does not resolve.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import List

from .graph_store import GraphStore
from .models import Edge, Node


@dataclass
class Neighborhood:
    start_key: str
    hops: int
    keys: List[str] = field(default_factory=list)      # BFS discovery order
    nodes: List[Node] = field(default_factory=list)    # Declared nodes only
    edges: List[Edge] = field(default_factory=list)    # Both endpoints reached

    def to_dict(self) -> dict:
        return {
            "start_key": self.start_key,
            "hops": self.hops,
            "keys": list(self.keys),
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


def k_hop_neighbors(store: GraphStore, node: str, hops: int = 1) -> Neighborhood:
    """
    Expand from node for exactly `hops` BFS rounds.

    hops=0 returns only the start key and no edges. The returned edge list
    is the subgraph induced by the reached keys.
    """
    start_key = store.require_key(node)
    visited = {start_key: None}
    frontier = [start_key]

    for _ in range(max(hops, 0)):
        next_frontier = []
        for current in frontier:
            for neighbor in store.neighbors(current):
                if neighbor not in visited:
                    visited[neighbor] = None
                    next_frontier.append(neighbor)
        if not next_frontier:
            break
        frontier = next_frontier

    reached = list(visited)
    nodes = [store.node(k) for k in reached if store.node(k) is not None]
    if hops <= 0:
        edges = []
    else:
        edges = [e for e in store.edges if e.source in visited and e.target in visited]
    return Neighborhood(start_key=start_key, hops=hops, keys=reached, nodes=nodes, edges=edges)


def shortest_path(store: GraphStore, a: str, b: str) -> List[str]:
    """
    Shortest unweighted path from a to b, endpoints included.

    Ties go to whichever neighbor the adjacency index lists first. An empty
    list means b is not reachable from a.
    """
    from_key = store.require_key(a)
    to_key = store.require_key(b)
    if from_key == to_key:
        return [from_key]

    prev = {from_key: None}
    queue = deque([from_key])
    while queue:
        current = queue.popleft()
        if current == to_key:
            break
        for neighbor in store.neighbors(current):
            if neighbor not in prev:
                prev[neighbor] = current
                queue.append(neighbor)

    if to_key not in prev:
        return []

    path = []
    cursor = to_key
    while cursor is not None:
        path.append(cursor)
        cursor = prev[cursor]
    path.reverse()
    return path


def common_neighbors(store: GraphStore, a: str, b: str) -> List[str]:
    """Keys adjacent to both a and b, in a's adjacency order."""
    a_key = store.require_key(a)
    b_key = store.require_key(b)
    b_neighbors = store.neighbor_set(b_key)
    return [k for k in store.neighbors(a_key) if k in b_neighbors]
