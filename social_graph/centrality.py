"""
Centrality Metrics - Degree, PageRank, Betweenness.

All three run over GraphStore's undirected adjacency and score every key the
store knows, ghost keys included.

Usage:
    scores = page_rank(store)
    for key, score in top_n(scores, 10):
        print(key, score)
"""

from collections import deque
from typing import Dict, List, Optional, Tuple

from .graph_store import GraphStore


def degree_centrality(store: GraphStore) -> Dict[str, int]:
    """Adjacency-set size per key."""
    return {k: store.degree(k) for k in store.all_keys()}


def page_rank(store: GraphStore, iterations: Optional[int] = None,
              damping: Optional[float] = None) -> Dict[str, float]:
    """
    Power-iteration PageRank with a fixed number of rounds.

    Each round every key restarts at (1 - damping) / N and receives
    damping * rank / out_degree from each neighbor. An isolated key uses an
    out-degree of 1 and has no neighbors to give to, so its mass leaks; the
    ranks are not renormalized. There is no convergence test.
    """
    if iterations is None:
        iterations = store.config.pagerank_iterations
    if damping is None:
        damping = store.config.damping

    keys = store.all_keys()
    if not keys:
        return {}
    n = len(keys)
    base = (1.0 - damping) / n
    rank = {k: 1.0 / n for k in keys}

    for _ in range(iterations):
        new_rank = {k: base for k in keys}
        for k in keys:
            neighbors = store.neighbors(k)
            share = damping * rank[k] / (len(neighbors) or 1)
            for neighbor in neighbors:
                new_rank[neighbor] += share
        rank = new_rank

    return rank


def betweenness_centrality(store: GraphStore) -> Dict[str, float]:
    """
    Unnormalized betweenness via Brandes' algorithm.

    One BFS per source. Since the graph is undirected, every unordered pair
    is counted once from each end, so values are twice the conventional
    undirected figure.
    """
    keys = store.all_keys()
    scores = {k: 0.0 for k in keys}

    for source in keys:
        stack = []
        preds = {source: []}
        sigma = {source: 1}
        dist = {source: 0}
        queue = deque([source])

        while queue:
            v = queue.popleft()
            stack.append(v)
            for w in store.neighbors(v):
                if w not in dist:
                    dist[w] = dist[v] + 1
                    sigma[w] = 0
                    preds[w] = []
                    queue.append(w)
                if dist[w] == dist[v] + 1:
                    sigma[w] += sigma[v]
                    preds[w].append(v)

        delta = dict.fromkeys(stack, 0.0)
        while stack:
            w = stack.pop()
            for v in preds[w]:
                delta[v] += (sigma[v] / sigma[w]) * (1.0 + delta[w])
            if w != source:
                scores[w] += delta[w]

    return scores


def top_n(scores: Dict[str, float], n: int = 10) -> List[Tuple[str, float]]:
    """Highest-scoring (key, score) pairs; ties keep the store's key order."""
    return sorted(scores.items(), key=lambda x: -x[1])[:n]


METRICS = {
    "degree": degree_centrality,
    "pagerank": page_rank,
    "betweenness": betweenness_centrality,
}


def compute(store: GraphStore, metric: str = "pagerank") -> Dict[str, float]:
    """Dispatch by metric name; unknown names raise ValueError."""
    try:
        fn = METRICS[metric]
    except KeyError:
        raise ValueError(f"Unknown metric: {metric}. Available: {', '.join(METRICS)}") from None
    return fn(store)
