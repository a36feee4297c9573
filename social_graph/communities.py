"""
Communities - Label propagation clustering.

Every key starts labelled with itself. Each round walks the keys in store
order and relabels each one with the most common label among its neighbors.
Labels updated earlier in the same round are already visible to later keys.

Tie-breaks:
    first_seen     the first label to reach the winning count, in neighbor
                   order. Neighbor order is the store's insertion order, so
                   the same input gives the same labels, but reordering the
                   edge list can change which community a tied key joins.
    lexicographic  the smallest of the tied labels, independent of order.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from .graph_store import GraphStore

logger = logging.getLogger("social-graph.communities")


def _pick_label(neighbor_labels: List[str], tie_break: str) -> str:
    counts: Dict[str, int] = {}
    for label in neighbor_labels:
        counts[label] = counts.get(label, 0) + 1
    best_count = max(counts.values())
    if tie_break == "lexicographic":
        return min(label for label, c in counts.items() if c == best_count)
    # dicts keep first-insertion order
    for label, c in counts.items():
        if c == best_count:
            return label


def label_propagation(store: GraphStore, iterations: Optional[int] = None,
                      tie_break: Optional[str] = None) -> Dict[str, str]:
    """
    Map each key to its community label.

    Runs at most `iterations` rounds and stops early after a round in which
    no label changed. Isolated keys keep their own key as label.
    """
    if iterations is None:
        iterations = store.config.label_iterations
    tie_break = tie_break or store.config.tie_break
    if tie_break not in ("first_seen", "lexicographic"):
        raise ValueError(f"Unknown tie_break: {tie_break}")

    keys = store.all_keys()
    labels = {k: k for k in keys}

    for round_no in range(iterations):
        changed = 0
        for k in keys:
            neighbors = store.neighbors(k)
            if not neighbors:
                continue
            new_label = _pick_label([labels[n] for n in neighbors], tie_break)
            if new_label != labels[k]:
                labels[k] = new_label
                changed += 1
        if not changed:
            logger.debug("Label propagation converged after %d rounds", round_no + 1)
            break

    return labels


def group_communities(labels: Dict[str, str]) -> Dict[str, List[str]]:
    """label -> member keys, largest community first."""
    groups = defaultdict(list)
    for key, label in labels.items():
        groups[label].append(key)
    return dict(sorted(groups.items(), key=lambda x: -len(x[1])))
