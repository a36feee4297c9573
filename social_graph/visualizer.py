"""
Graph Visualizer - Social graph as a static PNG.

- Nodes = agents, tags, submolts and ghost keys (sized by degree)
- Colors = label-propagation community (largest communities get the palette)
- Layout = force-directed spring layout, fixed seed

Usage:
    labels = label_propagation(store)
    render_png(store, labels, Path("viz/graph.png"))
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import networkx as nx

from .communities import group_communities
from .graph_store import GraphStore

logger = logging.getLogger("social-graph.visualizer")

COMMUNITY_COLORS = [
    "#1DA1F2",  # blue
    "#9146FF",  # purple
    "#238636",  # green
    "#F7931A",  # orange
    "#FF6B6B",  # coral
    "#FFE66D",  # yellow
    "#00D4AA",  # teal
    "#A855F7",  # violet
]
OTHER_COLOR = "#888888"


def to_networkx(store: GraphStore) -> nx.Graph:
    """Undirected networkx graph of every key and edge in the store."""
    graph = nx.Graph()
    for key in store.all_keys():
        node = store.node(key)
        graph.add_node(
            key,
            name=node.name if node else key,
            kind=node.kind.value if node else "ghost",
        )
    for edge in store.edges:
        graph.add_edge(edge.source, edge.target)
    return graph


def community_colors(labels: Dict[str, str]) -> Dict[str, str]:
    palette = {}
    for i, label in enumerate(group_communities(labels)):
        if i >= len(COMMUNITY_COLORS):
            break
        palette[label] = COMMUNITY_COLORS[i]
    return {key: palette.get(label, OTHER_COLOR) for key, label in labels.items()}


def render_png(store: GraphStore, labels: Dict[str, str], output_path: Path,
               title: str = "Social Graph", top_labels: int = 15) -> Optional[Path]:
    """Draw the graph and save it; returns None for an empty graph."""
    graph = to_networkx(store)
    if graph.number_of_nodes() == 0:
        logger.warning("No nodes to visualize")
        return None

    fig, ax = plt.subplots(1, 1, figsize=(16, 12), facecolor="#0d1117")
    ax.set_facecolor("#0d1117")

    logger.info("Computing layout for %d nodes, %d edges", graph.number_of_nodes(), graph.number_of_edges())
    pos = nx.spring_layout(graph, k=2.0, iterations=100, seed=42)

    degrees = dict(graph.degree())
    max_degree = max(degrees.values()) or 1
    node_sizes = [200 + (degrees[n] / max_degree) * 1500 for n in graph.nodes()]
    colors = community_colors(labels)
    node_colors = [colors.get(n, OTHER_COLOR) for n in graph.nodes()]

    nx.draw_networkx_edges(graph, pos, ax=ax, edge_color="#58a6ff", width=0.8, alpha=0.3)
    nx.draw_networkx_nodes(
        graph, pos, ax=ax,
        node_size=node_sizes,
        node_color=node_colors,
        alpha=0.9,
        edgecolors="#ffffff",
        linewidths=0.5,
    )

    top = sorted(degrees.items(), key=lambda x: -x[1])[:top_labels]
    nx.draw_networkx_labels(
        graph, pos, {n: n[:16] for n, _ in top}, ax=ax,
        font_size=7, font_color="#ffffff", font_weight="bold",
    )

    ax.set_title(title, fontsize=16, fontweight="bold", color="#ffffff", pad=20)
    stats_text = (f"Nodes: {graph.number_of_nodes()} | Edges: {graph.number_of_edges()} | "
                  f"Communities: {len(set(labels.values()))} | "
                  f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
    ax.annotate(stats_text, xy=(0.5, 0.02), xycoords="axes fraction",
                ha="center", fontsize=9, color="#8b949e")
    ax.axis("off")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches="tight", facecolor="#0d1117", edgecolor="none")
    plt.close(fig)

    logger.info("Saved: %s", output_path)
    return output_path
