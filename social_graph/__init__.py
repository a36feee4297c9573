"""
Social Graph - Who is connected to whom, and what to read today.

Graph queries, centrality, communities and feed ranking over an agent social
graph (AmikoNet / Moltbook accounts, tags and submolts).

Quick Start:
    from social_graph import GraphStore, shortest_path, page_rank, FeedRanker, Profile

    store = GraphStore(nodes, edges)
    shortest_path(store, "@drift", "@spin")
    page_rank(store)

    ranker = FeedRanker(store, Profile(name="Drift", handle="@drift", interests=["ai"]))
    feed = ranker.generate_feed(posts)["feed"]
"""

from .centrality import betweenness_centrality, degree_centrality, page_rank, top_n
from .communities import group_communities, label_propagation
from .config import FeedConfig, GraphConfig
from .feed_ranker import FeedRanker, determine_section
from .graph_store import GraphStore, NodeNotFound, SocialGraphError
from .models import DailyNeeds, Edge, EdgeType, Node, NodeKind, Profile
from .neighbors import Neighborhood, common_neighbors, k_hop_neighbors, shortest_path

__version__ = "0.1.0"
__all__ = [
    "GraphStore",
    "NodeNotFound",
    "SocialGraphError",
    "GraphConfig",
    "FeedConfig",
    "Node",
    "Edge",
    "NodeKind",
    "EdgeType",
    "Profile",
    "DailyNeeds",
    "Neighborhood",
    "k_hop_neighbors",
    "shortest_path",
    "common_neighbors",
    "degree_centrality",
    "page_rank",
    "betweenness_centrality",
    "top_n",
    "label_propagation",
    "group_communities",
    "FeedRanker",
    "determine_section",
]
