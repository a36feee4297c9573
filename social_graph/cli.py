#!/usr/bin/env python3
"""
Social Graph CLI

Usage:
    social-graph import <file.json|file.csv>       # Load an export into the snapshot DB
    social-graph neighbors <node> [--hops N]       # N-hop neighborhood
    social-graph path <a> <b>                      # Shortest path
    social-graph common <a> <b>                    # Common neighbors
    social-graph centrality [--metric M] [--top N] # degree | pagerank | betweenness
    social-graph communities [--iterations N]      # Label propagation
    social-graph feed [--handle @me]               # Ranked feed
    social-graph status                            # Snapshot + run timestamps
    social-graph visualize [--output graph.png]    # Static PNG

Graph data is read from the snapshot DB (--db / SOCIAL_DB_URL) when it holds
nodes, otherwise from nodes.json / edges.json / posts.json in the data
directory (--social-path / SOCIAL_PATH).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .centrality import compute, top_n
from .communities import group_communities, label_propagation
from .config import GraphConfig, get_db_url, get_self_handle, get_social_path
from .feed_ranker import FeedRanker, group_by_section
from .graph_store import GraphStore, SocialGraphError
from .importer import load_import_file, load_social_dir, write_social_dir
from .models import DailyNeeds, Profile
from .neighbors import common_neighbors, k_hop_neighbors, shortest_path
from .storage import SocialGraphDB, database_exists

logger = logging.getLogger("social-graph.cli")

SECTION_TITLES = {
    "high_priority": "HIGH PRIORITY",
    "explore": "EXPLORE",
    "community": "COMMUNITY",
    "people_you_should_know": "PEOPLE YOU SHOULD KNOW",
    "serendipity": "SERENDIPITY",
}


def load_graph_data(args) -> dict:
    """Snapshot DB first, JSON data directory as fallback."""
    social_path = get_social_path(args.social_path)
    data = load_social_dir(social_path)
    db_url = get_db_url(args.db, args.social_path)
    # Queries never create the SQLite file
    db = SocialGraphDB(db_url) if database_exists(db_url) else None
    nodes = db.load_nodes() if db else []
    if nodes:
        data["nodes"] = nodes
        data["edges"] = db.load_edges()
        data["posts"] = db.load_posts()
        logger.debug("Loaded graph from %s", db.db_url)
    else:
        logger.debug("Snapshot DB empty; using %s", social_path)
    data["db"] = db
    return data


def open_db(args, data: dict) -> SocialGraphDB:
    return data["db"] or SocialGraphDB(get_db_url(args.db, args.social_path))


def build_store(args, data: dict) -> GraphStore:
    config = GraphConfig(
        label_iterations=getattr(args, "iterations", None) or GraphConfig.label_iterations,
        tie_break=getattr(args, "tie_break", None) or GraphConfig.tie_break,
    )
    return GraphStore(data["nodes"], data["edges"], config=config)


def _emit(args, payload, text: str):
    if args.json:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


# --- Commands ---

def cmd_import(args) -> int:
    nodes, edges, posts = load_import_file(args.file)
    db = SocialGraphDB(get_db_url(args.db, args.social_path))
    counts = db.save_snapshot(nodes, edges, posts, source="import")
    write_social_dir(get_social_path(args.social_path), nodes, edges, posts)
    _emit(args, counts,
          f"Imported {counts['nodes']} agents, {counts['edges']} relationships, {counts['posts']} posts")
    return 0


def cmd_neighbors(args) -> int:
    store = build_store(args, load_graph_data(args))
    hood = k_hop_neighbors(store, args.node, hops=args.hops)
    lines = [f"Neighbors of {hood.start_key} within {hood.hops} hop(s): {len(hood.keys) - 1}"]
    for key in hood.keys[1:]:
        lines.append(f"  {key}{' (ghost)' if store.is_ghost(key) else ''}")
    lines.append(f"Edges in neighborhood: {len(hood.edges)}")
    _emit(args, hood.to_dict(), "\n".join(lines))
    return 0


def cmd_path(args) -> int:
    store = build_store(args, load_graph_data(args))
    path = shortest_path(store, args.a, args.b)
    if path:
        text = f"Path ({len(path) - 1} hops): " + " -> ".join(path)
    else:
        text = f"No path between {args.a} and {args.b}."
    _emit(args, {"from": args.a, "to": args.b, "path": path}, text)
    return 0


def cmd_common(args) -> int:
    store = build_store(args, load_graph_data(args))
    common = common_neighbors(store, args.a, args.b)
    lines = [f"Common neighbors: {len(common)}"] + [f"  {k}" for k in common]
    _emit(args, {"a": args.a, "b": args.b, "common": common}, "\n".join(lines))
    return 0


def cmd_centrality(args) -> int:
    store = build_store(args, load_graph_data(args))
    ranked = top_n(compute(store, args.metric), args.top)
    lines = [f"Centrality ({args.metric}) top {args.top}:"]
    for key, score in ranked:
        lines.append(f"  {key}: {score:.4f}" if isinstance(score, float) else f"  {key}: {score}")
    _emit(args, {"metric": args.metric, "results": ranked}, "\n".join(lines))
    return 0


def cmd_communities(args) -> int:
    store = build_store(args, load_graph_data(args))
    groups = group_communities(label_propagation(store))
    lines = [f"Communities found: {len(groups)}"]
    for label, members in list(groups.items())[:10]:
        lines.append(f"  {label}: {len(members)} members")
    _emit(args, {"communities": groups}, "\n".join(lines))
    return 0


def format_feed(result: dict) -> str:
    profile = result["profile"]
    lines = [
        f"YOUR FEED - {result['generated_at'].split('T')[0]}",
        f"You: {profile['name']}",
    ]
    if profile.get("core_strengths"):
        lines.append(f"Strengths: {', '.join(profile['core_strengths'])}")
    needs = result.get("daily_needs")
    if needs:
        lines.append(f"Focus: {', '.join(needs['primary']) or '-'}")
        if needs["curious_about"]:
            lines.append(f"Curious: {', '.join(needs['curious_about'])}")
    lines.append("")
    lines.append("Scoring weights: relevance 40%, connection 30%, recency 20%, activity 10%")

    for section, items in group_by_section(result["feed"]).items():
        if not items:
            continue
        lines.append("")
        lines.append(SECTION_TITLES.get(section, section.upper()))
        for item in items[:5]:
            lines.append(f"  {item.get('author_handle', '?')} - {round(item['score'] * 100)}% match")
            lines.append(f"    relevance:{round(item['relevance'] * 100)}% "
                         f"connection:{round(item['connection_strength'] * 100)}%")
            if item.get("reason"):
                lines.append(f"    -> {item['reason']}")
            preview = item.get("preview") or item.get("title") or item.get("content")
            if isinstance(preview, str) and preview:
                lines.append(f"    \"{preview[:60]}...\"")

    if not result["feed"]:
        lines.append("No recommendations yet. Import or collect graph data first.")
    return "\n".join(lines)


def cmd_feed(args) -> int:
    data = load_graph_data(args)
    handle = get_self_handle(args.handle)
    if not data["baseline"] and not handle:
        print("Baseline not found and no --handle or SOCIAL_HANDLE given.", file=sys.stderr)
        return 1
    profile = Profile.from_dict(data["baseline"])
    if handle:
        profile.handle = handle

    store = build_store(args, data)
    ranker = FeedRanker(store, profile, DailyNeeds.from_dict(data["daily_needs"]))
    result = ranker.generate_feed(data["posts"])
    open_db(args, data).record_feed(len(result["feed"]))
    _emit(args, result, format_feed(result))
    return 0


def cmd_status(args) -> int:
    data = load_graph_data(args)
    if data["db"]:
        status = data["db"].get_status()
    else:
        status = {"nodes": 0, "edges": 0, "posts": 0, "collection": None, "feed": None}
    store = build_store(args, data)
    status["graph"] = store.stats()
    collection = status["collection"]
    feed = status["feed"]
    lines = [
        "Social Graph Status",
        f"  Collection: {collection['ran_at'] + ' (' + collection['source'] + ')' if collection else 'Never collected'}",
        f"  Graph: {status['graph']['nodes']} nodes, {status['graph']['ghost_nodes']} ghosts, "
        f"{status['graph']['edges']} edges ({status['graph']['dropped_edges']} dropped)",
        f"  Posts: {len(data['posts'])}",
        f"  Feed: {feed['generated_at'] + ' (' + str(feed['items_count']) + ' items)' if feed else 'Never generated'}",
        f"  Baseline: {'found' if data['baseline'] else 'missing'}",
    ]
    _emit(args, status, "\n".join(lines))
    return 0


def cmd_visualize(args) -> int:
    from .visualizer import render_png

    store = build_store(args, load_graph_data(args))
    output = Path(args.output) if args.output else get_social_path(args.social_path) / "viz" / "graph.png"
    saved = render_png(store, label_propagation(store), output)
    if saved is None:
        print("No graph data. Import or collect first.", file=sys.stderr)
        return 1
    _emit(args, {"output": str(saved)}, f"Graph saved to {saved}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="social-graph", description="Social graph queries and feed ranking")
    parser.add_argument("--social-path", help="Data directory (default: SOCIAL_PATH or ~/clawd-work/social)")
    parser.add_argument("--db", help="Snapshot database URL (default: SOCIAL_DB_URL or SQLite in data dir)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="Import a .json or .csv export")
    p.add_argument("file")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("neighbors", help="N-hop neighborhood of a node")
    p.add_argument("node")
    p.add_argument("--hops", type=int, default=1)
    p.set_defaults(func=cmd_neighbors)

    p = sub.add_parser("path", help="Shortest path between two nodes")
    p.add_argument("a")
    p.add_argument("b")
    p.set_defaults(func=cmd_path)

    p = sub.add_parser("common", help="Common neighbors of two nodes")
    p.add_argument("a")
    p.add_argument("b")
    p.set_defaults(func=cmd_common)

    p = sub.add_parser("centrality", help="Rank nodes by centrality")
    p.add_argument("--metric", choices=["degree", "pagerank", "betweenness"], default="pagerank")
    p.add_argument("--top", type=int, default=10)
    p.set_defaults(func=cmd_centrality)

    p = sub.add_parser("communities", help="Label propagation communities")
    p.add_argument("--iterations", type=int, default=10)
    p.add_argument("--tie-break", choices=["first_seen", "lexicographic"], default="first_seen")
    p.set_defaults(func=cmd_communities)

    p = sub.add_parser("feed", help="Generate the ranked feed")
    p.add_argument("--handle", help="Your handle (default: baseline or SOCIAL_HANDLE)")
    p.set_defaults(func=cmd_feed)

    p = sub.add_parser("status", help="Snapshot and run status")
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("visualize", aliases=["viz"], help="Render the graph to PNG")
    p.add_argument("--output", help="PNG path (default: <social-path>/viz/graph.png)")
    p.set_defaults(func=cmd_visualize)

    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    try:
        return args.func(args)
    except SocialGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
