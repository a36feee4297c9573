"""
Importer - Get collector output into memory.

    load_import_file(path)    # .json / .csv export -> (nodes, edges, posts)
    load_social_dir(path)     # nodes.json, edges.json, posts.json, baseline, needs

Files are plain JSON lists/documents written by the collector. A missing or
corrupt file in the data directory reads as empty; an import file in an
unsupported shape raises ImportFormatError.
"""

import csv
import json
import logging
import uuid
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .graph_store import SocialGraphError

logger = logging.getLogger("social-graph.importer")

NODES_FILE = "nodes.json"
EDGES_FILE = "edges.json"
POSTS_FILE = "posts.json"
BASELINE_FILE = "baseline.json"
NEEDS_FILE = "needs-latest.json"


class ImportFormatError(SocialGraphError, ValueError):
    """Import file has an unsupported extension or layout."""


def _generate_id() -> str:
    return f"import-{uuid.uuid4().hex[:9]}"


def _default_handle(name: Optional[str]) -> str:
    slug = "".join((name or "unknown").split()).lower()
    return f"@{slug or 'unknown'}"


def _agent_record(item: dict) -> dict:
    node_id = item.get("did") or item.get("id")
    return {
        "id": node_id or _generate_id(),
        "name": item.get("name") or "Unknown",
        "handle": item.get("handle") or _default_handle(item.get("name")),
        "did": node_id,
        "privacy": "graph",
    }


def load_import_file(path) -> Tuple[List[dict], List[dict], List[dict]]:
    """
    Parse an exported graph file.

    JSON layouts:
        [ {name, handle, did}, ... ]           # bare agent list
        {"agents": [...], "edges": [...], "posts": [...]}
        {"nodes": [...], "edges": [...], "posts": [...]}

    CSV: header row, then name,handle,did per line.

    Returns:
        (nodes, edges, posts) as lists of dicts
    """
    path = Path(path)
    ext = path.suffix.lower()

    if ext == ".json":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ImportFormatError(f"Invalid JSON in {path}: {e}") from e

        if isinstance(data, list):
            nodes = [_agent_record(item) for item in data if isinstance(item, dict)]
            return nodes, [], []
        if not isinstance(data, dict):
            raise ImportFormatError(f"Unrecognized JSON layout in {path}")
        if "agents" in data:
            nodes = data.get("agents") or []
        elif "nodes" in data:
            nodes = data.get("nodes") or []
        else:
            raise ImportFormatError(f"{path} has neither 'nodes' nor 'agents'")
        return list(nodes), list(data.get("edges") or []), list(data.get("posts") or [])

    if ext == ".csv":
        nodes = []
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                rows = list(csv.reader(f))
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"{path} is not UTF-8 text: {e}") from e
        for row in rows[1:]:  # skip header
            row = [cell.strip() for cell in row]
            name = row[0] if row else ""
            if not name:
                continue
            handle = row[1] if len(row) > 1 and row[1] else None
            did = row[2] if len(row) > 2 and row[2] else None
            nodes.append(_agent_record({"name": name, "handle": handle, "did": did}))
        return nodes, [], []

    raise ImportFormatError(f"Unsupported file type: {ext or path.name}. Use .json or .csv")


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return default


def load_social_dir(social_path) -> dict:
    """
    Read everything the collector and parsers left in the data directory.

    Returns:
        Dict with nodes, edges, posts (lists), baseline and daily_needs
        (dicts or None)
    """
    social_path = Path(social_path)
    data = {
        "nodes": _read_json(social_path / NODES_FILE, []),
        "edges": _read_json(social_path / EDGES_FILE, []),
        "posts": _read_json(social_path / POSTS_FILE, []),
        "baseline": _read_json(social_path / BASELINE_FILE, None),
        "daily_needs": _read_json(social_path / NEEDS_FILE, None),
    }
    for name in ("nodes", "edges", "posts"):
        if not isinstance(data[name], list):
            logger.warning("%s in %s is not a list; ignoring", name, social_path)
            data[name] = []
    return data


def write_social_dir(social_path, nodes: list, edges: list, posts: list) -> Path:
    """Write an imported graph back out as the collector's JSON files."""
    social_path = Path(social_path)
    social_path.mkdir(parents=True, exist_ok=True)
    for filename, payload in ((NODES_FILE, nodes), (EDGES_FILE, edges), (POSTS_FILE, posts)):
        with open(social_path / filename, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
    return social_path
