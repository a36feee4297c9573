"""
Social Graph Configuration

Defaults for the CLI and the snapshot store come from the environment.
The core never reads them: GraphStore, the algorithms and FeedRanker take
GraphConfig / FeedConfig values explicitly.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

# Data directory used by the JSON loader and the default SQLite file.
# Overridable with SOCIAL_PATH, SOCIAL_DB_URL and SOCIAL_HANDLE.
DEFAULT_CLAWD_PATH = Path.home() / "clawd-work"
DEFAULT_SOCIAL_PATH = DEFAULT_CLAWD_PATH / "social"
DB_FILENAME = "social_graph.db"

# Interest synonyms used when matching a profile's interests against content
INTEREST_EXPANSIONS = {
    "ai": ["artificial intelligence", "ml", "machine learning", "agents", "agent"],
    "web3": ["blockchain", "onchain", "crypto", "token", "tokens"],
    "cryptocurrency": ["crypto", "token", "tokens"],
    "trading": ["trader", "markets", "market", "alpha"],
    "investing": ["investor", "portfolio", "fund"],
    "security": ["secure", "audit", "vulnerability"],
    "vibe coding": ["coding", "builder", "build", "shipping"],
}

TIE_BREAKS = ("first_seen", "lexicographic")


@dataclass(frozen=True)
class GraphConfig:
    """Parameters for centrality and community detection."""
    pagerank_iterations: int = 20
    damping: float = 0.85
    label_iterations: int = 10
    tie_break: str = "first_seen"

    def __post_init__(self):
        if self.tie_break not in TIE_BREAKS:
            raise ValueError(f"tie_break must be one of {TIE_BREAKS}, got {self.tie_break!r}")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"damping must be in [0, 1], got {self.damping}")


@dataclass(frozen=True)
class FeedConfig:
    """Weights and thresholds for feed ranking."""
    relevance_weight: float = 0.4
    connection_weight: float = 0.3
    recency_weight: float = 0.2
    activity_weight: float = 0.1

    # Score floor for the main feed and the size caps
    min_score: float = 0.05
    max_items: int = 20
    fallback_items: int = 5

    interest_bonus_step: float = 0.05
    interest_bonus_cap: float = 0.3
    stuck_bonus: float = 0.2
    mutual_bonus_step: float = 0.05
    mutual_bonus_cap: float = 0.2
    community_bonus: float = 0.1

    default_edge_strength: float = 0.5
    expansions: Dict[str, List[str]] = field(default_factory=lambda: dict(INTEREST_EXPANSIONS))


def get_social_path(path: Optional[str] = None) -> Path:
    """Data directory holding nodes.json / edges.json / posts.json."""
    if path:
        return Path(path).expanduser()
    return Path(os.environ.get("SOCIAL_PATH", str(DEFAULT_SOCIAL_PATH))).expanduser()


def get_db_url(db_url: Optional[str] = None, social_path: Optional[str] = None) -> str:
    """
    Get database URL, preferring an explicit value over the environment.

    Args:
        db_url: Explicit SQLAlchemy URL (e.g. from --db)
        social_path: Data directory for the default SQLite file

    Returns:
        Database connection URL
    """
    if db_url:
        return db_url
    env_url = os.environ.get("SOCIAL_DB_URL")
    if env_url:
        return env_url
    return f"sqlite:///{get_social_path(social_path) / DB_FILENAME}"


def get_self_handle(handle: Optional[str] = None) -> str:
    return handle or os.environ.get("SOCIAL_HANDLE", "")
