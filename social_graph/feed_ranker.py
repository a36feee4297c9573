"""
Feed Ranker - "What should I see today?"

Scores candidate content for one agent by combining:

    relevance   0.4   focus terms, expanded interests, stuck points
    connection  0.3   direct edge / mutual neighbors / shared community
    recency     0.2   step decay on post age
    activity    0.1   author's adjacency size
    + mutual-friend bonus (max 0.2) + community bonus (0.1)

The sum is not clamped: bonuses stack past 1.0 and the ranking relies on it.
Each item also lands in exactly one section (high_priority, explore,
community, people_you_should_know, serendipity).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .config import FeedConfig
from .graph_store import GraphStore
from .models import SUBMOLT_PREFIX, DailyNeeds, Profile

logger = logging.getLogger("social-graph.feed")

SECTIONS = ("high_priority", "explore", "community", "people_you_should_know", "serendipity")


def expand_keywords(keywords: List[str], expansions: Dict[str, List[str]]) -> List[str]:
    """Lowercased keywords plus their synonyms, de-duplicated in order."""
    out: Dict[str, None] = {}
    for keyword in keywords:
        if not keyword:
            continue
        key = keyword.lower()
        out[key] = None
        for extra in expansions.get(key, ()):
            out[extra] = None
    return list(out)


def parse_timestamp(value) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def recency_score(timestamp, now: datetime) -> float:
    """1.0 under 6h, 0.5 under a day, 0.3 under a week, else 0.1."""
    ts = parse_timestamp(timestamp)
    if ts is None:
        return 0.1
    hours_ago = (now - ts).total_seconds() / 3600
    if hours_ago < 6:
        return 1.0
    if hours_ago < 24:
        return 0.5
    if hours_ago < 168:
        return 0.3
    return 0.1


def activity_score(degree: int) -> float:
    if degree == 0:
        return 0.1
    if degree < 5:
        return 0.3
    if degree < 15:
        return 0.6
    return 1.0


def determine_section(relevance: float, connection_strength: float, mutual_count: int) -> str:
    if relevance > 0.6:
        return "high_priority"
    if 0.3 < connection_strength < 0.7:
        return "explore"
    if connection_strength >= 0.7:
        return "community"
    if mutual_count >= 2:
        return "people_you_should_know"
    return "serendipity"


class FeedRanker:
    """Scores content for one agent against a frozen GraphStore."""

    def __init__(self, store: GraphStore, profile: Profile,
                 daily_needs: Optional[DailyNeeds] = None,
                 config: Optional[FeedConfig] = None,
                 now: Optional[datetime] = None):
        self.store = store
        self.profile = profile
        self.daily_needs = daily_needs
        self.config = config or FeedConfig()
        self.now = now or datetime.now(timezone.utc)
        if self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=timezone.utc)

        self.self_handle = profile.handle or ""
        self.self_key = store.resolve_key(self.self_handle) if self.self_handle else None
        self.interest_keywords = expand_keywords(profile.interests, self.config.expansions)

    # --- Signals ---

    def relevance(self, item: Dict[str, Any]) -> dict:
        """
        Relevance in [0, 1] with the match counts behind it.

        Base is the fraction of primary + curious_about terms found in the
        item's JSON text; interest and stuck-point bonuses are added on top,
        each step capped at 1.0.
        """
        if self.daily_needs is None:
            return {"score": 0.0, "stuck_matches": 0, "interest_matches": 0}

        cfg = self.config
        text = json.dumps(item, default=str, ensure_ascii=False).lower()
        needs = self.daily_needs.focus_terms
        matches = sum(1 for need in needs if need.lower() in text)
        interest_matches = sum(1 for kw in self.interest_keywords if kw in text)
        stuck_matches = sum(1 for s in self.daily_needs.stuck_points if s.lower() in text)

        score = min(matches / max(len(needs), 1), 1.0)
        if interest_matches:
            score = min(1.0, score + min(cfg.interest_bonus_cap, interest_matches * cfg.interest_bonus_step))
        if stuck_matches:
            score = min(1.0, score + cfg.stuck_bonus)

        return {"score": score, "stuck_matches": stuck_matches, "interest_matches": interest_matches}

    def mutual_count(self, author_key: Optional[str]) -> int:
        if not self.self_key or not author_key or author_key == self.self_key:
            return 0
        mine = self.store.neighbor_set(self.self_key)
        return sum(1 for k in self.store.neighbors(author_key) if k in mine and k not in (self.self_key, author_key))

    def _shared_community(self, author_key: Optional[str]) -> bool:
        if not self.self_key or not author_key:
            return False
        me = self.store.node(self.self_key)
        them = self.store.node(author_key)
        return bool(me and them and me.community and me.community == them.community)

    def connection_strength(self, author_key: Optional[str], mutual_count: int) -> float:
        if not self.self_key or not author_key:
            return 0.0
        if self.store.has_edge(self.self_key, author_key):
            for edge in self.store.edges_between(self.self_key, author_key):
                if edge.strength is not None:
                    return edge.strength
            return self.config.default_edge_strength
        if mutual_count > 0:
            return 0.3 + mutual_count * 0.1
        if self._shared_community(author_key):
            return 0.2
        return 0.0

    # --- Scoring ---

    def score_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of item with score, signals, reason and section."""
        return self._score(item)[1]

    def _score(self, item: Dict[str, Any]) -> Tuple[float, Dict[str, Any]]:
        cfg = self.config
        author = item.get("author_handle") or ""
        author_key = self.store.resolve_key(author) if author else None

        rel = self.relevance(item)
        mutual = self.mutual_count(author_key)
        connection = self.connection_strength(author_key, mutual)
        community_match = self._shared_community(author_key)
        submolt = item.get("submolt") if isinstance(item.get("submolt"), str) and item.get("submolt") else None
        recency = recency_score(item.get("timestamp"), self.now)
        activity = activity_score(self.store.degree(author_key) if author_key else 0)

        mutual_bonus = min(mutual * cfg.mutual_bonus_step, cfg.mutual_bonus_cap)
        community_bonus = cfg.community_bonus if (community_match or (submolt and self.self_handle)) else 0.0
        score = (
            rel["score"] * cfg.relevance_weight
            + connection * cfg.connection_weight
            + recency * cfg.recency_weight
            + activity * cfg.activity_weight
            + mutual_bonus
            + community_bonus
        )

        if community_match:
            reason = "Same community"
        elif submolt:
            reason = f"Submolt: {submolt[len(SUBMOLT_PREFIX):] if submolt.startswith(SUBMOLT_PREFIX) else submolt}"
        elif rel["stuck_matches"]:
            reason = f"Matches stuck points ({rel['stuck_matches']})"
        elif mutual:
            reason = f"Mutual connections: {mutual}"
        elif rel["interest_matches"]:
            reason = f"Matches interests ({rel['interest_matches']})"
        else:
            reason = None

        scored = dict(item)
        scored.update({
            "score": round(score, 3),
            "relevance": round(rel["score"], 3),
            "connection_strength": round(connection, 3),
            "mutual_count": mutual,
            "reason": reason,
            "section": determine_section(rel["score"], connection, mutual),
        })
        return score, scored

    def rank(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Score, sort, and filter candidate items.

        Keeps items scoring above min_score, at most max_items of them. When
        nothing clears the floor, the top fallback_items by raw score are
        returned instead so a non-empty candidate list never yields an
        empty feed.
        """
        cfg = self.config
        scored = [self._score(item) for item in items if isinstance(item, dict)]
        scored.sort(key=lambda x: -x[0])

        feed = [s for raw, s in scored if raw > cfg.min_score][:cfg.max_items]
        if not feed:
            feed = [s for _, s in scored[:cfg.fallback_items]]
            if feed:
                logger.info("No items above %.2f; serendipity fallback with %d items", cfg.min_score, len(feed))

        return feed

    def generate_feed(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        feed = self.rank(items)
        logger.debug("Ranked %d candidates into %d feed items", len(items), len(feed))
        return {
            "generated_at": self.now.isoformat(),
            "profile": self.profile.to_dict(),
            "daily_needs": self.daily_needs.to_dict() if self.daily_needs else None,
            "feed": feed,
        }


def group_by_section(feed: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Feed items bucketed by section, in fixed section order."""
    groups = {name: [] for name in SECTIONS}
    for item in feed:
        groups.setdefault(item.get("section", "serendipity"), []).append(item)
    return groups
