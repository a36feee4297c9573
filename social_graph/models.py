"""
Social Graph - Data Models

Nodes, edges, and the externally produced profile / daily-needs records.
Parsing is tolerant: collectors hand over loose dicts, and anything that
cannot be keyed is dropped rather than raising.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

TAG_PREFIX = "#tag:"
SUBMOLT_PREFIX = "#submolt:"


class NodeKind(str, Enum):
    AGENT = "agent"
    TAG = "tag"
    SUBMOLT = "submolt"       # Moltbook community marker


class EdgeType(str, Enum):
    MENTION = "mention"
    COMMENT = "comment"
    TAG = "tag"
    SUBMOLT = "submolt"
    PROOF = "proof"           # Recorded proof-of-interaction
    PAYMENT = "payment"       # Recorded reward settlement

    @classmethod
    def parse(cls, value) -> Optional["EdgeType"]:
        try:
            return cls(value)
        except ValueError:
            return None


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _at_forms(value: Optional[str]) -> Tuple[str, ...]:
    """"@"-prefixed and bare spellings of an account identifier."""
    if not value or value.startswith("#"):
        return ()
    bare = value.lstrip("@")
    if not bare:
        return ()
    return (f"@{bare}", bare)


def _str_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value if v]


@dataclass(frozen=True)
class Node:
    key: str
    name: str = ""
    kind: NodeKind = NodeKind.AGENT
    community: Optional[str] = None
    aliases: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Node"]:
        """
        Build a node from a collector record.

        The key is the first of key / handle / id / did that is present.
        Every other identifier becomes an alias. The key and the handle are
        also registered in both their "@"-prefixed and bare forms, so an
        edge may name the node either way.
        """
        if not isinstance(data, dict):
            return None
        handle = _clean(data.get("handle"))
        node_id = _clean(data.get("id"))
        did = _clean(data.get("did"))
        key = _clean(data.get("key")) or handle or node_id or did
        if not key:
            return None

        key_forms = _at_forms(key) if key not in (node_id, did) else ()
        aliases = []
        for alias in (node_id, did, handle, *key_forms, *_at_forms(handle)):
            if alias and alias != key and alias not in aliases:
                aliases.append(alias)

        kind = _parse_kind(data.get("kind") or data.get("type"), key)
        return cls(
            key=key,
            name=_clean(data.get("name")) or key,
            kind=kind,
            community=_clean(data.get("community")),
            aliases=tuple(aliases),
        )

    def to_dict(self) -> dict:
        d = {"key": self.key, "name": self.name, "kind": self.kind.value}
        if self.community:
            d["community"] = self.community
        if self.aliases:
            d["aliases"] = list(self.aliases)
        return d


def _parse_kind(value, key: str) -> NodeKind:
    if value:
        try:
            return NodeKind(value)
        except ValueError:
            pass
    if key.startswith(TAG_PREFIX):
        return NodeKind.TAG
    if key.startswith(SUBMOLT_PREFIX):
        return NodeKind.SUBMOLT
    return NodeKind.AGENT


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    type: Optional[EdgeType] = None
    timestamp: Optional[str] = None
    context: Optional[str] = None
    strength: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Edge"]:
        """Returns None for an edge missing either endpoint."""
        if not isinstance(data, dict):
            return None
        source = _clean(data.get("from"))
        target = _clean(data.get("to"))
        if not source or not target:
            return None
        return cls(
            source=source,
            target=target,
            type=EdgeType.parse(data.get("type")),
            timestamp=_clean(data.get("timestamp")),
            context=_clean(data.get("context")),
            strength=_parse_strength(data.get("strength")),
        )

    def with_endpoints(self, source: str, target: str) -> "Edge":
        return Edge(source, target, self.type, self.timestamp, self.context, self.strength)

    def to_dict(self) -> dict:
        d = {"from": self.source, "to": self.target}
        if self.type:
            d["type"] = self.type.value
        if self.timestamp:
            d["timestamp"] = self.timestamp
        if self.context:
            d["context"] = self.context
        if self.strength is not None:
            d["strength"] = self.strength
        return d


def _parse_strength(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Profile:
    """Who the agent is. Produced by the baseline parser."""
    name: str = "Unknown"
    handle: str = ""
    interests: List[str] = field(default_factory=list)
    core_strengths: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Profile":
        """Accepts a flat profile or a nested baseline.json document."""
        data = data or {}
        identity = data.get("identity") or {}
        agent = data.get("agent") or {}
        capabilities = data.get("capabilities") or {}
        return cls(
            name=data.get("name") or identity.get("name") or agent.get("name") or "Unknown",
            handle=data.get("handle") or agent.get("amikonet_handle") or agent.get("handle") or "",
            interests=_str_list(data.get("interests") or capabilities.get("interests")),
            core_strengths=_str_list(data.get("core_strengths") or capabilities.get("core_strengths")),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "handle": self.handle,
            "interests": list(self.interests),
            "core_strengths": list(self.core_strengths),
        }


@dataclass
class DailyNeeds:
    """What the agent needs today. Produced by the daily-needs extractor."""
    primary: List[str] = field(default_factory=list)
    secondary: List[str] = field(default_factory=list)
    curious_about: List[str] = field(default_factory=list)
    stuck_points: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["DailyNeeds"]:
        """Accepts a flat record or one wrapped in current_focus."""
        if not data:
            return None
        focus = data.get("current_focus") or data
        return cls(
            primary=_str_list(focus.get("primary")),
            secondary=_str_list(focus.get("secondary")),
            curious_about=_str_list(focus.get("curious_about")),
            stuck_points=_str_list(focus.get("stuck_points")),
        )

    @property
    def focus_terms(self) -> List[str]:
        return self.primary + self.curious_about

    def to_dict(self) -> dict:
        return {
            "primary": list(self.primary),
            "secondary": list(self.secondary),
            "curious_about": list(self.curious_about),
            "stuck_points": list(self.stuck_points),
        }
