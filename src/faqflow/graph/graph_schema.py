from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple
from uuid import uuid4


LEVEL_COLORS: Dict[int, str] = {
    1: "#3b82f6",
    2: "#10b981",
    3: "#f59e0b",
    4: "#ef4444",
}
FALLBACK_COLOR = "#6b7280"
LEVELS = tuple(sorted(LEVEL_COLORS))

# Keys a snapshot record's `data` maps onto Node/CardContent. Opaque `extra`
# attributes may not use them, or they would be read back as real fields.
RECORD_KEYS = frozenset(
    {
        "title",
        "description",
        "url",
        "content",
        "subtitle",
        "displayConfig",
        "level",
        "order",
        "status",
        "parent",
        "parentId",
        "children",
        "childrens",
    }
)


def level_color(level: Any) -> str:
    return LEVEL_COLORS.get(level, FALLBACK_COLOR)


def level_label(level: Any) -> str:
    return f"N{level}" if level in LEVEL_COLORS else "unknown level"


class CardStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


@dataclass(frozen=True)
class DisplayConfig:
    """
    Channel visibility of a card. Passed through, never interpreted.
    """

    is_enabled_on_non_business_day: bool = False
    enabled_on_channels: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isEnabledOnNonBusinessDay": self.is_enabled_on_non_business_day,
            "enabledOnChannels": list(self.enabled_on_channels),
        }

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "DisplayConfig":
        return DisplayConfig(
            is_enabled_on_non_business_day=bool(
                raw.get("isEnabledOnNonBusinessDay", False)
            ),
            enabled_on_channels=tuple(raw.get("enabledOnChannels") or ()),
        )


@dataclass(frozen=True)
class CardContent:
    """
    Free-form content attached to a card.

    Kept apart from identity and relational metadata. `extra` carries
    opaque attributes (tags, html, multimedia, ...) verbatim.
    """

    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    subtitle: Optional[Dict[str, Any]] = None
    display_config: Optional[DisplayConfig] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Node:
    """
    A card in the FAQ forest.

    Records are immutable; the store swaps in a new record on change.
    """

    id: str
    level: int
    order: float
    payload: CardContent
    status: str = CardStatus.DRAFT.value
    parent_id: Optional[str] = None
    children: Tuple[str, ...] = ()

    @property
    def title(self) -> str:
        return self.payload.title

    @property
    def color(self) -> str:
        return level_color(self.level)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def with_parent(self, parent_id: Optional[str]) -> "Node":
        return replace(self, parent_id=parent_id)

    def with_children(self, children: Tuple[str, ...]) -> "Node":
        return replace(self, children=tuple(children))

    @staticmethod
    def create(
        level: int,
        title: str,
        order: float = 0,
        *,
        description: Optional[str] = None,
        url: Optional[str] = None,
        content: Optional[str] = None,
        subtitle: Optional[Dict[str, Any]] = None,
        display_config: Optional[DisplayConfig] = None,
        status: str = CardStatus.DRAFT.value,
        extra: Optional[Dict[str, Any]] = None,
    ) -> "Node":
        return Node(
            id=f"node-{uuid4().hex}",
            level=level,
            order=order,
            payload=CardContent(
                title=title,
                description=description,
                url=url,
                content=content,
                subtitle=subtitle,
                display_config=display_config,
                extra=dict(extra or {}),
            ),
            status=status,
        )


EdgeKind = Literal["relation", "connection"]


def edge_id(source: str, target: str) -> str:
    return f"edge-{source}-{target}"


@dataclass(frozen=True)
class Edge:
    """
    Directed visual connection between two cards.

    `relation` edges mirror a parent/child link; `connection` edges
    are explicit user-drawn links with no structural meaning.
    """

    id: str
    source: str
    target: str
    kind: EdgeKind
    color: str

    source_slot: Optional[int] = None
    target_slot: Optional[int] = None

    @staticmethod
    def create(
        source: str,
        target: str,
        kind: EdgeKind,
        color: str,
        source_slot: Optional[int] = None,
        target_slot: Optional[int] = None,
    ) -> "Edge":
        return Edge(
            id=edge_id(source, target),
            source=source,
            target=target,
            kind=kind,
            color=color,
            source_slot=source_slot,
            target_slot=target_slot,
        )

    @property
    def is_relation(self) -> bool:
        return self.kind == "relation"
