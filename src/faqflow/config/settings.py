from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

# ---------------------------------------------------------------------
# Layout geometry
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LayoutConfig:
    """
    Geometry of the centered tidy-tree layout.

    Distances are in canvas pixels; positions refer to the
    top-left corner of a card.
    """

    node_width: float = 256.0
    gutter: float = 44.0
    vertical_spacing: float = 200.0
    margin_x: float = 0.0
    margin_top: float = 50.0
    canvas_width: Optional[float] = None

    @property
    def horizontal_spacing(self) -> float:
        return self.node_width + self.gutter


# ---------------------------------------------------------------------
# Mutation policy
# ---------------------------------------------------------------------


DeletePolicy = Literal["orphan", "promote", "cascade"]


@dataclass(frozen=True)
class MutationConfig:
    """
    Controls how the editor treats structural edits.

    delete_policy decides what happens to the children of a deleted card:
    - orphan:  they keep pointing at the deleted id
    - promote: they move up to the grandparent (or become roots)
    - cascade: the whole subtree is deleted
    """

    delete_policy: DeletePolicy = "orphan"
    save_on_update: bool = True


# ---------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PersistenceConfig:
    snapshot_path: str = "data/faqs.json"
    api_url: Optional[str] = None
    timeout_s: float = 20.0


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class FaqflowConfig:
    """
    Root configuration object for faqflow.

    Constructed explicitly and handed to the editor session;
    never read from module globals.
    """

    layout: LayoutConfig = field(default_factory=LayoutConfig)
    mutation: MutationConfig = field(default_factory=MutationConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
