from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from faqflow.config.settings import LayoutConfig
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.graph_schema import Node
from faqflow.graph.graph_store import GraphStore


@dataclass(frozen=True)
class Position:
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


class _TidyTree:
    """
    One layout pass. Holds only per-call memo tables, so `layout`
    stays a pure function of structure and `order`.

    Relies on the store being a forest: the mutation engine and the
    hydration builder both refuse parent loops.
    """

    def __init__(self, store: GraphStore, config: LayoutConfig) -> None:
        self.query = TreeQueryEngine(store)
        self.config = config
        self.positions: Dict[str, Position] = {}
        self._widths: Dict[str, float] = {}
        self._depths: Dict[str, int] = {}
        self._children: Dict[str, List[Node]] = {}

    def children(self, node_id: str) -> List[Node]:
        if node_id not in self._children:
            self._children[node_id] = self.query.sorted_children(node_id)
        return self._children[node_id]

    def children_width(self, kids: List[Node]) -> float:
        total = sum(self.subtree_width(c.id) for c in kids)
        return total + (len(kids) - 1) * self.config.horizontal_spacing

    def subtree_width(self, node_id: str) -> float:
        if node_id not in self._widths:
            kids = self.children(node_id)
            if not kids:
                self._widths[node_id] = self.config.node_width
            else:
                self._widths[node_id] = max(
                    self.config.node_width, self.children_width(kids)
                )
        return self._widths[node_id]

    def subtree_depth(self, node_id: str) -> int:
        if node_id not in self._depths:
            self._depths[node_id] = 1 + max(
                (self.subtree_depth(c.id) for c in self.children(node_id)),
                default=0,
            )
        return self._depths[node_id]

    def place(self, node: Node, depth: int, x: float, y: float) -> None:
        self.positions[node.id] = Position(x, y)

        kids = self.children(node.id)
        if not kids:
            return

        cfg = self.config
        cursor = x - self.children_width(kids) / 2 + cfg.node_width / 2
        for child in kids:
            self.place(child, depth + 1, cursor, y + cfg.vertical_spacing)
            cursor += self.subtree_width(child.id) + cfg.horizontal_spacing

    def run(self) -> Dict[str, Position]:
        cfg = self.config
        cursor = cfg.margin_x
        row_y = cfg.margin_top
        row_depth = 0

        for root in self.query.sorted_roots():
            width = self.subtree_width(root.id)

            # Wrap to a new row below the deepest tree of the current one.
            if (
                cfg.canvas_width is not None
                and cursor > cfg.margin_x
                and cursor + width > cfg.margin_x + cfg.canvas_width
            ):
                row_y += row_depth * cfg.vertical_spacing
                cursor = cfg.margin_x
                row_depth = 0

            self.place(root, 0, cursor + width / 2 - cfg.node_width / 2, row_y)
            cursor += width + cfg.horizontal_spacing
            row_depth = max(row_depth, self.subtree_depth(root.id))

        return self.positions


def subtree_width(
    store: GraphStore,
    node_id: str,
    config: Optional[LayoutConfig] = None,
) -> float:
    return _TidyTree(store, config or LayoutConfig()).subtree_width(node_id)


def layout(
    store: GraphStore,
    config: Optional[LayoutConfig] = None,
) -> Dict[str, Position]:
    """
    Centered tidy-tree coordinates for every card.

    Children are centered under their parent in ascending `order`
    (ties keep `children` order); roots run left to right from the
    left margin at the top margin, each centered in its own subtree
    width. The result depends only on structure and `order`, never
    on earlier positions.
    """
    return _TidyTree(store, config or LayoutConfig()).run()
