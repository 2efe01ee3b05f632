from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Set, Tuple

from faqflow.graph.graph_store import GraphStore
from faqflow.graph.graph_schema import Edge, level_color
from faqflow.graph.graph_query import sort_siblings


logger = logging.getLogger("faqflow.edges")


class EdgeSynchronizer:
    """
    Keeps the edge set in bijection with parent/child relations.

    Every structural change is applied as a delta touching only the
    affected pair and its parent's fan-out slots. Edge ids derive from
    (source, target), so applying the same delta twice is harmless.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Relation edges
    # ------------------------------------------------------------------

    def link(self, parent_id: str, child_id: str) -> Edge:
        child = self.store.get(child_id)
        edge = Edge.create(
            source=parent_id,
            target=child_id,
            kind="relation",
            color=level_color(child.level),
        )
        self.store.put_edge(edge)
        self.reslot(parent_id)
        return self.store.get_edge(parent_id, child_id)

    def unlink(self, parent_id: str, child_id: str) -> Optional[Edge]:
        removed = None
        if self.store.has_edge(parent_id, child_id):
            if self.store.get_edge(parent_id, child_id).is_relation:
                removed = self.store.remove_edge(parent_id, child_id)
        if self.store.has(parent_id):
            self.reslot(parent_id)
        return removed

    def reslot(self, parent_id: str) -> None:
        """
        Give each child of a fanning-out parent its own source slot.

        Slots follow sibling order; a single child needs none.
        """
        children = sort_siblings(self.store.children_of(parent_id))
        fan_out = len(children) > 1

        for index, child in enumerate(children):
            if not self.store.has_edge(parent_id, child.id):
                continue
            edge = self.store.get_edge(parent_id, child.id)
            if not edge.is_relation:
                continue
            slot = index if fan_out else None
            if edge.source_slot != slot:
                self.store.put_edge(replace(edge, source_slot=slot))

    def recolor(self, node_id: str) -> None:
        color = level_color(self.store.get(node_id).level)
        for edge in self.store.edges_of(node_id):
            if edge.target == node_id and edge.color != color:
                self.store.put_edge(replace(edge, color=color))

    def drop_node(self, node_id: str) -> List[Edge]:
        """
        Remove a node together with every edge where it is source or
        target.
        """
        dropped = self.store.remove_node(node_id)
        logger.debug("dropped %s edges with node %s", len(dropped), node_id)
        return dropped

    # ------------------------------------------------------------------
    # Explicit connections
    # ------------------------------------------------------------------

    def add_connection(
        self,
        source: str,
        target: str,
        *,
        source_slot: Optional[int] = None,
        target_slot: Optional[int] = None,
    ) -> Edge:
        if self.store.has_edge(source, target):
            existing = self.store.get_edge(source, target)
            if existing.is_relation:
                return existing

        edge = Edge.create(
            source=source,
            target=target,
            kind="connection",
            color=level_color(self.store.get(target).level),
            source_slot=source_slot,
            target_slot=target_slot,
        )
        self.store.put_edge(edge)
        return edge

    def remove_connection(self, source: str, target: str) -> Optional[Edge]:
        if not self.store.has_edge(source, target):
            return None
        if self.store.get_edge(source, target).is_relation:
            return None
        return self.store.remove_edge(source, target)

    def relation_for(self, edge_id: str) -> Optional[Tuple[str, str]]:
        """
        (parent, child) behind a relation edge, or None for a plain
        connection.
        """
        edge = self.store.find_edge(edge_id)
        if not edge.is_relation:
            return None
        return edge.source, edge.target

    # ------------------------------------------------------------------
    # Full reconciliation
    # ------------------------------------------------------------------

    def reconcile(self) -> Dict[str, int]:
        """
        Rebuild relation edges from the current relations.

        Used once after hydration. Explicit connections are kept
        unless a relation now covers the same pair.
        """
        wanted: Set[Tuple[str, str]] = set()
        for node in self.store.list():
            for child_id in node.children:
                if not self.store.has(child_id):
                    continue
                if self.store.get(child_id).parent_id == node.id:
                    wanted.add((node.id, child_id))

        removed = 0
        for edge in self.store.get_edges():
            if edge.is_relation and (edge.source, edge.target) not in wanted:
                self.store.remove_edge(edge.source, edge.target)
                removed += 1

        added = 0
        for parent_id, child_id in sorted(wanted):
            if self.store.has_edge(parent_id, child_id):
                if self.store.get_edge(parent_id, child_id).is_relation:
                    continue
            self.link(parent_id, child_id)
            added += 1

        for parent_id in {p for p, _ in wanted}:
            self.reslot(parent_id)

        return {"added": added, "removed": removed}
