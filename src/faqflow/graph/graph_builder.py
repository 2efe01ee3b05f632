from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_schema import Node
from faqflow.graph.graph_store import GraphStore


@dataclass
class LoadReport:
    nodes: int = 0
    edges: int = 0
    repairs: List[str] = field(default_factory=list)


class GraphBuilder:
    """
    Hydrates a store from decoded snapshot nodes.

    Loaded data may disagree with itself: a child names one parent while
    another card lists it, ids repeat, lists point at missing cards.
    The builder settles every relation once, here, so the store starts
    out satisfying the same invariants the mutation engine maintains.
    """

    def __init__(self, store: GraphStore, edges: Optional[EdgeSynchronizer] = None) -> None:
        self.store = store
        self.edges = edges or EdgeSynchronizer(store)

    def load(self, nodes: Iterable[Node]) -> LoadReport:
        logger = logging.getLogger("faqflow.load")
        report = LoadReport()

        records: Dict[str, Node] = {}
        for node in nodes:
            if node.id in records or self.store.has(node.id):
                report.repairs.append(f"duplicate id {node.id} skipped")
                continue
            records[node.id] = node

        parents = self._resolve_parents(records, report)
        self._break_cycles(parents, records, report)
        children = self._collect_children(parents, records, report)

        for node_id, node in records.items():
            self.store.put_node(
                replace(node, parent_id=parents[node_id], children=children[node_id])
            )

        self.edges.reconcile()

        report.nodes = self.store.node_count()
        report.edges = self.store.edge_count()
        for message in report.repairs:
            logger.warning("load repair: %s", message)
        logger.info(
            "loaded nodes=%s edges=%s repairs=%s",
            report.nodes,
            report.edges,
            len(report.repairs),
        )
        return report

    # ------------------------------------------------------------------
    # Relation settling
    # ------------------------------------------------------------------

    def _resolve_parents(
        self,
        records: Dict[str, Node],
        report: LoadReport,
    ) -> Dict[str, Optional[str]]:
        """
        A card's own parent reference wins when it names a loaded card;
        otherwise the first card listing it as a child adopts it.
        """
        listed_by: Dict[str, str] = {}
        for node in records.values():
            for child_id in node.children:
                if child_id in records and child_id != node.id:
                    listed_by.setdefault(child_id, node.id)

        parents: Dict[str, Optional[str]] = {}
        for node_id, node in records.items():
            declared = node.parent_id
            if declared == node_id:
                report.repairs.append(f"{node_id} named itself as parent")
                declared = None

            if declared is not None and declared in records:
                parents[node_id] = declared
            elif node_id in listed_by:
                parents[node_id] = listed_by[node_id]
            else:
                parents[node_id] = declared

        return parents

    def _break_cycles(
        self,
        parents: Dict[str, Optional[str]],
        records: Dict[str, Node],
        report: LoadReport,
    ) -> None:
        for node_id in records:
            seen = {node_id}
            current = parents[node_id]
            while current is not None and current in records:
                if current in seen:
                    if current == node_id:
                        report.repairs.append(f"cycle through {node_id}; detached it")
                        parents[node_id] = None
                    break
                seen.add(current)
                current = parents[current]

    def _collect_children(
        self,
        parents: Dict[str, Optional[str]],
        records: Dict[str, Node],
        report: LoadReport,
    ):
        children: Dict[str, List[str]] = {node_id: [] for node_id in records}

        for node_id, node in records.items():
            for child_id in node.children:
                if child_id not in records:
                    report.repairs.append(f"{node_id} lists unknown child {child_id}")
                    continue
                if parents.get(child_id) != node_id:
                    continue
                if child_id not in children[node_id]:
                    children[node_id].append(child_id)

        for node_id in records:
            parent_id = parents[node_id]
            if parent_id in children and node_id not in children[parent_id]:
                children[parent_id].append(node_id)

        return {node_id: tuple(ids) for node_id, ids in children.items()}
