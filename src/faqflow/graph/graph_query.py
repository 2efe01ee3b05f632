from __future__ import annotations

from collections import Counter
from typing import List, Optional, Set

from faqflow.graph.graph_store import GraphStore
from faqflow.graph.graph_schema import Node


def sort_siblings(nodes: List[Node]) -> List[Node]:
    """
    Ascending by `order`; `sorted` is stable, so ties keep the
    incoming sequence.
    """
    return sorted(nodes, key=lambda n: n.order)


class TreeQueryEngine:
    """
    Read-only traversal of the card forest along parent/child links.

    Explicit connections are ignored here; only `parent_id` and
    `children` define the tree.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    # -------------------- Ancestry --------------------

    def ancestors(self, node_id: str) -> List[str]:
        """
        Walk the parent chain upward, nearest first.

        Stops at a root, at a dangling parent reference, or at a
        repeated id (which only corrupt input can produce).
        """
        chain: List[str] = []
        seen: Set[str] = {node_id}
        current: Optional[str] = self.store.get(node_id).parent_id

        while current is not None and self.store.has(current):
            if current in seen:
                break
            chain.append(current)
            seen.add(current)
            current = self.store.get(current).parent_id

        return chain

    def is_self_or_descendant(self, candidate: str, of: str) -> bool:
        if candidate == of:
            return True
        return of in self.ancestors(candidate)

    def descendants(self, node_id: str) -> List[str]:
        out: List[str] = []
        seen: Set[str] = {node_id}
        frontier = [node_id]

        while frontier:
            nxt: List[str] = []
            for current in frontier:
                for child in self.store.get(current).children:
                    if child in seen or not self.store.has(child):
                        continue
                    seen.add(child)
                    out.append(child)
                    nxt.append(child)
            frontier = nxt

        return out

    def depth(self, node_id: str) -> int:
        return len(self.ancestors(node_id))

    # -------------------- Forest --------------------

    def roots(self) -> List[Node]:
        """
        Nodes laid out at the top: true roots and orphans, in
        insertion order.
        """
        return [
            n for n in self.store.list()
            if n.parent_id is None or not self.store.has(n.parent_id)
        ]

    def orphans(self) -> List[Node]:
        return [
            n for n in self.store.list()
            if n.parent_id is not None and not self.store.has(n.parent_id)
        ]

    def sorted_children(self, node_id: str) -> List[Node]:
        return sort_siblings(self.store.children_of(node_id))

    def sorted_roots(self) -> List[Node]:
        return sort_siblings(self.roots())

    # -------------------- Consistency --------------------

    def check_invariants(self) -> List[str]:
        """
        Return a description of every violated structural invariant.

        An empty list means children/parent_id agree, every relation
        has exactly one edge, every edge is accounted for, and no
        node is its own ancestor.
        """
        problems: List[str] = []

        for node in self.store.list():
            counts = Counter(node.children)
            for child_id, count in counts.items():
                if count > 1:
                    problems.append(f"{child_id} listed {count}x under {node.id}")
                if not self.store.has(child_id):
                    problems.append(f"{node.id} lists unknown child {child_id}")
                    continue
                if self.store.get(child_id).parent_id != node.id:
                    problems.append(f"{child_id} in {node.id}.children but parent differs")
                edge = (
                    self.store.get_edge(node.id, child_id)
                    if self.store.has_edge(node.id, child_id)
                    else None
                )
                if edge is None or not edge.is_relation:
                    problems.append(f"missing relation edge {node.id} -> {child_id}")

            parent_id = node.parent_id
            if parent_id is not None and self.store.has(parent_id):
                if node.id not in self.store.get(parent_id).children:
                    problems.append(f"{node.id}.parent_id={parent_id} but not in its children")
                if node.id in self.ancestors(parent_id) or parent_id == node.id:
                    problems.append(f"{node.id} is its own ancestor")

        for edge in self.store.edges():
            if edge.is_relation:
                target = self.store.get(edge.target)
                if target.parent_id != edge.source:
                    problems.append(f"relation edge {edge.id} has no matching relation")

        return problems
