from __future__ import annotations

import networkx as nx
from typing import Dict, Iterable, List, Optional, Tuple

from faqflow.errors import NotFoundError
from faqflow.graph.graph_schema import Node, Edge


class GraphStore:
    """
    Authoritative in-memory card graph.

    Lookups are open to everyone; the write primitives are meant for
    the mutation engine, the edge synchronizer and the hydration
    builder, which are the only places invariants are enforced.
    """

    def __init__(self) -> None:
        self._graph = nx.DiGraph()
        self._edge_index: Dict[str, Tuple[str, str]] = {}

    # -------------------- Nodes --------------------

    def put_node(self, node: Node) -> None:
        self._graph.add_node(node.id, data=node)

    def remove_node(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            raise NotFoundError(f"unknown node {node_id!r}", ref=node_id)
        dropped = self.edges_of(node_id)
        for edge in dropped:
            self._edge_index.pop(edge.id, None)
        self._graph.remove_node(node_id)
        return dropped

    def has(self, node_id: str) -> bool:
        return node_id in self._graph

    def get(self, node_id: str) -> Node:
        if node_id not in self._graph:
            raise NotFoundError(f"unknown node {node_id!r}", ref=node_id)
        return self._graph.nodes[node_id]["data"]

    def list(self) -> List[Node]:
        return [data["data"] for _, data in self._graph.nodes(data=True)]

    def ids(self) -> List[str]:
        return list(self._graph.nodes)

    def children_of(self, node_id: str) -> List[Node]:
        return [
            self._graph.nodes[child]["data"]
            for child in self.get(node_id).children
            if child in self._graph
        ]

    def parent_of(self, node_id: str) -> Optional[Node]:
        parent_id = self.get(node_id).parent_id
        if parent_id is None or parent_id not in self._graph:
            return None
        return self._graph.nodes[parent_id]["data"]

    # -------------------- Edges --------------------

    def put_edge(self, edge: Edge) -> None:
        for endpoint in (edge.source, edge.target):
            if endpoint not in self._graph:
                raise NotFoundError(f"unknown node {endpoint!r}", ref=endpoint)
        self._graph.add_edge(edge.source, edge.target, data=edge)
        self._edge_index[edge.id] = (edge.source, edge.target)

    def remove_edge(self, source: str, target: str) -> Optional[Edge]:
        if not self._graph.has_edge(source, target):
            return None
        edge = self._graph.edges[source, target]["data"]
        self._graph.remove_edge(source, target)
        self._edge_index.pop(edge.id, None)
        return edge

    def has_edge(self, source: str, target: str) -> bool:
        return self._graph.has_edge(source, target)

    def get_edge(self, source: str, target: str) -> Edge:
        if not self._graph.has_edge(source, target):
            raise NotFoundError(f"no edge {source!r} -> {target!r}")
        return self._graph.edges[source, target]["data"]

    def find_edge(self, edge_id: str) -> Edge:
        if edge_id not in self._edge_index:
            raise NotFoundError(f"unknown edge {edge_id!r}", ref=edge_id)
        return self.get_edge(*self._edge_index[edge_id])

    def edges(self) -> Iterable[Edge]:
        for _, _, data in self._graph.edges(data=True):
            yield data["data"]

    def get_edges(self) -> List[Edge]:
        return list(self.edges())

    def edges_of(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        out = [d["data"] for _, _, d in self._graph.out_edges(node_id, data=True)]
        inc = [d["data"] for _, _, d in self._graph.in_edges(node_id, data=True)]
        return out + inc

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def __len__(self) -> int:
        return self.node_count()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    # -------------------- Lifecycle --------------------

    def clear(self) -> None:
        self._graph.clear()
        self._edge_index.clear()
