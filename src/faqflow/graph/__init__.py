"""
Graph subsystem for faqflow.

Defines the card forest and the machinery that keeps it consistent:
- the authoritative store
- the mutation engine (the single write path)
- edge synchronization between relations and visual edges
- hydration from loaded snapshots
"""

from faqflow.graph.graph_schema import (
    CardContent,
    CardStatus,
    DisplayConfig,
    Edge,
    Node,
    level_color,
)
from faqflow.graph.graph_store import GraphStore
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_builder import GraphBuilder, LoadReport
from faqflow.graph.graph_mutator import MutationEngine

__all__ = [
    "CardContent",
    "CardStatus",
    "DisplayConfig",
    "Edge",
    "Node",
    "level_color",
    "GraphStore",
    "TreeQueryEngine",
    "EdgeSynchronizer",
    "GraphBuilder",
    "LoadReport",
    "MutationEngine",
]
