"""
faqflow
=======

Consistency and layout engine for a shallow, hierarchical FAQ content
graph edited interactively.

Core idea:
- One store, one write path; edges and coordinates are derived views
  that never drift from the parent/child structure.

Public API:
- GraphStore
- MutationEngine
- EdgeSynchronizer
- layout
- EditorSession
"""

from faqflow.graph.graph_store import GraphStore
from faqflow.graph.graph_mutator import MutationEngine
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.layout.tree_layout import layout
from faqflow.session import EditorSession

__all__ = [
    "GraphStore",
    "MutationEngine",
    "EdgeSynchronizer",
    "layout",
    "EditorSession",
]

__version__ = "0.1.0"
