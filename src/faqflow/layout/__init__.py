"""
Layout for the card forest: structure in, coordinates out.
"""

from faqflow.layout.tree_layout import Position, layout, subtree_width

__all__ = [
    "Position",
    "layout",
    "subtree_width",
]
