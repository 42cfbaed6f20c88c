"""Element tree model and tree building for strict markup parsing.

Key Components:
    Element: Immutable element with lifted id and class
    Opaque: Placeholder for externally resolved content
    TreeBuilder: Folds a token list into a single root element
    new_element: Convenience factory for building trees by hand
"""

from .builder import Frame, TreeBuilder
from .element import Element, Node, Opaque, new_element
from .transform import add, matches, member, remove, select, transform

__all__ = [
    "Element",
    "Frame",
    "Node",
    "Opaque",
    "TreeBuilder",
    "add",
    "matches",
    "member",
    "new_element",
    "remove",
    "select",
    "transform",
]
