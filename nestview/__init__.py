"""nestview - nested views grouping other views into a tree."""

from .core import (
    TreeContext,
    CompositeNode,
    LeafNode,
    ItemCatalog,
    Outcome,
    Serializer,
)
from .exceptions import (
    NestViewError,
    DuplicateNameError,
    InvalidDescriptionError,
)

__version__ = "0.1.0"
__all__ = [
    "TreeContext",
    "CompositeNode",
    "LeafNode",
    "ItemCatalog",
    "Outcome",
    "Serializer",
    "NestViewError",
    "DuplicateNameError",
    "InvalidDescriptionError",
]
