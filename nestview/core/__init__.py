"""nestview core components

Provides the view tree and the engines working on it:
- nodes and the per-view child registry
- status aggregation
- default child resolution
- descriptions, serialization and reconciliation
"""

from .work_items import (
    Outcome,
    WorkItem,
    WorkItemSource,
    ItemCatalog,
    AllItemsSource,
    FilteredItemsSource,
)
from .validation import Kind, ValidationResult
from .registry import ChildRegistry
from .nodes import ContainerNode, CompositeNode, LeafNode, ViewKind
from .aggregator import StatusAggregator, get_worst_result, iter_leaves
from .default_child import (
    NO_DEFAULT,
    resolve_default,
    default_child_candidates,
    set_default_child,
)
from .document import (
    ViewDescription,
    NestedViewDescription,
    ListViewDescription,
    AllViewDescription,
    parse_description,
)
from .serializer import Serializer
from .reconcile import (
    ReconciliationEngine,
    ReconciliationResult,
    reparent_subtree,
    walk,
)
from .context import TreeContext

__all__ = [
    # Work items
    "Outcome",
    "WorkItem",
    "WorkItemSource",
    "ItemCatalog",
    "AllItemsSource",
    "FilteredItemsSource",
    # Validation
    "Kind",
    "ValidationResult",
    # Tree
    "ChildRegistry",
    "ContainerNode",
    "CompositeNode",
    "LeafNode",
    "ViewKind",
    # Aggregation
    "StatusAggregator",
    "get_worst_result",
    "iter_leaves",
    # Default child
    "NO_DEFAULT",
    "resolve_default",
    "default_child_candidates",
    "set_default_child",
    # Descriptions
    "ViewDescription",
    "NestedViewDescription",
    "ListViewDescription",
    "AllViewDescription",
    "parse_description",
    "Serializer",
    # Reconciliation
    "ReconciliationEngine",
    "ReconciliationResult",
    "reparent_subtree",
    "walk",
    # Root
    "TreeContext",
]
