"""
View tree nodes

A view is either a CompositeNode (a nested view holding named children) or a
LeafNode that delegates to a WorkItemSource. The owner back-reference is a
weak reference: children are owned by their parent's registry only.
"""

import weakref
from abc import ABC
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Union

from .registry import ChildRegistry
from .validation import ValidationResult, validate_view_name
from .work_items import (
    AllItemsSource,
    FilteredItemsSource,
    ItemCatalog,
    Outcome,
    WorkItem,
    WorkItemSource,
)

if TYPE_CHECKING:
    from .context import TreeContext
    from .reconcile import ReconciliationResult
    from .serializer import Serializer


class ViewKind(str, Enum):
    """Variant tag of a view"""

    NESTED = "nested"
    LIST = "list"
    ALL = "all"
    CUSTOM = "custom"


class ContainerNode(ABC):
    """
    View base class

    Attributes:
        name: unique among siblings
        owner: enclosing CompositeNode, the TreeContext for top-level views,
            or None while detached
        kind: variant tag
    """

    kind: ViewKind

    def __init__(self, name: str):
        self._name = validate_view_name(name)
        self._owner_ref: Optional[weakref.ReferenceType] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    def _set_name(self, name: str) -> None:
        self._name = validate_view_name(name)

    @property
    def owner(self) -> Optional[Union["CompositeNode", "TreeContext"]]:
        if self._owner_ref is None:
            return None
        return self._owner_ref()

    def _set_owner(self, owner: Any) -> None:
        self._owner_ref = weakref.ref(owner) if owner is not None else None

    @property
    def is_composite(self) -> bool:
        return False

    @property
    def context(self) -> Optional["TreeContext"]:
        """The tree root this view is attached to, if any"""
        from .context import TreeContext

        current = self.owner
        while isinstance(current, ContainerNode):
            current = current.owner
        return current if isinstance(current, TreeContext) else None

    @property
    def is_attached(self) -> bool:
        """
        Whether every owner up the chain still holds this branch

        False for a view outside any tree, and for a view whose subtree was
        removed or swapped out by a reload.
        """
        current = self
        while isinstance(current, ContainerNode):
            owner = current.owner
            if owner is None or owner.registry.get(current.name) is not current:
                return False
            current = owner
        return True

    @property
    def full_name(self) -> str:
        """Slash separated names from the top-level view down to this one"""
        parts = [self._name]
        current = self.owner
        while isinstance(current, ContainerNode):
            parts.append(current.name)
            current = current.owner
        return "/".join(reversed(parts))

    @property
    def url(self) -> str:
        """Host-relative address, e.g. ``view/outer/view/inner/``"""
        prefix = self.owner.url if self.owner is not None else ""
        return f"{prefix}view/{self._name}/"

    def get_worst_result(self, strict: Optional[bool] = None) -> Optional[Outcome]:
        """Worst outcome over every leaf reachable from this view"""
        from .aggregator import StatusAggregator

        context = self.context
        aggregator = context.aggregator if context is not None else StatusAggregator()
        return aggregator.get_worst_result(self, strict=strict)


class LeafNode(ContainerNode):
    """
    A view showing work items

    The built-in kinds are LIST (items picked by name or regex) and ALL
    (everything in the catalog); any other WorkItemSource is CUSTOM.
    """

    def __init__(self, name: str, source: WorkItemSource):
        super().__init__(name)
        self.source = source
        if isinstance(source, FilteredItemsSource):
            self.kind = ViewKind.LIST
        elif isinstance(source, AllItemsSource):
            self.kind = ViewKind.ALL
        else:
            self.kind = ViewKind.CUSTOM

    @classmethod
    def list_view(
        cls,
        name: str,
        catalog: ItemCatalog,
        jobs: Optional[Iterable[str]] = None,
        include_regex: Optional[str] = None,
    ) -> "LeafNode":
        return cls(name, FilteredItemsSource(catalog, jobs, include_regex))

    @classmethod
    def all_view(cls, name: str, catalog: ItemCatalog) -> "LeafNode":
        return cls(name, AllItemsSource(catalog))

    def list_items(self) -> List[WorkItem]:
        return list(self.source.list_items())


class CompositeNode(ContainerNode):
    """
    Nested view

    Holds an ordered set of uniquely named children and an optional default
    child name. The default may name a child that does not exist.
    """

    kind = ViewKind.NESTED

    def __init__(
        self,
        name: str,
        children: Optional[Iterable[ContainerNode]] = None,
        default_child_name: Optional[str] = None,
    ):
        super().__init__(name)
        self.registry = ChildRegistry(self)
        self._default_child_name = default_child_name or None
        for child in children or []:
            self.registry.add(child)

    @property
    def is_composite(self) -> bool:
        return True

    # Children

    def add_child(self, node: ContainerNode) -> ContainerNode:
        return self.registry.add(node)

    def remove_child(self, name: str) -> Optional[ContainerNode]:
        return self.registry.remove(name)

    def rename_child(self, old_name: str, new_name: str) -> ContainerNode:
        return self.registry.rename(old_name, new_name)

    def get_child(self, name: str) -> Optional[ContainerNode]:
        return self.registry.get(name)

    def has_child(self, name: str) -> bool:
        return self.registry.exists(name)

    def list_children(self) -> List[ContainerNode]:
        return self.registry.list()

    def check_name_available(
        self, candidate: Optional[str], excluding: Optional[str] = None
    ) -> ValidationResult:
        return self.registry.check_name_available(candidate, excluding)

    def _on_child_renamed(self, old_name: str, new_name: str) -> None:
        if self._default_child_name == old_name:
            self._default_child_name = new_name

    # Default child

    @property
    def default_child_name(self) -> Optional[str]:
        return self._default_child_name

    @default_child_name.setter
    def default_child_name(self, name: Optional[str]) -> None:
        from .default_child import set_default_child

        set_default_child(self, name)

    def resolve_default(self) -> Optional[ContainerNode]:
        from .default_child import resolve_default

        return resolve_default(self)

    def default_child_candidates(self) -> List[str]:
        from .default_child import default_child_candidates

        return default_child_candidates(self)

    # Reconciliation

    def replace_from_description(
        self, document: Any, serializer: Optional["Serializer"] = None
    ) -> "ReconciliationResult":
        """
        Replace this view with one built from ``document``

        The live tree is untouched if the document is invalid. On success
        this object is no longer reachable from the root and the result holds
        the replacement.
        """
        from .reconcile import ReconciliationEngine
        from .serializer import Serializer

        if serializer is None:
            context = self.context
            serializer = context.serializer if context is not None else Serializer()
        return ReconciliationEngine(serializer).replace_from_description(
            self, document
        )
