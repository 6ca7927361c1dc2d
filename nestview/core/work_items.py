"""
Work item interfaces

The view tree never computes build results itself. Leaves delegate to a
WorkItemSource, and each WorkItem reports whether it is disabled and the
outcome of its last completed run.
"""

import re
import threading
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, runtime_checkable


class Outcome(str, Enum):
    """Outcome of a finished run, ordered by severity"""

    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"
    NOT_BUILT = "not_built"
    ABORTED = "aborted"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def is_worse_than(self, other: "Outcome") -> bool:
        return self.severity > other.severity

    @staticmethod
    def worse_of(
        a: Optional["Outcome"], b: Optional["Outcome"]
    ) -> Optional["Outcome"]:
        """
        Combine two outcomes

        None means "no opinion" and is the identity element, so the fold is
        associative and commutative.
        """
        if a is None:
            return b
        if b is None:
            return a
        return b if b.is_worse_than(a) else a


_SEVERITY = {
    Outcome.SUCCESS: 0,
    Outcome.UNSTABLE: 1,
    Outcome.FAILURE: 2,
    Outcome.NOT_BUILT: 3,
    Outcome.ABORTED: 4,
}


@runtime_checkable
class WorkItem(Protocol):
    """A job known to the host"""

    name: str

    def is_disabled(self) -> bool:
        ...

    def last_completed_outcome(self) -> Optional[Outcome]:
        """Outcome of the last finished run, or None if it never finished"""
        ...


@runtime_checkable
class WorkItemSource(Protocol):
    """Lists the work items shown by a leaf view"""

    def list_items(self) -> List[WorkItem]:
        ...


class ItemCatalog:
    """
    Host-owned registry of work items

    Backs the built-in leaf kinds. Items are kept in registration order.
    """

    def __init__(self, items: Optional[Iterable[WorkItem]] = None):
        self._items: Dict[str, WorkItem] = {}
        self._lock = threading.RLock()
        for item in items or []:
            self.register(item)

    def register(self, item: WorkItem) -> WorkItem:
        with self._lock:
            self._items[item.name] = item
        return item

    def unregister(self, name: str) -> None:
        with self._lock:
            self._items.pop(name, None)

    def get(self, name: str) -> Optional[WorkItem]:
        with self._lock:
            return self._items.get(name)

    def items(self) -> List[WorkItem]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class AllItemsSource:
    """Every item of the catalog"""

    def __init__(self, catalog: ItemCatalog):
        self.catalog = catalog

    def list_items(self) -> List[WorkItem]:
        return self.catalog.items()


class FilteredItemsSource:
    """
    Items picked by name or by a regular expression

    An item qualifies if it is listed explicitly or if the whole name
    matches ``include_regex``. Catalog order is kept.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        names: Optional[Iterable[str]] = None,
        include_regex: Optional[str] = None,
    ):
        self.catalog = catalog
        self.names = set(names or [])
        self.include_regex = include_regex
        self._pattern = re.compile(include_regex) if include_regex else None

    def matches(self, name: str) -> bool:
        if name in self.names:
            return True
        return self._pattern is not None and self._pattern.fullmatch(name) is not None

    def list_items(self) -> List[WorkItem]:
        return [item for item in self.catalog.items() if self.matches(item.name)]
