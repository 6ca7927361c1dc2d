"""
Child registry

Ordered, name-keyed collection of the children of one composite view (or of
the tree root). Every mutation keeps ``child.owner`` and the registry in
agreement: for each entry, ``registry.get(child.name) is child`` and
``child.owner`` is the holder of the registry.
"""

import threading
import weakref
from contextlib import ExitStack, contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from .validation import ValidationResult, validate_view_name
from ..exceptions.errors import (
    DuplicateNameError,
    NodeNotFoundError,
    OwnershipCycleError,
)
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .nodes import ContainerNode

logger = get_logger(__name__)


@contextmanager
def hold_registries(*registries: "ChildRegistry") -> Iterator[None]:
    """Acquire several registry locks in a fixed order"""
    unique = {id(r): r for r in registries if r is not None}
    with ExitStack() as stack:
        for key in sorted(unique):
            stack.enter_context(unique[key].lock)
        yield


class ChildRegistry:
    """
    Children of one holder

    Thread safety: every access to the children map happens under ``lock``.
    Readers get snapshots, so they never observe a half-applied change.
    """

    def __init__(self, holder: Any):
        self._holder_ref = weakref.ref(holder)
        self._children: Dict[str, "ContainerNode"] = {}
        self._lock = threading.RLock()

    @property
    def holder(self) -> Any:
        return self._holder_ref()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def __len__(self) -> int:
        with self._lock:
            return len(self._children)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._children

    def __iter__(self) -> Iterator["ContainerNode"]:
        return iter(self.list())

    def exists(self, name: str) -> bool:
        return name in self

    def get(self, name: str) -> Optional["ContainerNode"]:
        with self._lock:
            return self._children.get(name)

    def list(self) -> List["ContainerNode"]:
        """Children in insertion order"""
        with self._lock:
            return list(self._children.values())

    def names(self) -> List[str]:
        with self._lock:
            return list(self._children)

    def add(self, node: "ContainerNode") -> "ContainerNode":
        """
        Insert ``node`` as a child

        A node that still belongs to another holder is detached from it
        first, so the move is a single step from the caller's view.

        Raises:
            DuplicateNameError: a sibling already uses the name
            OwnershipCycleError: node is the holder or one of its ancestors
        """
        holder = self.holder
        self._check_not_ancestor(node, holder)

        previous = node.owner
        previous_registry = previous.registry if previous is not None else None

        with hold_registries(self, previous_registry):
            if node.name in self._children:
                raise DuplicateNameError(
                    f'A view already exists with the name "{node.name}"',
                    {"name": node.name},
                )
            if (
                previous_registry is not None
                and previous_registry._children.get(node.name) is node
            ):
                del previous_registry._children[node.name]
            self._children[node.name] = node
            node._set_owner(holder)

        logger.debug("view_added", view=node.name, owner=_describe(holder))
        return node

    def remove(self, name: str) -> Optional["ContainerNode"]:
        """Remove a child; absent names are ignored"""
        with self._lock:
            node = self._children.pop(name, None)
            if node is not None:
                node._set_owner(None)

        if node is not None:
            logger.debug("view_removed", view=name, owner=_describe(self.holder))
        return node

    def rename(self, old_name: str, new_name: str) -> "ContainerNode":
        """
        Rename a child, keeping its position among its siblings

        Raises:
            ValueError: ``new_name`` is not a valid view name
            NodeNotFoundError: no child called ``old_name``
            DuplicateNameError: a different sibling holds ``new_name``
        """
        validate_view_name(new_name)
        with self._lock:
            node = self._children.get(old_name)
            if node is None:
                raise NodeNotFoundError(
                    f"No view named {old_name!r}", {"name": old_name}
                )
            if new_name == old_name:
                return node
            if new_name in self._children:
                raise DuplicateNameError(
                    f'A view already exists with the name "{new_name}"',
                    {"name": new_name},
                )
            self._children = {
                (new_name if key == old_name else key): child
                for key, child in self._children.items()
            }
            node._set_name(new_name)

            holder = self.holder
            on_renamed = getattr(holder, "_on_child_renamed", None)
            if on_renamed is not None:
                on_renamed(old_name, new_name)

        logger.info("view_renamed", old=old_name, new=new_name)
        return node

    def check_name_available(
        self, candidate: Optional[str], excluding: Optional[str] = None
    ) -> ValidationResult:
        """
        Check a name typed into a form

        Blank input is accepted (the form reports missing names itself), as
        is the current name of the view being edited.
        """
        if candidate is None or not candidate.strip():
            return ValidationResult.ok()
        if excluding is not None and candidate == excluding:
            return ValidationResult.ok()
        if self.exists(candidate):
            return ValidationResult.error(
                f'A view already exists with the name "{candidate}"'
            )
        return ValidationResult.ok()

    def _swap(self, name: str, node: "ContainerNode") -> "ContainerNode":
        """Put ``node`` in the slot of ``name``; caller holds ``lock``"""
        old = self._children[name]
        self._children[name] = node
        node._set_owner(self.holder)
        return old

    @staticmethod
    def _check_not_ancestor(node: "ContainerNode", holder: Any) -> None:
        current = holder
        while current is not None:
            if current is node:
                raise OwnershipCycleError(
                    f"View {node.name!r} cannot be added below itself",
                    {"name": node.name},
                )
            current = getattr(current, "owner", None)


def _describe(holder: Any) -> str:
    full_name = getattr(holder, "full_name", None)
    return full_name or "<root>"
