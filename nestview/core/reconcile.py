"""
Reconciliation

Replaces a live view with a subtree built from a fresh description (config
reload). The replacement keeps the original's name and sibling position.
Ownership is re-derived for every node of the replacement, at any depth,
and the swap happens in one critical section on the owner's registry, so a
concurrent reader sees either the old subtree or the new one.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple

from .nodes import CompositeNode, ContainerNode
from .registry import hold_registries
from .serializer import Serializer
from ..exceptions.errors import (
    InvalidDescriptionError,
    NodeNotFoundError,
    OwnershipCycleError,
)
from ..utils.logging import create_view_logger


@dataclass
class ReconciliationResult:
    """
    Outcome of a replacement

    Attributes:
        original: the view that was swapped out, no longer reachable from the root
        replacement: the view now in the tree
        nodes_reparented: number of nodes whose owner was re-derived
    """

    original: ContainerNode
    replacement: ContainerNode
    nodes_reparented: int


def reparent_subtree(root: ContainerNode) -> int:
    """
    Point every node below ``root`` at its structural parent

    Each composite's children are read and rewired under that composite's
    lock. Returns the number of nodes visited below ``root``.
    """
    count = 0
    stack: List[ContainerNode] = [root]
    while stack:
        current = stack.pop()
        if not isinstance(current, CompositeNode):
            continue
        with current.registry.lock:
            children = current.registry.list()
            for child in children:
                child._set_owner(current)
        count += len(children)
        stack.extend(children)
    return count


class ReconciliationEngine:
    """
    Swaps description-built subtrees into a live tree

    Args:
        serializer: turns documents into detached subtrees
    """

    def __init__(self, serializer: Serializer):
        self.serializer = serializer

    def replace_from_description(
        self, original: ContainerNode, document: Any
    ) -> ReconciliationResult:
        """
        Replace ``original`` with the view described by ``document``

        The document is fully parsed and built before the tree is touched.

        Raises:
            InvalidDescriptionError: the document is invalid, or describes a
                different kind of view than ``original``
        """
        replacement = self.serializer.deserialize(document)
        if replacement.kind != original.kind:
            raise InvalidDescriptionError(
                f"Expecting view type {original.kind.value!r} "
                f"but got {replacement.kind.value!r}",
                {"expected": original.kind.value, "got": replacement.kind.value},
            )
        return self.reconcile(original, replacement)

    def reconcile(
        self, original: ContainerNode, replacement: ContainerNode
    ) -> ReconciliationResult:
        """
        Swap an already materialized ``replacement`` into ``original``'s slot

        ``replacement`` is taken from its current holder only once the swap
        is certain to go ahead.

        Raises:
            NodeNotFoundError: ``original`` is not attached to a tree
            OwnershipCycleError: ``original``'s owner lies inside
                ``replacement``
        """
        owner = original.owner
        if owner is None:
            raise NodeNotFoundError(
                f"View {original.name!r} is not attached to a tree",
                {"name": original.name},
            )
        if replacement is original:
            return ReconciliationResult(original, replacement, 0)
        self._check_no_cycle(owner, replacement)

        name = original.name
        registry = owner.registry
        previous = replacement.owner
        previous_registry = previous.registry if previous is not None else None
        with hold_registries(registry, previous_registry):
            if registry.get(name) is not original:
                raise NodeNotFoundError(
                    f"View {name!r} was removed before it could be replaced",
                    {"name": name},
                )
            self._detach(replacement)
            replacement._set_name(name)
            count = reparent_subtree(replacement)
            registry._swap(name, replacement)

        create_view_logger(replacement.full_name).info(
            "view_reconciled", nodes_reparented=count
        )
        return ReconciliationResult(original, replacement, count)

    @staticmethod
    def _check_no_cycle(owner: Any, replacement: ContainerNode) -> None:
        current = owner
        while isinstance(current, ContainerNode):
            if current is replacement:
                raise OwnershipCycleError(
                    f"View {replacement.name!r} cannot replace one of its own descendants",
                    {"name": replacement.name},
                )
            current = current.owner

    @staticmethod
    def _detach(node: ContainerNode) -> None:
        owner = node.owner
        if owner is not None and owner.registry.get(node.name) is node:
            owner.registry.remove(node.name)


def walk(node: ContainerNode) -> List[Tuple[ContainerNode, Any]]:
    """Every node under ``node`` (inclusive) paired with its owner"""
    result = []
    stack: List[ContainerNode] = [node]
    while stack:
        current = stack.pop()
        result.append((current, current.owner))
        if isinstance(current, CompositeNode):
            stack.extend(reversed(current.list_children()))
    return result
