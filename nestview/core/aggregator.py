"""
Status aggregation

Computes the worst outcome over every leaf reachable from a view. Nested
views do not contribute a status of their own. The fold uses
``Outcome.worse_of`` with None as identity, so the result does not depend on
the order leaves are visited in.
"""

from functools import reduce
from typing import TYPE_CHECKING, Iterator, List, Optional

from .work_items import Outcome, WorkItem
from ..exceptions.errors import WorkItemSourceError
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .nodes import ContainerNode, LeafNode

logger = get_logger(__name__)


def iter_leaves(node: "ContainerNode") -> Iterator["LeafNode"]:
    """
    Depth-first walk yielding the leaves under ``node``

    Children are read as snapshots, so no registry lock is held while the
    caller works with a yielded leaf.
    """
    stack: List["ContainerNode"] = [node]
    while stack:
        current = stack.pop()
        if current.is_composite:
            stack.extend(reversed(current.list_children()))
        else:
            yield current


class StatusAggregator:
    """
    Worst-result aggregator

    Args:
        strict: raise WorkItemSourceError when a source fails instead of
            skipping the failing item
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def get_worst_result(
        self, node: "ContainerNode", strict: Optional[bool] = None
    ) -> Optional[Outcome]:
        """
        Worst outcome under ``node``

        Returns:
            The worst last-completed outcome of all enabled work items, or
            None when no item has ever finished a run
        """
        strict = self.strict if strict is None else strict
        return reduce(
            Outcome.worse_of,
            (self._leaf_result(leaf, strict) for leaf in iter_leaves(node)),
            None,
        )

    def _leaf_result(self, leaf: "LeafNode", strict: bool) -> Optional[Outcome]:
        try:
            items = leaf.list_items()
        except Exception as e:
            self._source_failed(leaf, None, e, strict)
            return None

        worst: Optional[Outcome] = None
        for item in items:
            worst = Outcome.worse_of(worst, self._item_result(leaf, item, strict))
        return worst

    def _item_result(
        self, leaf: "LeafNode", item: WorkItem, strict: bool
    ) -> Optional[Outcome]:
        try:
            if item.is_disabled():
                return None
            return item.last_completed_outcome()
        except Exception as e:
            self._source_failed(leaf, item, e, strict)
            return None

    def _source_failed(
        self,
        leaf: "LeafNode",
        item: Optional[WorkItem],
        error: Exception,
        strict: bool,
    ) -> None:
        item_name = getattr(item, "name", None)
        if strict:
            raise WorkItemSourceError(
                f"Work item source of view {leaf.full_name!r} failed: {error}",
                {"view": leaf.full_name, "item": item_name},
            ) from error
        logger.warning(
            "work_item_source_failed",
            view=leaf.full_name,
            item=item_name,
            error=str(error),
        )


def get_worst_result(
    node: "ContainerNode", strict: bool = False
) -> Optional[Outcome]:
    """Worst outcome under ``node`` with a one-off aggregator"""
    return StatusAggregator(strict=strict).get_worst_result(node)
