"""
Default child resolution

A nested view addressed without a child name may redirect to its default
child. Only directly displayable children (not nested views) are offered as
candidates, and a default that no longer resolves simply means "no redirect".
"""

from typing import TYPE_CHECKING, List, Optional

from ..utils.logging import get_logger

if TYPE_CHECKING:
    from .nodes import CompositeNode, ContainerNode

logger = get_logger(__name__)

NO_DEFAULT = ""


def resolve_default(composite: "CompositeNode") -> Optional["ContainerNode"]:
    """
    Child to redirect to, or None to show the nested view itself

    Unset, empty and dangling defaults all give None.
    """
    name = composite.default_child_name
    if not name:
        return None

    child = composite.get_child(name)
    if child is None:
        logger.debug(
            "default_view_dangling", view=composite.full_name, default_view=name
        )
    return child


def default_child_candidates(composite: "CompositeNode") -> List[str]:
    """
    Values offered when configuring the default child

    The "none" option (empty string) comes first, followed by the names of
    non-nested children in lexicographic order.
    """
    names = sorted(
        child.name for child in composite.list_children() if not child.is_composite
    )
    return [NO_DEFAULT] + names


def set_default_child(composite: "CompositeNode", name: Optional[str]) -> None:
    """Store the default child name; None or "" clears it"""
    composite._default_child_name = name or None
