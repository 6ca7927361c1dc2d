"""
nestview exception definitions

Errors raised by the view tree: name collisions, unknown children,
ownership cycles, malformed descriptions and strict-mode source failures.
"""

from typing import Any, Dict, Optional


class NestViewError(Exception):
    """nestview base exception"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DuplicateNameError(NestViewError):
    """
    Name collision

    Raised by add/rename when a different sibling already holds the name.
    The children of the composite are left unchanged.
    """

    pass


class NodeNotFoundError(NestViewError):
    """
    Unknown child

    Raised when an operation names a child that is not present.
    """

    pass


class OwnershipCycleError(NestViewError):
    """
    Ownership cycle

    Raised when adding a node would make it its own descendant.
    """

    pass


class InvalidDescriptionError(NestViewError):
    """
    Malformed view description

    Occurs while loading a replacement description: unparseable text,
    failed structural validation, repeated child names, etc. The live tree
    is never modified when this is raised.
    """

    pass


class WorkItemSourceError(NestViewError):
    """
    Work item source failure

    Only raised by strict aggregation; best-effort aggregation logs the
    failure and skips the item instead.
    """

    pass
