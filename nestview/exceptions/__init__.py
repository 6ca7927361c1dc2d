"""nestview exception module

Provides all exception classes
"""

from .errors import (
    NestViewError,
    DuplicateNameError,
    NodeNotFoundError,
    OwnershipCycleError,
    InvalidDescriptionError,
    WorkItemSourceError,
)

__all__ = [
    "NestViewError",
    "DuplicateNameError",
    "NodeNotFoundError",
    "OwnershipCycleError",
    "InvalidDescriptionError",
    "WorkItemSourceError",
]
