"""
Form validation results

Name checks never raise; they return a ValidationResult for the
presentation layer to render.
"""

from enum import Enum
from typing import Any, Optional


class Kind(str, Enum):
    OK = "ok"
    ERROR = "error"


class ValidationResult:
    """
    Validation result

    Attributes:
        kind: OK or ERROR
        message: human readable message, None when OK
    """

    def __init__(self, kind: Kind = Kind.OK, message: Optional[str] = None):
        self.kind = kind
        self.message = message

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(Kind.OK)

    @classmethod
    def error(cls, message: str) -> "ValidationResult":
        return cls(Kind.ERROR, message)

    @property
    def valid(self) -> bool:
        return self.kind is Kind.OK

    def __repr__(self) -> str:
        return f"ValidationResult(kind={self.kind.value!r}, message={self.message!r})"


def validate_view_name(name: Any) -> str:
    """Reject names that cannot be addressed in a view path"""
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Invalid view name: {name!r}")
    if "/" in name:
        raise ValueError(f"View name must not contain '/': {name!r}")
    return name
