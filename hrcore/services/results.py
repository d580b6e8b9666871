"""
Result types returned by the service layer.

Controllers (REST or socket handlers) consume the ``{done, data, error}``
envelope produced by ``ServiceResult.to_dict()`` and map ``kind`` to a
transport status.  Services never raise business-rule or database
failures to their callers; they return a failed result instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Category of a failed service call."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ServiceResult:
    """Outcome of a service operation."""

    done: bool
    data: Any = None
    error: str | None = None
    kind: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> "ServiceResult":
        """Build a successful result."""
        return cls(done=True, data=data, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> "ServiceResult":
        """Build a failed result of the given kind."""
        return cls(done=False, error=error, kind=kind)

    def to_dict(self) -> dict[str, Any]:
        """Return the envelope dict expected by controllers."""
        envelope: dict[str, Any] = {"done": self.done}
        if self.data is not None:
            envelope["data"] = self.data
        if self.error is not None:
            envelope["error"] = self.error
        if self.message is not None:
            envelope["message"] = self.message
        return envelope


@dataclass
class LifecycleValidation:
    """Answer to "may this employee start a new lifecycle action?"."""

    is_valid: bool
    message: str = ""


@dataclass
class SweepResult:
    """Counts from one pass over due promotions."""

    applied: int = 0
    failed: int = 0

    def __add__(self, other: "SweepResult") -> "SweepResult":
        return SweepResult(
            applied=self.applied + other.applied,
            failed=self.failed + other.failed,
        )

    def to_dict(self) -> dict[str, int]:
        return {"applied": self.applied, "failed": self.failed}
