"""
Service Result Type

Every data-access call returns a ServiceResult instead of raising or
returning an empty value, so "the request failed" and "there is no
data" can no longer be confused by callers.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

NOT_FOUND = "not_found"
CONFLICT = "conflict"
BACKEND_ERROR = "backend_error"
INVALID = "invalid"


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a data-access call.

    Attributes:
        success: Whether the call succeeded
        value: Returned value (may legitimately be empty on success)
        error_message: Human-readable failure reason
        error_code: Machine-readable failure code (not_found, conflict, ...)
    """
    success: bool
    value: Optional[T] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, message: str, code: str = BACKEND_ERROR) -> "ServiceResult[T]":
        return cls(success=False, error_message=message, error_code=code)

    @property
    def is_not_found(self) -> bool:
        return not self.success and self.error_code == NOT_FOUND

    def unwrap_or(self, default: T) -> T:
        """Value on success, otherwise the given default."""
        if self.success and self.value is not None:
            return self.value
        return default

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "value": self.value,
            "error_message": self.error_message,
            "error_code": self.error_code,
        }
