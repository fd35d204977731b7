"""Result<T> pattern — domain functions return this instead of raising exceptions for normal flow."""
from __future__ import annotations
from enum import Enum
from typing import TypeVar, Generic, Optional

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Failure kinds a caller must be able to tell apart."""

    CONTENT_NOT_FOUND = "CONTENT_NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"
    INVALID_APPROVAL = "INVALID_APPROVAL"
    INVALID_FEEDBACK = "INVALID_FEEDBACK"
    INVALID_CONTENT = "INVALID_CONTENT"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_APPROVED = "NOT_APPROVED"
    ALREADY_PROMOTED = "ALREADY_PROMOTED"
    STORAGE_FAILURE = "STORAGE_FAILURE"


class Result(Generic[T]):
    def __init__(
        self,
        is_success: bool,
        value: Optional[T] = None,
        error: Optional[str] = None,
        code: Optional[ErrorCode] = None,
    ):
        self.is_success = is_success
        self.value = value
        self.error = error
        self.code = code

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def fail(cls, error: str, code: ErrorCode) -> "Result[T]":
        return cls(is_success=False, error=error, code=code)

    @classmethod
    def propagate(cls, other: "Result") -> "Result[T]":
        """Re-wrap a failed result of another type, keeping message and code."""
        return cls(is_success=False, error=other.error, code=other.code)

    def __repr__(self) -> str:
        if self.is_success:
            return f"Result.ok({self.value!r})"
        return f"Result.fail({self.error!r}, {self.code})"
