"""
Result types and error hierarchy for zjump.

This module provides:
1. Result[T, E] type for explicit error handling
2. Domain-specific exception hierarchy
3. Helper functions for Result operations

Usage:
    from zjump.core.result import Ok, Err, Result, StoreError

    def save() -> Result[Path, StoreError]:
        if unwritable:
            return Err(StoreError("Failed to write data file"))
        return Ok(path)

    match save():
        case Ok(path):
            ...
        case Err(err):
            logger.debug(err.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Represents a failed result containing an error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error


# Type alias for Result
Result = Ok[T] | Err[E]


# ---------------------------------------------------------------------------
# Domain-specific error hierarchy
# ---------------------------------------------------------------------------


class ZJumpError(Exception):
    """Base exception for all zjump errors.

    Carries a human-readable message plus optional structured context that
    is rendered after the message.
    """

    def __init__(self, message: str, *, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ConfigurationError(ZJumpError):
    """Raised for configuration issues.

    Examples:
    - Config file parse errors
    - Invalid config values
    """

    pass


class StoreError(ZJumpError):
    """Raised when the data file cannot be read or written.

    Examples:
    - Permission denied on load or save
    - Data file path is a directory
    - Parent directory cannot be created
    """

    pass


class EntryParseError(ZJumpError):
    """Raised for a data file line that does not describe an entry.

    Examples:
    - Wrong number of fields
    - Non-numeric or non-finite rank
    - Negative or non-integer access time
    """

    pass


class NoMatchError(ZJumpError):
    """Raised when no remembered directory matches a pattern."""

    pass


class StaleEntryError(ZJumpError):
    """Raised when the best match points at a directory that no longer exists."""

    pass


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def try_result(fn: Callable[[], T], error_type: type[E] = ZJumpError) -> Result[T, E]:
    """Execute a function and wrap the result in Ok/Err.

    Args:
        fn: Function to execute
        error_type: Exception type to catch (default: ZJumpError)

    Returns:
        Ok(value) on success, Err(exception) on failure
    """
    try:
        return Ok(fn())
    except error_type as exc:
        return Err(exc)


__all__ = [
    # Result types
    "Ok",
    "Err",
    "Result",
    # Error hierarchy
    "ZJumpError",
    "ConfigurationError",
    "StoreError",
    "EntryParseError",
    "NoMatchError",
    "StaleEntryError",
    # Helpers
    "try_result",
]
