"""
Core Type Definitions for the Zenith Key-Path Store

Implements Result/Either monads for exception-free control flow across
the engine, plus the identity types shared by every component.

Design Principles:
- Domain failures travel as Err values, never as raised exceptions
- Identifiers are typed wrappers, never bare strings
- All timestamps are timezone-aware UTC
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    TypeVar,
    Union,
)
from uuid import UUID, uuid4

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result.

    Carries the full error object so callers can branch on its kind.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """Propagates error unchanged."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# IDENTITY TYPES
# =============================================================================
@dataclass(frozen=True, slots=True, order=True)
class PrincipalId:
    """
    Stable identifier of a registered principal.

    Carried as the ``sub`` claim of session tokens and stored as the
    owner of every bucket the principal creates.
    """

    value: UUID

    @classmethod
    def generate(cls) -> PrincipalId:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, s: str) -> Result[PrincipalId, str]:
        """
        Parse PrincipalId from its string form.

        Returns:
            Ok[PrincipalId]: Valid parsed identifier
            Err[str]: Validation error message
        """
        try:
            return Ok(cls(value=UUID(s)))
        except (ValueError, TypeError, AttributeError) as e:
            return Err(f"Invalid PrincipalId format: {e}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True, order=True)
class BucketId:
    """Stable identifier of a bucket; also keys its document partition."""

    value: UUID

    @classmethod
    def generate(cls) -> BucketId:
        return cls(value=uuid4())

    @classmethod
    def from_string(cls, s: str) -> Result[BucketId, str]:
        try:
            return Ok(cls(value=UUID(s)))
        except (ValueError, TypeError, AttributeError) as e:
            return Err(f"Invalid BucketId format: {e}")

    def __str__(self) -> str:
        return str(self.value)


# =============================================================================
# TIME
# =============================================================================
def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """Serialize a datetime the way API responses expect (ISO-8601, ms, Z)."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
