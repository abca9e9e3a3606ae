"""
Error Hierarchy for the Zenith Key-Path Store

Design Principles:
- Domain failures are returned as Err values (see core.types)
- Every error carries a machine-readable kind and code; callers branch
  on those, never on message text
- Errors are terminal for the operation that produced them; the engine
  never retries internally

Each error type includes:
- ErrorKind: the coarse category a client reacts to (NotFound, Forbidden...)
- ErrorCode: a unique numeric code for the precise failure
- Human-readable message for logging
- Optional cause and context for debugging

Usage:
    result = await store.read(bucket_id, "/users/1")
    match result:
        case Ok(document):
            render(document)
        case Err(error) if error.kind is ErrorKind.NOT_FOUND:
            respond_404()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from zenith.core.types import isoformat, utcnow


# =============================================================================
# ERROR KINDS
# =============================================================================
class ErrorKind(Enum):
    """
    Client-facing error taxonomy.

    The value is the HTTP status the gateway answers with.
    """

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INVALID_PAYLOAD = 422
    INTERNAL = 500

    @property
    def http_status(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        """CamelCase name used on the wire ("NotFound", "BadRequest")."""
        return "".join(part.capitalize() for part in self.name.split("_"))


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Security errors
    - 2xxx: Storage errors
    - 3xxx: Request errors
    - 9xxx: Internal errors
    """

    # Security errors (1xxx)
    SECURITY_UNAUTHORIZED = 1001
    SECURITY_TOKEN_INVALID = 1002
    SECURITY_TOKEN_EXPIRED = 1003
    SECURITY_FORBIDDEN = 1004
    SECURITY_PRINCIPAL_CONFLICT = 1005

    # Storage errors (2xxx)
    STORAGE_BUCKET_NOT_FOUND = 2001
    STORAGE_DOCUMENT_NOT_FOUND = 2002
    STORAGE_INVALID_PAYLOAD = 2003

    # Request errors (3xxx)
    REQUEST_MISSING_FIELD = 3001
    REQUEST_INVALID_FIELD = 3002
    REQUEST_BATCH_TOO_LARGE = 3003
    REQUEST_MALFORMED_BODY = 3004

    # Internal errors (9xxx)
    INTERNAL_ERROR = 9001

    @property
    def kind(self) -> ErrorKind:
        return _CODE_KINDS[self]


_CODE_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.SECURITY_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    ErrorCode.SECURITY_TOKEN_INVALID: ErrorKind.UNAUTHORIZED,
    ErrorCode.SECURITY_TOKEN_EXPIRED: ErrorKind.UNAUTHORIZED,
    ErrorCode.SECURITY_FORBIDDEN: ErrorKind.FORBIDDEN,
    ErrorCode.SECURITY_PRINCIPAL_CONFLICT: ErrorKind.CONFLICT,
    ErrorCode.STORAGE_BUCKET_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.STORAGE_DOCUMENT_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.STORAGE_INVALID_PAYLOAD: ErrorKind.INVALID_PAYLOAD,
    ErrorCode.REQUEST_MISSING_FIELD: ErrorKind.BAD_REQUEST,
    ErrorCode.REQUEST_INVALID_FIELD: ErrorKind.BAD_REQUEST,
    ErrorCode.REQUEST_BATCH_TOO_LARGE: ErrorKind.BAD_REQUEST,
    ErrorCode.REQUEST_MALFORMED_BODY: ErrorKind.BAD_REQUEST,
    ErrorCode.INTERNAL_ERROR: ErrorKind.INTERNAL,
}


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class ZenithError(Exception):
    """
    Base class for all Zenith errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Error code and kind for programmatic handling
    - Cause chain for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utcnow)
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def kind(self) -> ErrorKind:
        return self.code.kind

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize error for logging/API responses.

        The cause is deliberately left out so internals never reach clients.
        """
        return {
            "error": self.message,
            "kind": self.kind.label,
            "code": self.code.name,
            "codeValue": self.code.value,
            "errorId": self.error_id,
            "timestamp": isoformat(self.timestamp),
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# SECURITY ERRORS
# =============================================================================
@dataclass
class AuthError(ZenithError):
    """
    Errors from authentication and authorization.

    Covers bad credentials, rejected tokens, cross-tenant access and
    duplicate registrations.
    """

    @classmethod
    def unauthorized(cls, reason: str) -> AuthError:
        """Request lacks valid credentials."""
        return cls(
            code=ErrorCode.SECURITY_UNAUTHORIZED,
            message=f"Unauthorized: {reason}",
            context={"reason": reason},
        )

    @classmethod
    def token_invalid(cls, reason: str, cause: Optional[Exception] = None) -> AuthError:
        """Token is malformed, tampered with, or issued elsewhere."""
        return cls(
            code=ErrorCode.SECURITY_TOKEN_INVALID,
            message=f"Invalid token: {reason}",
            cause=cause,
            context={"reason": reason},
        )

    @classmethod
    def token_expired(cls, cause: Optional[Exception] = None) -> AuthError:
        """Token signature is valid but its validity window has passed."""
        return cls(
            code=ErrorCode.SECURITY_TOKEN_EXPIRED,
            message="Token expired",
            cause=cause,
        )

    @classmethod
    def forbidden(cls, resource: str, action: str) -> AuthError:
        """Authenticated principal does not own the resource."""
        return cls(
            code=ErrorCode.SECURITY_FORBIDDEN,
            message=f"Access denied: cannot {action} {resource}",
            context={"resource": resource, "action": action},
        )

    @classmethod
    def conflict(cls, login_id: str) -> AuthError:
        """Login identifier already registered."""
        return cls(
            code=ErrorCode.SECURITY_PRINCIPAL_CONFLICT,
            message="User already exists",
            context={"login_id": login_id},
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================
@dataclass
class StorageError(ZenithError):
    """Errors from the bucket registry and document store."""

    @classmethod
    def bucket_not_found(cls, bucket_id: str) -> StorageError:
        return cls(
            code=ErrorCode.STORAGE_BUCKET_NOT_FOUND,
            message="Bucket not found",
            context={"bucket_id": bucket_id},
        )

    @classmethod
    def document_not_found(cls, bucket_id: str, path: str) -> StorageError:
        return cls(
            code=ErrorCode.STORAGE_DOCUMENT_NOT_FOUND,
            message="Data not found",
            context={"bucket_id": bucket_id, "path": path},
        )

    @classmethod
    def invalid_payload(
        cls,
        path: str,
        reason: str,
        cause: Optional[Exception] = None,
    ) -> StorageError:
        """Payload cannot be serialized as JSON."""
        return cls(
            code=ErrorCode.STORAGE_INVALID_PAYLOAD,
            message=f"Payload at '{path}' is not JSON-serializable: {reason}",
            cause=cause,
            context={"path": path, "reason": reason},
        )


# =============================================================================
# REQUEST ERRORS
# =============================================================================
@dataclass
class RequestError(ZenithError):
    """Errors caused by malformed or incomplete caller input."""

    @classmethod
    def missing_field(cls, field_name: str) -> RequestError:
        return cls(
            code=ErrorCode.REQUEST_MISSING_FIELD,
            message=f"'{field_name}' is required",
            context={"field": field_name},
        )

    @classmethod
    def invalid_field(cls, field_name: str, value: Any, reason: str) -> RequestError:
        return cls(
            code=ErrorCode.REQUEST_INVALID_FIELD,
            message=f"Invalid '{field_name}': {reason}",
            context={"field": field_name, "value": str(value)[:100], "reason": reason},
        )

    @classmethod
    def batch_too_large(cls, size: int, limit: int) -> RequestError:
        return cls(
            code=ErrorCode.REQUEST_BATCH_TOO_LARGE,
            message=f"Batch of {size} items exceeds limit of {limit}",
            context={"size": size, "limit": limit},
        )

    @classmethod
    def malformed_body(cls, reason: str, cause: Optional[Exception] = None) -> RequestError:
        return cls(
            code=ErrorCode.REQUEST_MALFORMED_BODY,
            message=f"Invalid JSON: {reason}",
            cause=cause,
            context={"reason": reason},
        )


@dataclass
class InternalError(ZenithError):
    """Unexpected failures surfaced by the gateway as 500."""

    @classmethod
    def unexpected(cls, cause: Exception) -> InternalError:
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message="Internal server error",
            cause=cause,
        )
