"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the store:
- Result/Either monads for exception-free control flow
- Error hierarchy with machine-readable kinds and codes
- Configuration management with validation
"""

from zenith.core.types import (
    Result,
    Ok,
    Err,
    PrincipalId,
    BucketId,
)
from zenith.core.errors import (
    ErrorKind,
    ErrorCode,
    ZenithError,
    AuthError,
    StorageError,
    RequestError,
)
from zenith.core.config import ZenithConfig

__all__ = [
    "Result",
    "Ok",
    "Err",
    "PrincipalId",
    "BucketId",
    "ErrorKind",
    "ErrorCode",
    "ZenithError",
    "AuthError",
    "StorageError",
    "RequestError",
    "ZenithConfig",
]
