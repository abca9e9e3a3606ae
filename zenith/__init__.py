"""
Zenith: Multi-Tenant Key-Path Document Store

A bucketed JSON document store served over HTTP:
- Principals register and log in; requests carry signed bearer tokens
- Each principal owns isolated buckets; only the owner can touch them
- Documents are arbitrary JSON addressed by hierarchical string paths
- Batch writes are ordered best-effort with per-item outcomes
- Vector search is a non-semantic stub returning opaque scores

Everything is held in memory and lost on restart.
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
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
from zenith.engine import ZenithEngine
from zenith.api.app import build_router, create_app
from zenith.client import ZenithClient, ZenithClientError

__all__ = [
    "__version__",
    # Core
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
    # Engine
    "ZenithEngine",
    # Gateway
    "build_router",
    "create_app",
    # Client
    "ZenithClient",
    "ZenithClientError",
]
