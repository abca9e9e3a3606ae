"""
System-Wide Constants for the Zenith Key-Path Store

All magic numbers and configuration defaults centralized here.
"""

from typing import Final

# =============================================================================
# TIME UNITS
# =============================================================================
MINUTE_S: Final[int] = 60
HOUR_S: Final[int] = 60 * MINUTE_S
DAY_S: Final[int] = 24 * HOUR_S

# =============================================================================
# AUTHENTICATION
# =============================================================================
TOKEN_TTL_S: Final[int] = DAY_S
JWT_ALGORITHM: Final[str] = "HS256"
JWT_ISSUER: Final[str] = "zenith"
DEV_JWT_SECRET: Final[str] = "zenith-secret-key-change-in-production"
BCRYPT_ROUNDS: Final[int] = 12
BCRYPT_MIN_ROUNDS: Final[int] = 4
BCRYPT_MAX_ROUNDS: Final[int] = 31
BCRYPT_MAX_SECRET_BYTES: Final[int] = 72
DEFAULT_DISPLAY_NAME: Final[str] = "User"

# =============================================================================
# BUCKETS
# =============================================================================
DURABILITY_STANDARD: Final[str] = "standard"
DEFAULT_REGION: Final[str] = "us-east-1"

# =============================================================================
# DOCUMENTS
# =============================================================================
PATH_SEPARATOR: Final[str] = "/"
MAX_BATCH_ITEMS: Final[int] = 1000
DEFAULT_SEARCH_TOP_K: Final[int] = 10
MAX_SEARCH_RESULTS: Final[int] = 1000

# =============================================================================
# SERVER
# =============================================================================
DEFAULT_HOST: Final[str] = "0.0.0.0"
DEFAULT_PORT: Final[int] = 3000
API_PREFIX: Final[str] = "/api"
API_VERSION: Final[str] = "1.0.0"
