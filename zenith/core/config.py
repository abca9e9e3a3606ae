"""
Configuration Management for the Zenith Key-Path Store

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from zenith.core import constants as C
from zenith.core.types import Err, Ok, Result


@dataclass(frozen=True)
class AuthConfig:
    """Credential hashing and session token configuration."""

    jwt_secret: str = C.DEV_JWT_SECRET
    jwt_algorithm: str = C.JWT_ALGORITHM
    jwt_issuer: str = C.JWT_ISSUER
    token_ttl_seconds: int = C.TOKEN_TTL_S
    bcrypt_rounds: int = C.BCRYPT_ROUNDS


@dataclass(frozen=True)
class StorageConfig:
    """Bucket and document defaults."""

    default_durability: str = C.DURABILITY_STANDARD
    default_region: str = C.DEFAULT_REGION
    max_batch_items: int = C.MAX_BATCH_ITEMS
    max_search_results: int = C.MAX_SEARCH_RESULTS


@dataclass(frozen=True)
class ServerConfig:
    """HTTP gateway configuration."""

    host: str = C.DEFAULT_HOST
    port: int = C.DEFAULT_PORT
    api_prefix: str = C.API_PREFIX
    cors_origins: tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging and metrics configuration."""

    log_level: str = "INFO"
    log_json: bool = True
    metrics_enabled: bool = True


@dataclass(frozen=True)
class ZenithConfig:
    """Root configuration."""

    environment: str = "development"
    auth: AuthConfig = field(default_factory=AuthConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> Result[ZenithConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with ZENITH_.
        Example: ZENITH_JWT_SECRET, ZENITH_PORT, ZENITH_LOG_LEVEL
        A bare PORT is honoured when ZENITH_PORT is unset.
        """
        try:
            auth = AuthConfig(
                jwt_secret=os.getenv("ZENITH_JWT_SECRET", C.DEV_JWT_SECRET),
                jwt_algorithm=os.getenv("ZENITH_JWT_ALGORITHM", C.JWT_ALGORITHM),
                jwt_issuer=os.getenv("ZENITH_JWT_ISSUER", C.JWT_ISSUER),
                token_ttl_seconds=int(os.getenv("ZENITH_TOKEN_TTL_SECONDS", str(C.TOKEN_TTL_S))),
                bcrypt_rounds=int(os.getenv("ZENITH_BCRYPT_ROUNDS", str(C.BCRYPT_ROUNDS))),
            )

            storage = StorageConfig(
                default_durability=os.getenv("ZENITH_DEFAULT_DURABILITY", C.DURABILITY_STANDARD),
                default_region=os.getenv("ZENITH_DEFAULT_REGION", C.DEFAULT_REGION),
                max_batch_items=int(os.getenv("ZENITH_MAX_BATCH_ITEMS", str(C.MAX_BATCH_ITEMS))),
            )

            origins = os.getenv("ZENITH_CORS_ORIGINS", "*")
            server = ServerConfig(
                host=os.getenv("ZENITH_HOST", C.DEFAULT_HOST),
                port=int(os.getenv("ZENITH_PORT", os.getenv("PORT", str(C.DEFAULT_PORT)))),
                api_prefix=os.getenv("ZENITH_API_PREFIX", C.API_PREFIX),
                cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            )

            observability = ObservabilityConfig(
                log_level=os.getenv("ZENITH_LOG_LEVEL", "INFO").upper(),
                log_json=os.getenv("ZENITH_LOG_JSON", "true").lower() in {"1", "true", "yes"},
                metrics_enabled=os.getenv("ZENITH_METRICS", "true").lower() in {"1", "true", "yes"},
            )

            return Ok(cls(
                environment=os.getenv("ZENITH_ENV", "development"),
                auth=auth,
                storage=storage,
                server=server,
                observability=observability,
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if not self.auth.jwt_secret:
            return Err("JWT secret must not be empty")
        if self.is_production and self.auth.jwt_secret == C.DEV_JWT_SECRET:
            return Err("ZENITH_JWT_SECRET must be set in production")
        if not C.BCRYPT_MIN_ROUNDS <= self.auth.bcrypt_rounds <= C.BCRYPT_MAX_ROUNDS:
            return Err(
                f"bcrypt rounds must be within "
                f"{C.BCRYPT_MIN_ROUNDS}..{C.BCRYPT_MAX_ROUNDS}"
            )
        if self.auth.token_ttl_seconds <= 0:
            return Err("Token TTL must be positive")
        if self.storage.max_batch_items < 1:
            return Err("max_batch_items must be >= 1")
        if not 0 < self.server.port < 65536:
            return Err(f"Invalid port {self.server.port}")
        if self.server.api_prefix and not self.server.api_prefix.startswith("/"):
            return Err("API prefix must start with '/'")
        return Ok(None)
