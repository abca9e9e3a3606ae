"""
Authenticator: Registration, Login and Token Verification

Implements:
- register: create a principal and immediately issue a session token
- login: verify credentials and issue a session token
- authenticate: resolve a bearer token to a principal id

Verification is stateless given the signing secret; the only way a
session ends is token expiry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from zenith.auth import passwords
from zenith.auth.directory import Principal, PrincipalDirectory
from zenith.auth.tokens import TokenCodec
from zenith.core import constants as C
from zenith.core.config import AuthConfig
from zenith.core.errors import AuthError, RequestError, ZenithError
from zenith.core.types import Err, Ok, PrincipalId, Result, isoformat
from zenith.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthSession:
    """Outcome of a successful register or login."""
    principal_id: PrincipalId
    login_id: str
    token: str
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": str(self.principal_id),
            "email": self.login_id,
            "token": self.token,
            "expiresAt": isoformat(self.expires_at),
        }


class Authenticator:
    """
    Credential validation and session token issuance.

    Usage:
        auth = Authenticator(PrincipalDirectory(), TokenCodec(cfg), cfg)
        session = (await auth.register("a@x.com", "pw", "A")).unwrap()
        principal_id = auth.authenticate(session.token).unwrap()
    """

    __slots__ = ("_directory", "_tokens", "_config", "_attempts", "_unknown_login_hash")

    def __init__(
        self,
        directory: PrincipalDirectory,
        tokens: TokenCodec,
        config: AuthConfig,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._directory = directory
        self._tokens = tokens
        self._config = config
        self._unknown_login_hash: Optional[str] = None
        self._attempts = (metrics or MetricsCollector()).counter(
            "zenith_auth_attempts_total",
            label_names=["operation", "outcome"],
            help_text="Registration and login attempts",
        )

    async def register(
        self,
        login_id: Optional[str],
        secret: Optional[str],
        display_name: Optional[str] = None,
    ) -> Result[AuthSession, ZenithError]:
        """
        Register a new principal.

        Fails with Conflict if the login is taken, BadRequest if a
        required field is missing.
        """
        checked = self._check_credentials(login_id, secret)
        if checked.is_err():
            self._attempts.inc(operation="register", outcome="rejected")
            return checked
        encoded = checked.unwrap()

        # Hash before taking the directory lock; only the insert is serialized
        credential_hash = await passwords.hash_secret_async(encoded, self._config.bcrypt_rounds)
        principal = Principal(
            principal_id=PrincipalId.generate(),
            login_id=login_id,
            credential_hash=credential_hash,
            display_name=display_name or C.DEFAULT_DISPLAY_NAME,
        )

        added = await self._directory.add(principal)
        if added.is_err():
            self._attempts.inc(operation="register", outcome="conflict")
            return added

        logger.info(f"Registered principal {principal.principal_id}")
        self._attempts.inc(operation="register", outcome="ok")
        return Ok(self._issue(principal))

    async def login(
        self,
        login_id: Optional[str],
        secret: Optional[str],
    ) -> Result[AuthSession, ZenithError]:
        """
        Verify credentials and issue a fresh token.

        Unknown login and wrong secret produce the same Unauthorized error.
        """
        checked = self._check_credentials(login_id, secret)
        if checked.is_err():
            self._attempts.inc(operation="login", outcome="rejected")
            return checked

        principal = self._directory.get_by_login(login_id)
        # Unknown logins still pay for one bcrypt check
        hashed = principal.credential_hash if principal is not None else await self._dummy_hash()
        verified = await passwords.verify_secret_async(checked.unwrap(), hashed)
        if principal is None or not verified:
            self._attempts.inc(operation="login", outcome="denied")
            return Err(AuthError.unauthorized("Invalid credentials"))

        self._attempts.inc(operation="login", outcome="ok")
        return Ok(self._issue(principal))

    def authenticate(self, token: Optional[str]) -> Result[PrincipalId, AuthError]:
        """Resolve a bearer token to its principal. Never mutates state."""
        if not token:
            return Err(AuthError.unauthorized("No token provided"))
        return self._tokens.verify(token).map(lambda claims: claims.principal_id)

    def principal(self, principal_id: PrincipalId) -> Optional[Principal]:
        return self._directory.get(principal_id)

    async def _dummy_hash(self) -> str:
        """Hash compared against when the login is unknown; made once, at configured cost."""
        if self._unknown_login_hash is None:
            self._unknown_login_hash = await passwords.hash_secret_async(
                b"zenith-unknown-login", self._config.bcrypt_rounds
            )
        return self._unknown_login_hash

    def _issue(self, principal: Principal) -> AuthSession:
        issued = self._tokens.mint(principal.principal_id, principal.login_id)
        return AuthSession(
            principal_id=principal.principal_id,
            login_id=principal.login_id,
            token=issued.token,
            expires_at=issued.expires_at,
        )

    @staticmethod
    def _check_credentials(
        login_id: Optional[str],
        secret: Optional[str],
    ) -> Result[bytes, RequestError]:
        if not login_id or not isinstance(login_id, str):
            return Err(RequestError.missing_field("email"))
        if not secret or not isinstance(secret, str):
            return Err(RequestError.missing_field("password"))
        return passwords.check_secret(secret)
