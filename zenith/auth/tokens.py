"""
Session Tokens: Signed JWTs

Tokens are self-contained: the server keeps no session table, so a token
stays valid until its ``exp`` claim passes. There is no revocation.

Claims:
    sub    principal id
    login  login identifier at issue time
    iss    configured issuer
    iat    issue time (epoch seconds)
    exp    expiry (epoch seconds)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from zenith.core.config import AuthConfig
from zenith.core.errors import AuthError
from zenith.core.types import Err, Ok, PrincipalId, Result, utcnow

logger = logging.getLogger(__name__)

_REQUIRED_CLAIMS = ("sub", "iss", "iat", "exp")


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """A freshly minted token and its expiry."""
    token: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims of a session token."""
    principal_id: PrincipalId
    login_id: Optional[str]
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """
    Mints and verifies session tokens with a shared signing secret.

    Usage:
        codec = TokenCodec(config.auth)
        issued = codec.mint(principal_id, "a@x.com")
        claims = codec.verify(issued.token).unwrap()
    """

    __slots__ = ("_config", "_ttl")

    def __init__(self, config: AuthConfig) -> None:
        self._config = config
        self._ttl = timedelta(seconds=config.token_ttl_seconds)

    def mint(
        self,
        principal_id: PrincipalId,
        login_id: str,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        issued_at = now or utcnow()
        expires_at = issued_at + self._ttl
        payload = {
            "sub": str(principal_id),
            "login": login_id,
            "iss": self._config.jwt_issuer,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._config.jwt_secret, algorithm=self._config.jwt_algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> Result[TokenClaims, AuthError]:
        """Pure verification: signature, expiry, issuer, claim shape."""
        try:
            payload = jwt.decode(
                token,
                self._config.jwt_secret,
                algorithms=[self._config.jwt_algorithm],
                issuer=self._config.jwt_issuer,
                options={"require": list(_REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Rejected expired token")
            return Err(AuthError.token_expired(cause=e))
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected invalid token: {e}")
            return Err(AuthError.token_invalid(str(e), cause=e))

        parsed = PrincipalId.from_string(payload["sub"])
        if parsed.is_err():
            return Err(AuthError.token_invalid("subject is not a principal id"))

        return Ok(TokenClaims(
            principal_id=parsed.unwrap(),
            login_id=payload.get("login"),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        ))
