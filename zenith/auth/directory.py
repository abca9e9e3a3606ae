"""
Principal Directory: Login Identifier to Principal Records

Storage Model:
    In-memory, owned by the engine for the lifetime of the process.
    Two indexes are kept in step: login_id -> Principal and
    principal_id -> Principal.

Invariants:
    - login_id is unique across all principals
    - Principals are never removed
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from zenith.core.errors import AuthError
from zenith.core.types import Err, Ok, PrincipalId, Result, isoformat, utcnow


@dataclass(frozen=True, slots=True)
class Principal:
    """
    A registered identity.

    ``credential_hash`` is the salted one-way hash of the secret; the
    plaintext secret is never stored.
    """
    principal_id: PrincipalId
    login_id: str
    credential_hash: str
    display_name: str
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Public view (no credential material)."""
        return {
            "userId": str(self.principal_id),
            "email": self.login_id,
            "name": self.display_name,
            "createdAt": isoformat(self.created_at),
        }


class PrincipalDirectory:
    """
    Registry of principals keyed by login identifier.

    Usage:
        directory = PrincipalDirectory()
        result = await directory.add(principal)
        if result.is_err():
            ...  # AuthError.conflict
    """

    __slots__ = ("_by_login", "_by_id", "_lock")

    def __init__(self) -> None:
        self._by_login: dict[str, Principal] = {}
        self._by_id: dict[PrincipalId, Principal] = {}
        self._lock = asyncio.Lock()

    async def add(self, principal: Principal) -> Result[Principal, AuthError]:
        """
        Insert a principal.

        The uniqueness check and the insert run under one lock, so of two
        concurrent registrations for the same login exactly one succeeds.
        """
        async with self._lock:
            if principal.login_id in self._by_login:
                return Err(AuthError.conflict(principal.login_id))

            self._by_login[principal.login_id] = principal
            self._by_id[principal.principal_id] = principal
            return Ok(principal)

    def get_by_login(self, login_id: str) -> Optional[Principal]:
        return self._by_login.get(login_id)

    def get(self, principal_id: PrincipalId) -> Optional[Principal]:
        return self._by_id.get(principal_id)

    @property
    def count(self) -> int:
        return len(self._by_login)
