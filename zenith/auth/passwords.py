"""
Credential hashing with bcrypt.

Secrets are hashed with a fresh salt per principal and compared through
bcrypt's constant-time check. bcrypt only reads the first 72 bytes of its
input, so longer secrets are rejected instead of silently truncated.
"""

from __future__ import annotations

import asyncio

import bcrypt

from zenith.core import constants as C
from zenith.core.errors import RequestError
from zenith.core.types import Err, Ok, Result


def check_secret(secret: str) -> Result[bytes, RequestError]:
    """Validate a plaintext secret and return its encoded form."""
    encoded = secret.encode("utf-8")
    if len(encoded) > C.BCRYPT_MAX_SECRET_BYTES:
        return Err(RequestError.invalid_field(
            "password",
            "<redacted>",
            f"must be at most {C.BCRYPT_MAX_SECRET_BYTES} bytes",
        ))
    return Ok(encoded)


def hash_secret(secret: bytes, rounds: int = C.BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_secret(secret: bytes, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(secret, hashed.encode("ascii"))
    except ValueError:
        # Corrupt stored hash never authenticates
        return False


async def hash_secret_async(secret: bytes, rounds: int = C.BCRYPT_ROUNDS) -> str:
    """Hash on a worker thread; bcrypt is deliberately slow."""
    return await asyncio.to_thread(hash_secret, secret, rounds)


async def verify_secret_async(secret: bytes, hashed: str) -> bool:
    return await asyncio.to_thread(verify_secret, secret, hashed)
