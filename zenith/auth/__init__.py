"""
Auth module: Principals, credential hashing, session tokens.
"""

from zenith.auth.directory import Principal, PrincipalDirectory
from zenith.auth.tokens import IssuedToken, TokenClaims, TokenCodec
from zenith.auth.authenticator import AuthSession, Authenticator

__all__ = [
    "Principal",
    "PrincipalDirectory",
    "IssuedToken",
    "TokenClaims",
    "TokenCodec",
    "AuthSession",
    "Authenticator",
]
