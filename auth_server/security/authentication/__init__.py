"""
Authentication module - tokens and credential verification

Provides:
- TokenIssuer: JWT issuance and verification (HS256)
- CredentialVerifier: bcrypt or plain secret comparison
"""

from .token_issuer import (
    TokenIssuer,
    TokenError,
    TokenInvalidError,
    TokenExpiredError,
    TokenClaimError,
    IssuedToken,
    TokenClaims,
)
from .credential_verifier import (
    CredentialVerifier,
    BcryptCredentialVerifier,
    PlainCredentialVerifier,
    create_verifier,
)

__all__ = [
    "TokenIssuer",
    "TokenError",
    "TokenInvalidError",
    "TokenExpiredError",
    "TokenClaimError",
    "IssuedToken",
    "TokenClaims",
    "CredentialVerifier",
    "BcryptCredentialVerifier",
    "PlainCredentialVerifier",
    "create_verifier",
]
