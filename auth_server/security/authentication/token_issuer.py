"""
Token Issuer - Signed, time-bounded bearer tokens

Module: security.authentication.token_issuer
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - Access token issuance (HS256, 15 minutes)
  - Refresh token issuance (HS256, separate secret, 7 days)
  - Verification with token type check
  - Custom error handling

ARCHITECTURE:
TokenIssuer provides:
  - Stateless access tokens: any instance holding the access secret can
    verify them from their own claims
  - Refresh tokens carrying a server-generated token id (jti) that the
    TokenRegistry tracks
  - Claims: sub (user id), email, jti, iat, exp, token_type

SECURITY NOTES:
- Secrets must be 32+ characters
- Access and refresh tokens use distinct secrets, so one can never be
  accepted as the other
- Every token carries a fresh jti, so two tokens never share a signature
- All times in UTC
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from ...core.constants import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    JWT_ALGORITHM,
    MIN_SECRET_LENGTH,
    REFRESH_TOKEN_EXPIRE_DAYS,
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_REFRESH,
)


class TokenError(Exception):
    """Base token error"""
    pass


class TokenInvalidError(TokenError):
    """Token is invalid (malformed, bad signature)"""
    pass


class TokenExpiredError(TokenError):
    """Token has expired"""
    pass


class TokenClaimError(TokenError):
    """Token claim validation failed"""
    pass


@dataclass
class IssuedToken:
    """A freshly minted token"""
    token: str
    token_id: str
    token_type: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        """Lifetime in seconds"""
        return int((self.expires_at - self.issued_at).total_seconds())


@dataclass
class TokenClaims:
    """Verified token claims"""
    sub: str              # User id
    email: str
    jti: str              # Token id
    token_type: str
    iat: datetime
    exp: datetime


REQUIRED_CLAIMS = ["sub", "email", "jti", "iat", "exp", "token_type"]


class TokenIssuer:
    """
    Mints and verifies JWTs bound to a user identity.

    Uses HS256. Access tokens are never stored; refresh tokens are
    tracked by the caller (see TokenRegistry).
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = JWT_ALGORITHM,
        access_token_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        refresh_token_expire_days: int = REFRESH_TOKEN_EXPIRE_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize token issuer

        Args:
            access_secret: Secret for access tokens (32+ characters)
            refresh_secret: Secret for refresh tokens (32+ characters)
            algorithm: JWT algorithm (default HS256)
            access_token_expire_minutes: Access token TTL in minutes
            refresh_token_expire_days: Refresh token TTL in days
            clock: Returns the current UTC datetime (issuance only)

        Raises:
            ValueError: If a secret is too short or both secrets are equal
        """
        for name, secret in (("access", access_secret), ("refresh", refresh_secret)):
            if not secret or len(secret) < MIN_SECRET_LENGTH:
                raise ValueError(
                    f"{name} secret must be at least {MIN_SECRET_LENGTH} characters"
                )
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")

        self.logger = logging.getLogger("security.token_issuer")
        self._secrets = {
            TOKEN_TYPE_ACCESS: access_secret,
            TOKEN_TYPE_REFRESH: refresh_secret,
        }
        self.algorithm = algorithm
        self.access_token_expire = timedelta(minutes=access_token_expire_minutes)
        self.refresh_token_expire = timedelta(days=refresh_token_expire_days)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.logger.info(
            f"TokenIssuer initialized (algo={algorithm}, "
            f"access_expires={access_token_expire_minutes}min, "
            f"refresh_expires={refresh_token_expire_days}d)"
        )

    def issue_access(self, user_id: str, email: str) -> IssuedToken:
        """
        Issue an access token

        Args:
            user_id: Internal user id
            email: User identity

        Returns:
            IssuedToken expiring access_token_expire after now
        """
        return self._issue(user_id, email, TOKEN_TYPE_ACCESS, self.access_token_expire)

    def issue_refresh(self, user_id: str, email: str) -> IssuedToken:
        """
        Issue a refresh token with a fresh token id

        Args:
            user_id: Internal user id
            email: User identity

        Returns:
            IssuedToken expiring refresh_token_expire after now
        """
        return self._issue(user_id, email, TOKEN_TYPE_REFRESH, self.refresh_token_expire)

    def verify_access(self, token: str) -> TokenClaims:
        """
        Verify an access token

        Raises:
            TokenInvalidError, TokenExpiredError, TokenClaimError
        """
        return self._verify(token, TOKEN_TYPE_ACCESS)

    def verify_refresh(self, token: str) -> TokenClaims:
        """
        Verify a refresh token

        Raises:
            TokenInvalidError, TokenExpiredError, TokenClaimError
        """
        return self._verify(token, TOKEN_TYPE_REFRESH)

    def decode_unverified(self, token: str) -> Dict[str, Any]:
        """
        Decode token WITHOUT verification (use with caution!)

        Raises:
            TokenInvalidError: If token malformed
        """
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError as e:
            raise TokenInvalidError(f"Cannot decode token: {e}")

    def _issue(
        self,
        user_id: str,
        email: str,
        token_type: str,
        lifetime: timedelta,
    ) -> IssuedToken:
        if not user_id or not email:
            raise ValueError("user_id and email required")

        # Whole seconds, so iat/exp in the token equal the returned times
        now = self._clock().replace(microsecond=0)
        expires_at = now + lifetime
        jti = str(uuid.uuid4())

        claims = {
            "sub": user_id,
            "email": email,
            "jti": jti,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "token_type": token_type,
        }
        token = jwt.encode(claims, self._secrets[token_type], algorithm=self.algorithm)

        self.logger.debug(f"{token_type} token issued for {user_id[:8]}...")
        return IssuedToken(
            token=token,
            token_id=jti,
            token_type=token_type,
            issued_at=now,
            expires_at=expires_at,
        )

    def _verify(self, token: str, token_type: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise TokenInvalidError("Token must be non-empty string")

        try:
            payload = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError(f"Token expired: {e}")
        except jwt.InvalidSignatureError as e:
            raise TokenInvalidError(f"Invalid signature: {e}")
        except jwt.DecodeError as e:
            raise TokenInvalidError(f"Decode error: {e}")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {e}")

        for claim in REQUIRED_CLAIMS:
            if claim not in payload:
                raise TokenClaimError(f"Missing claim: {claim}")

        if payload["token_type"] != token_type:
            raise TokenClaimError(f"Not a {token_type} token")

        try:
            iat = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            exp = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (ValueError, TypeError, OverflowError) as e:
            raise TokenClaimError(f"Invalid timestamp: {e}")

        return TokenClaims(
            sub=payload["sub"],
            email=payload["email"],
            jti=payload["jti"],
            token_type=payload["token_type"],
            iat=iat,
            exp=exp,
        )
