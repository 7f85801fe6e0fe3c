"""
Token Registry - Refresh token tracking and revocation

Module: persistence.token_store
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - In-memory registry keyed by token id (JWT jti)
  - Token hashing for comparison
  - Expire-on-access lookups
  - Revocation and explicit sweep of expired entries

ARCHITECTURE:
TokenRegistry provides:
  - register(): track a freshly issued refresh token
  - lookup(): live entry for a token id (expired entries are deleted)
  - matches(): constant-time check that a presented token is the one stored
  - revoke(): delete an entry
  - cleanup_expired(): sweep, for callers that want one

SECURITY NOTES:
- Only the SHA256 digest of a token is kept, never the token itself
- Deleting an entry invalidates the token even if its signature is valid
"""

import hashlib
import hmac
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional


class TokenStoreError(Exception):
    """Base token store error"""
    pass


class TokenNotFoundError(TokenStoreError):
    """Token not found in registry"""
    pass


@dataclass
class TokenRecord:
    """Registry entry for one refresh token"""
    token_id: str
    token_hash: str
    user_id: str
    email: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class TokenRegistry:
    """
    Tracks issued refresh tokens.

    Expiry is evaluated lazily: lookup() deletes an entry it finds expired.
    Entries nobody looks up stay until cleanup_expired() or a restart.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize token registry

        Args:
            clock: Returns the current UTC datetime (injectable for tests)
        """
        self.logger = logging.getLogger("persistence.token_registry")
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._tokens: Dict[str, TokenRecord] = {}

    def register(
        self,
        token_id: str,
        token: str,
        user_id: str,
        email: str,
        expires_at: datetime,
    ) -> TokenRecord:
        """
        Store a new refresh token entry

        Args:
            token_id: Token identifier (jti)
            token: Raw token string (only its digest is kept)
            user_id: Owning user id
            email: Owning identity
            expires_at: Refresh token expiration time

        Returns:
            TokenRecord with stored data
        """
        record = TokenRecord(
            token_id=token_id,
            token_hash=self._hash_token(token),
            user_id=user_id,
            email=email,
            created_at=self._clock(),
            expires_at=expires_at,
        )
        with self._lock:
            self._tokens[token_id] = record

        self.logger.debug(f"Refresh token registered: {token_id[:8]}...")
        return record

    def lookup(self, token_id: str) -> Optional[TokenRecord]:
        """
        Get the live entry for a token id

        An expired entry is deleted and reported as missing.

        Returns:
            TokenRecord if live, None otherwise
        """
        with self._lock:
            record = self._tokens.get(token_id)
            if record is None:
                return None
            if record.is_expired(self._clock()):
                del self._tokens[token_id]
                self.logger.info(f"Expired refresh token dropped: {token_id[:8]}...")
                return None
            return record

    def matches(self, token_id: str, token: str) -> bool:
        """
        Check that a live entry exists and holds exactly this token

        Returns:
            True if the presented token is the registered one
        """
        record = self.lookup(token_id)
        if record is None:
            return False
        return hmac.compare_digest(record.token_hash, self._hash_token(token))

    def revoke(self, token_id: str) -> None:
        """
        Delete an entry

        Raises:
            TokenNotFoundError: token id not registered
        """
        with self._lock:
            if self._tokens.pop(token_id, None) is None:
                raise TokenNotFoundError(f"Token {token_id} not found in registry")
        self.logger.info(f"Refresh token revoked: {token_id[:8]}...")

    def cleanup_expired(self) -> int:
        """
        Remove expired entries

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            doomed = [tid for tid, r in self._tokens.items() if r.is_expired(now)]
            for token_id in doomed:
                del self._tokens[token_id]

        if doomed:
            self.logger.info(f"Cleanup removed {len(doomed)} expired refresh tokens")
        return len(doomed)

    def count(self) -> int:
        with self._lock:
            return len(self._tokens)

    @staticmethod
    def _hash_token(token: str) -> str:
        """
        Hash a token using SHA256

        Args:
            token: Token string

        Returns:
            SHA256 hash (hex)
        """
        return hashlib.sha256(token.encode()).hexdigest()
