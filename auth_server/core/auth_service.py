"""
Auth Service - Register, login and refresh orchestration

Module: core.auth_service
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - Register with configurable password length policy
  - Login with per-identity throttling
  - Access + refresh token issuance, refresh token registry
  - Refresh and revoke of refresh tokens
  - Per-identity serialization of concurrent requests

ARCHITECTURE:
AuthService wires the components together:

  login:    AttemptTracker.check -> UserStore.find -> CredentialVerifier.verify
            -> AttemptTracker.record -> TokenIssuer.issue -> UserStore.update
  register: UserStore.find -> CredentialVerifier.prepare -> UserStore.create
  refresh:  TokenIssuer.verify_refresh -> TokenRegistry.matches
            -> TokenIssuer.issue_access

All per-identity work runs under that identity's asyncio.Lock, so two
concurrent failures for one identity are always counted separately.

SECURITY NOTES:
- Unknown identity and wrong password raise the same InvalidCredentials
- A locked identity is rejected before any lookup or credential check,
  and the rejected attempt is not counted
- remaining is always re-read from the tracker after a failure
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict

from .config import AuthConfig
from .constants import ENFORCE_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH
from .errors import (
    Conflict,
    InvalidCredentials,
    InvalidInput,
    InvalidToken,
    TokenNotFound,
    TooManyAttempts,
)
from ..persistence.token_store import TokenRegistry, TokenNotFoundError
from ..persistence.user_store import UserExistsError, UserStore
from ..security.attempt_tracker import AttemptTracker
from ..security.authentication.credential_verifier import (
    CredentialVerifier,
    create_verifier,
)
from ..security.authentication.token_issuer import (
    IssuedToken,
    TokenClaims,
    TokenError,
    TokenIssuer,
)


@dataclass
class LoginResult:
    """Tokens issued by a successful login"""
    access: IssuedToken
    refresh: IssuedToken
    user: Dict[str, Any]


class IdentityLocks:
    """One asyncio.Lock per identity, dropped once nobody holds or waits for it"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, identity: str) -> AsyncIterator[None]:
        lock = self._locks.get(identity)
        if lock is None:
            lock = self._locks[identity] = asyncio.Lock()
        self._users[identity] = self._users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[identity] -= 1
            if self._users[identity] == 0:
                del self._users[identity]
                del self._locks[identity]

    def __len__(self) -> int:
        return len(self._locks)


class AuthService:
    """
    Credential management service.

    Typical usage:
        service = AuthService.from_config(AuthConfig.from_env())
        user = await service.register("a@x.com", "secret1")
        result = await service.login("a@x.com", "secret1")
    """

    def __init__(
        self,
        user_store: UserStore,
        attempt_tracker: AttemptTracker,
        verifier: CredentialVerifier,
        token_issuer: TokenIssuer,
        token_registry: TokenRegistry,
        enforce_password_length: bool = ENFORCE_PASSWORD_LENGTH,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ):
        """
        Initialize auth service

        Args:
            user_store: User records
            attempt_tracker: Failed login throttling
            verifier: Secret preparation/comparison
            token_issuer: JWT issuance
            token_registry: Refresh token tracking
            enforce_password_length: Reject short passwords at registration
            min_password_length: Minimum length when enforced
        """
        self.logger = logging.getLogger("core.auth_service")
        self.user_store = user_store
        self.attempt_tracker = attempt_tracker
        self.verifier = verifier
        self.token_issuer = token_issuer
        self.token_registry = token_registry
        self.enforce_password_length = enforce_password_length
        self.min_password_length = min_password_length
        self._locks = IdentityLocks()

        self.logger.info(
            f"AuthService initialized (scheme={verifier.scheme}, "
            f"password_length_policy="
            f"{min_password_length if enforce_password_length else 'off'})"
        )

    @classmethod
    def from_config(cls, config: AuthConfig) -> "AuthService":
        """Build the service and its components from configuration"""
        return cls(
            user_store=UserStore(config.users_file),
            attempt_tracker=AttemptTracker(
                max_attempts=config.max_login_attempts,
                lockout_seconds=config.lockout_seconds,
            ),
            verifier=create_verifier(config.credential_scheme),
            token_issuer=TokenIssuer(
                access_secret=config.jwt_secret,
                refresh_secret=config.jwt_refresh_secret,
                access_token_expire_minutes=config.access_token_expire_minutes,
                refresh_token_expire_days=config.refresh_token_expire_days,
            ),
            token_registry=TokenRegistry(),
            enforce_password_length=config.enforce_password_length,
            min_password_length=config.min_password_length,
        )

    # ------------------------------------------------------------------
    # Register
    # ------------------------------------------------------------------

    async def register(
        self,
        email: Any,
        password: Any,
        name: Any = None,
    ) -> Dict[str, Any]:
        """
        Register a new user

        Args:
            email: Identity (stored as received)
            password: Plaintext secret
            name: Optional display name

        Returns:
            Public projection {id, email, name}

        Raises:
            InvalidInput: Missing/malformed fields or password too short
            Conflict: Identity already registered
        """
        self._require_credentials(email, password)
        if name is not None and not isinstance(name, str):
            raise InvalidInput("Name must be a string")
        if self.enforce_password_length and len(password) < self.min_password_length:
            raise InvalidInput(f"Password too short (>={self.min_password_length})")

        async with self._locks.hold(email):
            if self.user_store.exists(email):
                raise Conflict()

            try:
                stored = await asyncio.to_thread(self.verifier.prepare, password)
            except ValueError as e:
                raise InvalidInput(f"Password rejected: {e}")

            try:
                record = await asyncio.to_thread(
                    self.user_store.create, email, stored, name or ""
                )
            except UserExistsError:
                raise Conflict()

        self.logger.info(f"Registered {email} ({record.user_id[:8]}...)")
        return record.public()

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(self, email: Any, password: Any) -> LoginResult:
        """
        Authenticate and issue tokens

        Args:
            email: Identity
            password: Plaintext secret

        Returns:
            LoginResult with access and refresh tokens

        Raises:
            InvalidInput: Missing fields
            TooManyAttempts: Identity locked out (attempt not counted)
            InvalidCredentials: Unknown identity or wrong password
        """
        self._require_credentials(email, password)

        async with self._locks.hold(email):
            status = self.attempt_tracker.check(email)
            if not status.allowed:
                self.logger.warning(f"Login rejected, {email} is locked out")
                raise TooManyAttempts(status.retry_after)

            user = self.user_store.find(email)
            if user is None:
                raise self._failed_attempt(email)

            ok = await asyncio.to_thread(self.verifier.verify, password, user.password)
            if not ok:
                raise self._failed_attempt(email)

            self.attempt_tracker.record(email, True)

            access = self.token_issuer.issue_access(user.user_id, email)
            refresh = self.token_issuer.issue_refresh(user.user_id, email)
            self.token_registry.register(
                refresh.token_id,
                refresh.token,
                user.user_id,
                email,
                refresh.expires_at,
            )

            user.last_login = datetime.now(timezone.utc)
            await asyncio.to_thread(self.user_store.update, user)

        self.logger.info(f"Login successful for {email}")
        return LoginResult(access=access, refresh=refresh, user=user.public())

    def _failed_attempt(self, email: str) -> InvalidCredentials:
        """Count a failed attempt; the error carries the post-failure remaining count"""
        self.attempt_tracker.record(email, False)
        remaining = self.attempt_tracker.check(email).remaining
        self.logger.warning(f"Invalid credentials for {email} ({remaining} remaining)")
        return InvalidCredentials(remaining)

    # ------------------------------------------------------------------
    # Refresh tokens
    # ------------------------------------------------------------------

    async def refresh(self, refresh_token: Any) -> IssuedToken:
        """
        Exchange a refresh token for a new access token

        The refresh token itself is not rotated.

        Raises:
            InvalidInput: Token missing
            InvalidToken: Signature, expiry or type check failed
            TokenNotFound: No live registry entry holds this token
        """
        claims = self._verify_refresh(refresh_token)
        if not self.token_registry.matches(claims.jti, refresh_token):
            self.logger.warning(f"Refresh token not registered: {claims.jti[:8]}...")
            raise TokenNotFound()

        access = self.token_issuer.issue_access(claims.sub, claims.email)
        self.logger.info(f"Access token refreshed for {claims.email}")
        return access

    async def revoke(self, refresh_token: Any) -> None:
        """
        Invalidate a refresh token

        Raises:
            InvalidInput: Token missing
            InvalidToken: Signature, expiry or type check failed
            TokenNotFound: Token already revoked or unknown
        """
        claims = self._verify_refresh(refresh_token)
        if not self.token_registry.matches(claims.jti, refresh_token):
            raise TokenNotFound()
        try:
            self.token_registry.revoke(claims.jti)
        except TokenNotFoundError:
            raise TokenNotFound()
        self.logger.info(f"Refresh token revoked for {claims.email}")

    def verify_access(self, access_token: Any) -> TokenClaims:
        """
        Verify an access token (stateless)

        Raises:
            InvalidToken: Token invalid or expired
        """
        try:
            return self.token_issuer.verify_access(access_token)
        except TokenError as e:
            self.logger.debug(f"Access token rejected: {e}")
            raise InvalidToken("Invalid or expired access token")

    def sweep_expired(self) -> int:
        """
        Drop expired refresh tokens and elapsed attempt windows

        Returns:
            Total number of entries removed
        """
        tokens = self.token_registry.cleanup_expired()
        attempts = self.attempt_tracker.cleanup_expired()
        if tokens or attempts:
            self.logger.info(
                f"Sweep removed {tokens} refresh tokens, {attempts} attempt windows"
            )
        return tokens + attempts

    def _verify_refresh(self, refresh_token: Any) -> TokenClaims:
        if not refresh_token or not isinstance(refresh_token, str):
            raise InvalidInput("Refresh token required")
        try:
            return self.token_issuer.verify_refresh(refresh_token)
        except TokenError as e:
            self.logger.info(f"Refresh token rejected: {e}")
            raise InvalidToken()

    @staticmethod
    def _require_credentials(email: Any, password: Any) -> None:
        if not email or not password:
            raise InvalidInput()
        if not isinstance(email, str) or not isinstance(password, str):
            raise InvalidInput("Email and password must be strings")
