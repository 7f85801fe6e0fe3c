"""
Auth Server Configuration

Module: core.config
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - AuthConfig dataclass with conservative defaults
  - Environment variable loading (AuthConfig.from_env)
  - Validation of numeric and policy values

ARCHITECTURE:
AuthConfig is consumed, not owned, by the core components:
  - TokenIssuer reads secrets and TTLs
  - AttemptTracker reads the threshold and lockout window
  - AuthService reads the password policy and credential scheme
  - HTTPTransport reads host/port
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    CREDENTIAL_SCHEME_BCRYPT,
    CREDENTIAL_SCHEME_PLAIN,
    DEFAULT_CREDENTIAL_SCHEME,
    DEFAULT_HTTP_HOST,
    DEFAULT_HTTP_PORT,
    DEFAULT_TOKEN_SWEEP_INTERVAL,
    DEFAULT_USERS_FILE,
    DEV_JWT_REFRESH_SECRET,
    DEV_JWT_SECRET,
    ENFORCE_PASSWORD_LENGTH,
    ENV_ACCESS_EXPIRE,
    ENV_CREDENTIAL_SCHEME,
    ENV_ENFORCE_PASSWORD_LENGTH,
    ENV_HOST,
    ENV_JWT_REFRESH_SECRET,
    ENV_JWT_SECRET,
    ENV_LOCKOUT_MINUTES,
    ENV_LOG_LEVEL,
    ENV_MAX_ATTEMPTS,
    ENV_MIN_PASSWORD_LENGTH,
    ENV_PORT,
    ENV_REFRESH_EXPIRE,
    ENV_TOKEN_SWEEP_INTERVAL,
    ENV_USERS_FILE,
    LOCKOUT_MINUTES,
    LOG_LEVEL_INFO,
    MAX_LOGIN_ATTEMPTS,
    MIN_PASSWORD_LENGTH,
    REFRESH_TOKEN_EXPIRE_DAYS,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class AuthConfig:
    """Auth Server Configuration"""
    host: str = DEFAULT_HTTP_HOST
    port: int = DEFAULT_HTTP_PORT
    jwt_secret: str = DEV_JWT_SECRET
    jwt_refresh_secret: str = DEV_JWT_REFRESH_SECRET
    users_file: str = DEFAULT_USERS_FILE
    access_token_expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES
    refresh_token_expire_days: int = REFRESH_TOKEN_EXPIRE_DAYS
    max_login_attempts: int = MAX_LOGIN_ATTEMPTS
    lockout_minutes: int = LOCKOUT_MINUTES
    enforce_password_length: bool = ENFORCE_PASSWORD_LENGTH
    min_password_length: int = MIN_PASSWORD_LENGTH
    credential_scheme: str = DEFAULT_CREDENTIAL_SCHEME
    token_sweep_interval: int = DEFAULT_TOKEN_SWEEP_INTERVAL
    log_level: str = LOG_LEVEL_INFO

    def __post_init__(self):
        """Validate values (raises ValueError)"""
        if self.credential_scheme not in (
            CREDENTIAL_SCHEME_PLAIN,
            CREDENTIAL_SCHEME_BCRYPT,
        ):
            raise ValueError(
                f"Unknown credential scheme: {self.credential_scheme}"
            )
        if self.max_login_attempts < 1:
            raise ValueError("max_login_attempts must be >= 1")
        if self.lockout_minutes < 0:
            raise ValueError("lockout_minutes must be >= 0")
        if self.access_token_expire_minutes < 1:
            raise ValueError("access_token_expire_minutes must be >= 1")
        if self.refresh_token_expire_days < 1:
            raise ValueError("refresh_token_expire_days must be >= 1")
        if self.min_password_length < 1:
            raise ValueError("min_password_length must be >= 1")
        if self.token_sweep_interval < 0:
            raise ValueError("token_sweep_interval must be >= 0")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")

    @property
    def lockout_seconds(self) -> int:
        return self.lockout_minutes * 60

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthConfig":
        """
        Build configuration from environment variables

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            AuthConfig with environment overrides applied

        Raises:
            ValueError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        return cls(
            host=env.get(ENV_HOST, defaults.host),
            port=_get_int(env, ENV_PORT, defaults.port),
            jwt_secret=env.get(ENV_JWT_SECRET, defaults.jwt_secret),
            jwt_refresh_secret=env.get(
                ENV_JWT_REFRESH_SECRET, defaults.jwt_refresh_secret
            ),
            users_file=env.get(ENV_USERS_FILE, defaults.users_file),
            access_token_expire_minutes=_get_int(
                env, ENV_ACCESS_EXPIRE, defaults.access_token_expire_minutes
            ),
            refresh_token_expire_days=_get_int(
                env, ENV_REFRESH_EXPIRE, defaults.refresh_token_expire_days
            ),
            max_login_attempts=_get_int(
                env, ENV_MAX_ATTEMPTS, defaults.max_login_attempts
            ),
            lockout_minutes=_get_int(
                env, ENV_LOCKOUT_MINUTES, defaults.lockout_minutes
            ),
            enforce_password_length=_get_bool(
                env, ENV_ENFORCE_PASSWORD_LENGTH, defaults.enforce_password_length
            ),
            min_password_length=_get_int(
                env, ENV_MIN_PASSWORD_LENGTH, defaults.min_password_length
            ),
            credential_scheme=env.get(
                ENV_CREDENTIAL_SCHEME, defaults.credential_scheme
            ).lower(),
            token_sweep_interval=_get_int(
                env, ENV_TOKEN_SWEEP_INTERVAL, defaults.token_sweep_interval
            ),
            log_level=env.get(ENV_LOG_LEVEL, defaults.log_level).upper(),
        )


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
