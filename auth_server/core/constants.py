"""
Constants for the Auth Server

Module: core.constants
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial constants definition
  - Server identity and HTTP defaults
  - Token lifetimes
  - Login throttling thresholds
  - Credential policy defaults
  - Environment variable names

SECURITY NOTES:
- Development secrets are only used when nothing is configured
- Lockout defaults follow the "5 failures / 15 minutes" policy
- Access tokens are short-lived, refresh tokens are tracked server-side
"""

from typing import Final

# ============================================================================
# Server Configuration
# ============================================================================

SERVER_NAME: Final[str] = "AuthServer"
SERVER_VERSION: Final[str] = "0.1.0-alpha"

DEFAULT_HTTP_HOST: Final[str] = "0.0.0.0"
DEFAULT_HTTP_PORT: Final[int] = 3000
MAX_REQUEST_SIZE: Final[int] = 64 * 1024  # 64 KB

DEFAULT_USERS_FILE: Final[str] = "./data/users.json"

# ============================================================================
# Tokens
# ============================================================================

JWT_ALGORITHM: Final[str] = "HS256"
MIN_SECRET_LENGTH: Final[int] = 32

ACCESS_TOKEN_EXPIRE_MINUTES: Final[int] = 15
REFRESH_TOKEN_EXPIRE_DAYS: Final[int] = 7

TOKEN_TYPE_ACCESS: Final[str] = "access"
TOKEN_TYPE_REFRESH: Final[str] = "refresh"

# Development-only fallbacks (32+ chars to satisfy TokenIssuer)
DEV_JWT_SECRET: Final[str] = "dev-secret-change-me-32-characters-minimum!!"
DEV_JWT_REFRESH_SECRET: Final[str] = "dev-refresh-secret-change-me-32-chars-min!!"

# Registry sweep period in seconds (0 disables the background sweep)
DEFAULT_TOKEN_SWEEP_INTERVAL: Final[int] = 300

# ============================================================================
# Login Throttling
# ============================================================================

MAX_LOGIN_ATTEMPTS: Final[int] = 5
LOCKOUT_MINUTES: Final[int] = 15

# ============================================================================
# Credential Policy
# ============================================================================

MIN_PASSWORD_LENGTH: Final[int] = 6
ENFORCE_PASSWORD_LENGTH: Final[bool] = True

CREDENTIAL_SCHEME_PLAIN: Final[str] = "plain"
CREDENTIAL_SCHEME_BCRYPT: Final[str] = "bcrypt"
DEFAULT_CREDENTIAL_SCHEME: Final[str] = CREDENTIAL_SCHEME_BCRYPT
BCRYPT_ROUNDS: Final[int] = 10

# ============================================================================
# Logging
# ============================================================================

LOG_LEVEL_INFO: Final[str] = "INFO"
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ============================================================================
# Environment Variables
# ============================================================================

ENV_HOST: Final[str] = "AUTH_HOST"
ENV_PORT: Final[str] = "PORT"
ENV_JWT_SECRET: Final[str] = "JWT_SECRET"
ENV_JWT_REFRESH_SECRET: Final[str] = "JWT_REFRESH_SECRET"
ENV_USERS_FILE: Final[str] = "AUTH_USERS_FILE"
ENV_ACCESS_EXPIRE: Final[str] = "ACCESS_TOKEN_EXPIRE_MINUTES"
ENV_REFRESH_EXPIRE: Final[str] = "REFRESH_TOKEN_EXPIRE_DAYS"
ENV_MAX_ATTEMPTS: Final[str] = "MAX_LOGIN_ATTEMPTS"
ENV_LOCKOUT_MINUTES: Final[str] = "LOCKOUT_MINUTES"
ENV_ENFORCE_PASSWORD_LENGTH: Final[str] = "AUTH_ENFORCE_PASSWORD_LENGTH"
ENV_MIN_PASSWORD_LENGTH: Final[str] = "MIN_PASSWORD_LENGTH"
ENV_CREDENTIAL_SCHEME: Final[str] = "AUTH_CREDENTIAL_SCHEME"
ENV_TOKEN_SWEEP_INTERVAL: Final[str] = "TOKEN_SWEEP_INTERVAL"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
