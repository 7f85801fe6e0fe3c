"""
Auth Server

A small credential management service: registers users, authenticates
login attempts, throttles repeated failures per identity and issues
time-bounded bearer tokens (JWT).

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial project setup
  - Core service, persistence, security and transport layers
  - Login throttling (5 failures / 15 minute sliding window)
  - Access + refresh tokens with refresh token registry

ARCHITECTURE:
- Layer 1 : Transport (HTTP via aiohttp)
- Layer 2 : Service (AuthService orchestration, configuration, errors)
- Layer 3 : Security (AttemptTracker, TokenIssuer, CredentialVerifier)
- Layer 4 : Persistence (UserStore on users.json, TokenRegistry)

SECURITY NOTES:
- Deny by default: every login passes the attempt tracker first
- bcrypt credentials by default
- Unknown identity and wrong password are indistinguishable
"""

__version__ = "0.1.0-alpha"
__author__ = "Auth Server Development Team"

# Version info
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0
VERSION_SUFFIX = "alpha"

# Export main classes
from .core.auth_service import AuthService, LoginResult
from .core.config import AuthConfig
from .core.errors import (
    AuthError,
    InvalidInput,
    Conflict,
    InvalidCredentials,
    TooManyAttempts,
    InvalidToken,
    TokenNotFound,
)
from .transport.http_transport import HTTPTransport

__all__ = [
    "AuthService",
    "LoginResult",
    "AuthConfig",
    "AuthError",
    "InvalidInput",
    "Conflict",
    "InvalidCredentials",
    "TooManyAttempts",
    "InvalidToken",
    "TokenNotFound",
    "HTTPTransport",
]
