"""
Auth Errors - Error taxonomy for the auth service

Module: core.errors
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - AuthError base class with HTTP status
  - Input, conflict, credential, lockout and token errors
  - JSON body rendering (to_dict)

SECURITY NOTES:
- InvalidCredentials is raised for unknown identity AND wrong password
  (same message) to avoid identity enumeration
- TooManyAttempts never reveals whether the identity exists
"""

import math
from typing import Any, Dict, Optional


class AuthError(Exception):
    """Base auth error"""

    status: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render as a JSON response body"""
        return {"error": self.message}


class InvalidInput(AuthError):
    """Missing or malformed request fields"""
    status = 400
    default_message = "Email and password required"


class Conflict(AuthError):
    """Identity already registered"""
    status = 409
    default_message = "User exists"


class InvalidCredentials(AuthError):
    """Unknown identity or wrong secret"""
    status = 401
    default_message = "Invalid credentials"

    def __init__(self, remaining: int, message: Optional[str] = None):
        super().__init__(message)
        self.remaining = remaining

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["remaining"] = self.remaining
        return body


class TooManyAttempts(AuthError):
    """Lockout active for the identity"""
    status = 429
    default_message = "Too many attempts"

    def __init__(self, retry_after: float = 0.0, message: Optional[str] = None):
        super().__init__(message)
        self.retry_after = max(0.0, retry_after)

    @property
    def minutes_left(self) -> int:
        return math.ceil(self.retry_after / 60)

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["minutesLeft"] = self.minutes_left
        return body


class InvalidToken(AuthError):
    """Token malformed, badly signed, expired or of the wrong type"""
    status = 401
    default_message = "Invalid or expired refresh token"


class TokenNotFound(AuthError):
    """Refresh token has no live registry entry"""
    status = 401
    default_message = "Refresh token not found"
