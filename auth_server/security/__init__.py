"""
Security module - login throttling and authentication

Provides:
- AttemptTracker: Per-identity failed login counter with lockout window
- authentication: TokenIssuer and CredentialVerifier
"""

from .attempt_tracker import AttemptTracker, AttemptState, AttemptStatus

__all__ = [
    "AttemptTracker",
    "AttemptState",
    "AttemptStatus",
]
