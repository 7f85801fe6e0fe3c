"""
Persistence module - user collection and refresh token registry

Provides:
- JSONStore: JSON file handling with atomic writes
- UserStore: User records keyed by email, persisted to users.json
- TokenRegistry: Refresh token tracking and revocation
"""

from .json_store import JSONStore, JSONStoreError
from .user_store import (
    UserStore,
    UserRecord,
    UserStoreError,
    UserExistsError,
    UserNotFoundError,
)
from .token_store import TokenRegistry, TokenRecord, TokenStoreError, TokenNotFoundError

__all__ = [
    "JSONStore",
    "JSONStoreError",
    "UserStore",
    "UserRecord",
    "UserStoreError",
    "UserExistsError",
    "UserNotFoundError",
    "TokenRegistry",
    "TokenRecord",
    "TokenStoreError",
    "TokenNotFoundError",
]
