"""
User Store - User records keyed by identity

Module: persistence.user_store
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - UserRecord with public projection
  - In-memory registry keyed by email (authoritative)
  - Wholesale load at startup, wholesale rewrite after each mutation
  - users.json format: array of [email, record] pairs

ARCHITECTURE:
UserStore provides:
  - create(): unique identity check + insert + persist
  - find(): lookup by identity (case as received)
  - update(): replace a record + persist
  - load()/save(): collaborator contract over users.json

SECURITY NOTES:
- The stored secret is whatever the CredentialVerifier prepared
- The secret is never part of the public projection
- Save failures are logged, never raised; memory stays authoritative
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from .json_store import JSONStore, JSONStoreError


class UserStoreError(Exception):
    """Base user store error"""
    pass


class UserExistsError(UserStoreError):
    """Identity already registered"""
    pass


class UserNotFoundError(UserStoreError):
    """Identity not registered"""
    pass


def _parse_time(value: str) -> datetime:
    if not isinstance(value, str):
        raise TypeError(f"lastLogin must be an ISO string, got {type(value).__name__}")
    # fromisoformat() only accepts the "Z" suffix from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class UserRecord:
    """Represents a stored user record"""

    def __init__(
        self,
        user_id: str,
        email: str,
        password: str,
        name: str = "",
        last_login: Optional[datetime] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.password = password
        self.name = name or ""
        self.last_login = last_login

    def public(self) -> Dict[str, Any]:
        """Public projection (never includes the secret)"""
        return {"id": self.user_id, "email": self.email, "name": self.name}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON storage"""
        return {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "password": self.password,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        """
        Create from dictionary (from JSON)

        Raises:
            KeyError: Required field missing
            TypeError: Field of the wrong type
            ValueError: Unparsable lastLogin
        """
        for key in ("id", "email", "password"):
            if not isinstance(data[key], str):
                raise TypeError(f"{key} must be a string")
        name = data.get("name")
        if name is not None and not isinstance(name, str):
            raise TypeError("name must be a string")
        last_login = data.get("lastLogin")
        return cls(
            user_id=data["id"],
            email=data["email"],
            password=data["password"],
            name=name or "",
            last_login=_parse_time(last_login) if last_login not in (None, "") else None,
        )

    def copy(self) -> "UserRecord":
        return UserRecord(
            user_id=self.user_id,
            email=self.email,
            password=self.password,
            name=self.name,
            last_login=self.last_login,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserRecord):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"UserRecord(id={self.user_id[:8]}..., email={self.email!r})"


class UserStore:
    """
    Manages user records.

    Records live in memory (insertion order preserved) and are rewritten
    to users.json after every mutation. Callers get copies, so a record
    can only change through update().
    """

    def __init__(self, users_file: Optional[str] = None):
        """
        Initialize user store

        Args:
            users_file: Path to users.json (None keeps the store in memory only)
        """
        self.logger = logging.getLogger("persistence.user_store")
        self.store = JSONStore(users_file, default_data=[]) if users_file else None
        self._lock = threading.RLock()
        self._users: Dict[str, UserRecord] = self.load()
        self.logger.info(
            f"UserStore initialized ({len(self._users)} users, "
            f"file={self.store.file_path if self.store else None})"
        )

    # ------------------------------------------------------------------
    # Collaborator contract (users.json)
    # ------------------------------------------------------------------

    def load(self) -> Dict[str, UserRecord]:
        """
        Load the user collection from disk

        Returns:
            Mapping email -> UserRecord (empty on missing or corrupt file)
        """
        if self.store is None:
            return {}

        pairs = self.store.load_or_default()
        if not isinstance(pairs, list):
            self.logger.warning(
                f"Unexpected format in {self.store.file_path}, starting fresh"
            )
            return {}

        users: Dict[str, UserRecord] = {}
        try:
            for email, record in pairs:
                user = UserRecord.from_dict(record)
                if email != user.email:
                    raise ValueError(f"key {email!r} does not match record email")
                users[email] = user
        except (TypeError, ValueError, KeyError) as e:
            self.logger.warning(
                f"Failed to load {self.store.file_path}, starting fresh: {e}"
            )
            return {}

        self.logger.info(f"Loaded {len(users)} users from {self.store.file_path}")
        return users

    def save(self, users: Optional[Dict[str, UserRecord]] = None) -> bool:
        """
        Persist the whole user collection (best-effort)

        Args:
            users: Mapping to save (defaults to the in-memory collection)

        Returns:
            True if written, False if the write failed or there is no file
        """
        if self.store is None:
            return False

        with self._lock:
            source = self._users if users is None else users
            pairs: List[list] = [
                [email, record.to_dict()] for email, record in source.items()
            ]
            try:
                self.store.save(pairs)
            except JSONStoreError as e:
                self.logger.error(f"Failed to save users: {e}")
                return False
        return True

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def create(self, email: str, password: str, name: str = "") -> UserRecord:
        """
        Create a new user record

        Args:
            email: Identity (must be unique)
            password: Credential material prepared by the verifier
            name: Display name

        Returns:
            Copy of the stored UserRecord

        Raises:
            UserExistsError: If email already exists
        """
        with self._lock:
            if email in self._users:
                raise UserExistsError(f"User '{email}' already exists")

            record = UserRecord(
                user_id=self._new_id(),
                email=email,
                password=password,
                name=name,
            )
            self._users[email] = record
            self.save()

        self.logger.info(f"User created: {email} ({record.user_id[:8]}...)")
        return record.copy()

    def find(self, email: str) -> Optional[UserRecord]:
        """
        Get user by identity

        Returns:
            Copy of the UserRecord if found, None otherwise
        """
        with self._lock:
            record = self._users.get(email)
            return record.copy() if record else None

    def exists(self, email: str) -> bool:
        with self._lock:
            return email in self._users

    def update(self, record: UserRecord) -> UserRecord:
        """
        Replace a stored record (identity and id are immutable)

        Raises:
            UserNotFoundError: If the identity is unknown or the id differs
        """
        with self._lock:
            current = self._users.get(record.email)
            if current is None or current.user_id != record.user_id:
                raise UserNotFoundError(f"User '{record.email}' not found")

            self._users[record.email] = record.copy()
            self.save()
        return record.copy()

    def snapshot(self) -> Dict[str, UserRecord]:
        """Copy of the whole collection (insertion order preserved)"""
        with self._lock:
            return {email: record.copy() for email, record in self._users.items()}

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    def _new_id(self) -> str:
        """Generate an id never used by any stored record"""
        used = {record.user_id for record in self._users.values()}
        while True:
            user_id = str(uuid.uuid4())
            if user_id not in used:
                return user_id
