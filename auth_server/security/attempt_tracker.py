"""
Attempt Tracker - Per-identity login failure throttling

Module: security.attempt_tracker
Date: 2026-10-18
Version: 0.1.0-alpha

CHANGELOG:
[2026-10-18 v0.1.0-alpha] Initial implementation
  - Failure counter per identity
  - Sliding lockout window keyed on the last failure
  - Expire-on-access reset in check()
  - Thread-safe state updates

ARCHITECTURE:
AttemptTracker provides:
  - check(identity): may the identity attempt a login, and how many
    attempts remain
  - record(identity, success): reset on success, count on failure

State per identity:
  NoLockout --failure--> Counting(n) --n reaches max--> Locked
  Locked --window elapses--> NoLockout
  Counting/NoLockout --success--> NoLockout

SECURITY NOTES:
- Each failure pushes the unlock time forward (sliding window)
- check() discards state once the window has elapsed, even below the
  threshold, so stale failures never accumulate
- A lockout is rejected before any credential check
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..core.constants import LOCKOUT_MINUTES, MAX_LOGIN_ATTEMPTS


@dataclass
class AttemptState:
    """Failure count and time of the last failure (clock seconds)"""
    count: int
    last_failure: float


@dataclass
class AttemptStatus:
    """Result of AttemptTracker.check()"""
    allowed: bool
    remaining: int
    retry_after: float = 0.0  # seconds until unlock, 0 unless locked


class AttemptTracker:
    """
    Tracks failed login attempts and computes lockouts.

    Absence of state for an identity means zero failures.
    """

    def __init__(
        self,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout_seconds: float = LOCKOUT_MINUTES * 60,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize attempt tracker

        Args:
            max_attempts: Failures at which further logins are rejected
            lockout_seconds: Window measured from the most recent failure
            clock: Returns current time in seconds (injectable for tests)

        Raises:
            ValueError: If max_attempts < 1 or lockout_seconds < 0
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if lockout_seconds < 0:
            raise ValueError("lockout_seconds must be non-negative")

        self.logger = logging.getLogger("security.attempt_tracker")
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._attempts: Dict[str, AttemptState] = {}

        self.logger.info(
            f"AttemptTracker initialized (max_attempts={max_attempts}, "
            f"lockout={lockout_seconds}s)"
        )

    def check(self, identity: str) -> AttemptStatus:
        """
        Check whether a login attempt is allowed

        Discards the identity's state when the lockout window has elapsed
        since its last failure (the boundary itself counts as elapsed).

        Args:
            identity: Identity (email) as received

        Returns:
            AttemptStatus with allowed flag and remaining attempts
        """
        with self._lock:
            state = self._attempts.get(identity)
            if state is None:
                return AttemptStatus(allowed=True, remaining=self.max_attempts)

            elapsed = self._clock() - state.last_failure
            if elapsed >= self.lockout_seconds:
                del self._attempts[identity]
                self.logger.debug(f"Attempt window expired for {identity}")
                return AttemptStatus(allowed=True, remaining=self.max_attempts)

            if state.count >= self.max_attempts:
                return AttemptStatus(
                    allowed=False,
                    remaining=0,
                    retry_after=self.lockout_seconds - elapsed,
                )

            return AttemptStatus(
                allowed=True,
                remaining=self.max_attempts - state.count,
            )

    def record(self, identity: str, success: bool) -> None:
        """
        Record the outcome of a login attempt

        Args:
            identity: Identity (email) as received
            success: True resets the identity, False counts a failure
        """
        with self._lock:
            if success:
                self._attempts.pop(identity, None)
                return

            state = self._attempts.get(identity)
            if state is None:
                state = AttemptState(count=0, last_failure=0.0)
                self._attempts[identity] = state
            state.count += 1
            state.last_failure = self._clock()
            count = state.count

        if count >= self.max_attempts:
            self.logger.warning(f"Identity locked out after {count} failures: {identity}")
        else:
            self.logger.info(f"Failed attempt {count}/{self.max_attempts} for {identity}")

    def cleanup_expired(self) -> int:
        """
        Drop every identity whose window has elapsed

        Returns:
            Number of identities removed
        """
        now = self._clock()
        with self._lock:
            expired = [
                identity for identity, state in self._attempts.items()
                if now - state.last_failure >= self.lockout_seconds
            ]
            for identity in expired:
                del self._attempts[identity]

        if expired:
            self.logger.debug(f"Cleaned up {len(expired)} expired attempt windows")
        return len(expired)

    def reset(self, identity: str) -> bool:
        """
        Clear an identity's failures (manual unlock)

        Returns:
            True if the identity had state
        """
        with self._lock:
            removed = self._attempts.pop(identity, None) is not None
        if removed:
            self.logger.info(f"Attempts reset for {identity}")
        return removed

    def get_state(self, identity: str) -> Optional[AttemptState]:
        """Copy of the raw state (no expiry side effect)"""
        with self._lock:
            state = self._attempts.get(identity)
            return AttemptState(state.count, state.last_failure) if state else None

    def active_identities(self) -> List[str]:
        with self._lock:
            return list(self._attempts.keys())
