# auth/rate_limiting.py
"""
Failed-login rate limiting.

Counts failed login attempts per key inside a fixed window. Keys are built
from the resolved principal (``member_<id>`` / ``admin_<id>``) or from the
raw handle (``unknown_<handle>``) when no account matches, so nonexistent
accounts are throttled the same way as real ones.

State lives in process memory only: a restart resets all throttling, and
replicas of the service do not share counters.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..db.models import PrincipalKind

logger = logging.getLogger("legacy.auth.ratelimit")

KEY_PREFIXES: Dict[PrincipalKind, str] = {
    PrincipalKind.ADMIN: "admin_",
    PrincipalKind.FAMILY_MEMBER: "member_",
}


def principal_key(principal_id: int, kind: PrincipalKind) -> str:
    return f"{KEY_PREFIXES[kind]}{principal_id}"


def unknown_key(handle: str) -> str:
    return f"unknown_{handle}"


@dataclass
class RateLimitEntry:
    attempts: int
    window_start: float
    blocked: bool = False


class LoginRateLimiter:
    """In-memory failed-attempt tracker with a periodic cleanup task."""

    def __init__(
        self,
        max_attempts: int = 15,
        window_seconds: int = 15 * 60,
        sweep_interval: float = 5 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self.clock = clock
        self.entries: Dict[str, RateLimitEntry] = {}
        self.lock = asyncio.Lock()
        self.cleanup_task: Optional[asyncio.Task] = None

    def _expired(self, entry: RateLimitEntry, now: float) -> bool:
        return now - entry.window_start > self.window_seconds

    async def is_rate_limited(self, key: str) -> bool:
        """Return True when ``key`` is blocked inside its current window."""
        async with self.lock:
            entry = self.entries.get(key)
            if entry is None:
                return False

            if self._expired(entry, self.clock()):
                del self.entries[key]
                return False

            return entry.blocked

    async def record_failed_attempt(self, key: str) -> RateLimitEntry:
        """Count one failed attempt for ``key``."""
        async with self.lock:
            now = self.clock()
            entry = self.entries.get(key)

            if entry is None or self._expired(entry, now):
                entry = RateLimitEntry(attempts=1, window_start=now)
                self.entries[key] = entry
            else:
                entry.attempts += 1

            if entry.attempts >= self.max_attempts and not entry.blocked:
                entry.blocked = True
                logger.warning(
                    "Login key rate limited: %s (%d attempts)", key, entry.attempts,
                    extra={"rate_limit_key": key, "attempts": entry.attempts},
                )
            return entry

    async def remaining_attempts(self, key: str) -> int:
        async with self.lock:
            entry = self.entries.get(key)
            if entry is None or self._expired(entry, self.clock()):
                return self.max_attempts
            return max(0, self.max_attempts - entry.attempts)

    async def clear(self, key: str) -> None:
        """Forget ``key`` (successful login or password change)."""
        async with self.lock:
            if self.entries.pop(key, None) is not None:
                logger.info("Rate limit cleared for %s", key)

    async def clear_principal(self, principal_id: int, kind: PrincipalKind) -> None:
        await self.clear(principal_key(principal_id, kind))

    async def sweep(self) -> int:
        """Drop every entry whose window has passed, blocked or not."""
        async with self.lock:
            now = self.clock()
            expired = [key for key, entry in self.entries.items() if self._expired(entry, now)]
            for key in expired:
                del self.entries[key]

        if expired:
            logger.info("Cleaned up %d expired rate limit entries", len(expired))
        return len(expired)

    def stats(self) -> Dict[str, int]:
        return {
            "totalTrackedUsers": len(self.entries),
            "blockedUsers": sum(1 for entry in self.entries.values() if entry.blocked),
            "activeAttempts": sum(entry.attempts for entry in self.entries.values()),
        }

    def start(self) -> None:
        """Start the periodic sweep. Must be called from a running event loop."""
        if self.cleanup_task is None or self.cleanup_task.done():
            self.cleanup_task = asyncio.create_task(self._cleanup_expired())

    async def stop(self) -> None:
        if self.cleanup_task is not None:
            self.cleanup_task.cancel()
            try:
                await self.cleanup_task
            except asyncio.CancelledError:
                pass
            self.cleanup_task = None

    async def _cleanup_expired(self):
        """Periodic cleanup of expired rate limit data."""
        while True:
            try:
                await asyncio.sleep(self.sweep_interval)
                await self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception("Rate limit cleanup error: %s", e)


__all__ = [
    "LoginRateLimiter", "RateLimitEntry", "principal_key", "unknown_key",
]
