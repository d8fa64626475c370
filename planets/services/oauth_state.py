"""One-time OAuth state tokens.

A token is issued when a login starts and consumed by the provider callback.
Entries live only in memory: a lookup removes the entry whether or not the
rest of the validation passes, and a background sweeper drops entries that
were never used.
"""

import asyncio
import logging
import secrets
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable

from planets.errors import AppError

logger = logging.getLogger(__name__)

DEFAULT_STATE_TTL = timedelta(minutes=10)
DEFAULT_SWEEP_INTERVAL = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writing = False

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writing)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writing and self._readers == 0)
            self._writing = True
        try:
            yield
        finally:
            async with self._cond:
                self._writing = False
                self._cond.notify_all()


@dataclass(frozen=True)
class StateEntry:
    provider: str
    fingerprint: str
    created_at: datetime


@dataclass(frozen=True)
class RegistryStats:
    total: int
    expired: int


class OAuthStateRegistry:
    def __init__(
        self,
        ttl: timedelta = DEFAULT_STATE_TTL,
        strict_fingerprint: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.ttl = ttl
        self.strict_fingerprint = strict_fingerprint
        self._clock = clock
        self._entries: dict[str, StateEntry] = {}
        self._lock = ReadWriteLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, token: str) -> bool:
        return token in self._entries

    def _expired(self, entry: StateEntry, now: datetime) -> bool:
        return now - entry.created_at > self.ttl

    async def issue(self, provider: str, fingerprint: str) -> str:
        """Store a new 256-bit url-safe token bound to ``provider`` and ``fingerprint``."""
        try:
            token = secrets.token_urlsafe(32)
        except OSError as exc:
            raise AppError.wrap_internal("failed to generate state token", exc)
        async with self._lock.write():
            self._entries[token] = StateEntry(provider, fingerprint, self._clock())
        return token

    async def validate(self, token: str, provider: str, fingerprint: str) -> None:
        """Consume ``token``; raises unauthorized if it cannot be accepted.

        A user agent mismatch only fails in strict mode and is logged otherwise.
        """
        if not token:
            raise AppError.unauthorized("state token is required")

        async with self._lock.write():
            entry = self._entries.pop(token, None)

        if entry is None:
            raise AppError.unauthorized("invalid or expired state token")
        if self._expired(entry, self._clock()):
            raise AppError.unauthorized("state token has expired")
        if entry.provider != provider:
            logger.warning(
                "OAuth state issued for %s presented to %s callback", entry.provider, provider
            )
            raise AppError.unauthorized("state token provider mismatch")
        if entry.fingerprint != fingerprint:
            if self.strict_fingerprint:
                raise AppError.unauthorized("state token user agent mismatch")
            logger.warning("OAuth state user agent mismatch for provider %s", provider)

    async def sweep(self) -> int:
        now = self._clock()
        async with self._lock.write():
            stale = [t for t, entry in self._entries.items() if self._expired(entry, now)]
            for token in stale:
                del self._entries[token]
        if stale:
            logger.debug("Swept %d expired OAuth state(s)", len(stale))
        return len(stale)

    async def stats(self) -> RegistryStats:
        now = self._clock()
        async with self._lock.read():
            expired = sum(1 for entry in self._entries.values() if self._expired(entry, now))
            return RegistryStats(total=len(self._entries), expired=expired)

    async def run_sweeper(self, interval: timedelta = DEFAULT_SWEEP_INTERVAL) -> None:
        """Sweep forever every ``interval``; meant to run as a background task."""
        seconds = interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            await self.sweep()
