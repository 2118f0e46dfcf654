"""
Replay Guard
============
In-memory signature cache for replay protection.
"""

import threading
from typing import Dict, Optional, Protocol

import structlog

from .clock import ClockSource, SystemClock

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 10_000


class ReplayGuard(Protocol):
    """Store of recently accepted signatures."""

    def has_seen(self, signature: str) -> bool:
        ...

    def record(self, signature: str, expires_at_ms: int) -> None:
        ...

    def check_and_record(self, signature: str, expires_at_ms: int) -> bool:
        """Atomically record signature; False if it is already live."""
        ...

    def sweep(self) -> int:
        ...


class InMemoryReplayGuard:
    """
    Thread-safe in-memory replay guard.

    Maps signature -> expiry instant (epoch ms). Entries are dropped lazily
    on lookup once past their expiry instant, and in bulk by sweep(). Contents are lost on
    process restart.
    """

    def __init__(
        self,
        clock: Optional[ClockSource] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.clock = clock or SystemClock()
        self.max_entries = max_entries
        self._entries: Dict[str, int] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def has_seen(self, signature: str) -> bool:
        """Return True if signature was recorded and has not expired."""
        now = self.clock.now_ms()
        with self._lock:
            return self._is_live(signature, now)

    def record(self, signature: str, expires_at_ms: int) -> None:
        """Remember signature through expires_at_ms inclusive."""
        now = self.clock.now_ms()
        with self._lock:
            self._store(signature, expires_at_ms, now)

    def check_and_record(self, signature: str, expires_at_ms: int) -> bool:
        """
        Atomically record signature unless it is already live.

        Returns:
            True if the signature was fresh and is now recorded,
            False if it was already seen
        """
        now = self.clock.now_ms()
        with self._lock:
            if self._is_live(signature, now):
                logger.warning("replay_detected", signature=signature[:8])
                return False
            self._store(signature, expires_at_ms, now)
            return True

    def sweep(self) -> int:
        """Remove expired entries. Returns the number removed."""
        now = self.clock.now_ms()
        with self._lock:
            return self._purge_expired(now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _is_live(self, signature: str, now: int) -> bool:
        expires_at = self._entries.get(signature)
        if expires_at is None:
            return False
        if expires_at < now:
            del self._entries[signature]
            return False
        return True

    def _store(self, signature: str, expires_at_ms: int, now: int) -> None:
        self._entries[signature] = expires_at_ms
        if len(self._entries) > self.max_entries:
            self._purge_expired(now)
            self._evict_overflow()

    def _purge_expired(self, now: int) -> int:
        expired = [sig for sig, exp in self._entries.items() if exp < now]
        for sig in expired:
            del self._entries[sig]
        if expired:
            logger.debug("replay_guard_swept", removed=len(expired))
        return len(expired)

    def _evict_overflow(self) -> None:
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return
        # Earliest-expiring first
        victims = sorted(self._entries.items(), key=lambda kv: kv[1])[:overflow]
        for sig, _exp in victims:
            del self._entries[sig]
        logger.warning(
            "replay_guard_capacity_evicted",
            evicted=overflow,
            max_entries=self.max_entries,
        )
