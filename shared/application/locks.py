"""
Keyed Locks

Process-local mutual exclusion keyed by an arbitrary hashable (listing id).
Used together with the database row lock taken by the repositories, so the
check-then-act admission sequence is serialized per listing on every
database backend, including SQLite where SELECT FOR UPDATE is a no-op.
"""

from contextlib import contextmanager
from threading import Lock
from typing import Dict, Hashable, Iterator
import logging

from shared.application.context import RequestContext
from shared.domain.exceptions import CancelledError

logger = logging.getLogger(__name__)


class KeyedLock:
    """
    One lock per key, created on demand and dropped when nobody holds it

    Waiting is bounded: by the caller's deadline if it has one, otherwise
    by ``default_timeout``.
    """

    def __init__(self, default_timeout: float = 10.0):
        self.default_timeout = default_timeout
        self._guard = Lock()
        self._locks: Dict[Hashable, Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    def _acquire_slot(self, key: Hashable) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = Lock()
            self._waiters[key] = self._waiters.get(key, 0) + 1
            return lock

    def _release_slot(self, key: Hashable):
        with self._guard:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    @contextmanager
    def hold(
        self,
        key: Hashable,
        ctx: RequestContext | None = None,
        timeout: float | None = None,
    ) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block

        Raises:
            CancelledError: If the lock could not be acquired in time
        """
        ctx = ctx or RequestContext.background()
        ctx.check(f"lock {key}")

        wait = ctx.remaining()
        if wait is None:
            wait = self.default_timeout if timeout is None else timeout

        lock = self._acquire_slot(key)
        try:
            if not lock.acquire(timeout=wait):
                logger.warning(f"Timed out after {wait:.2f}s waiting for lock {key}")
                raise CancelledError(f"lock {key}")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._release_slot(key)

    def __len__(self) -> int:
        """Number of keys currently held or awaited"""
        with self._guard:
            return len(self._locks)


# Global registry guarding per-listing admission and calendar edits
listing_locks = KeyedLock()
