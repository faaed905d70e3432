# backend/agenda/services/locks.py
"""
Per-provider booking locks.

Booking and rescheduling for one provider run one at a time; different
providers never wait for each other.

Backends:
- local: one threading.Lock per provider (single worker process)
- redis: redis-py Lock keyed by provider (several workers / hosts)
"""

import logging
import threading
from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from redis import Redis
from redis.exceptions import LockError

from ..config import settings
from ..errors import TransactionTimeout

logger = logging.getLogger(__name__)


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class LocalProviderLocks:
    """
    Keyed in-process locks.

    An entry exists only while someone holds or waits for it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, _LockEntry] = {}

    def _checkout(self, provider_id: int) -> _LockEntry:
        with self._guard:
            entry = self._locks.get(provider_id)
            if entry is None:
                entry = self._locks[provider_id] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, provider_id: int, entry: _LockEntry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[provider_id]

    @contextmanager
    def hold(self, provider_id: int, timeout: float) -> Iterator[None]:
        entry = self._checkout(provider_id)
        try:
            if not entry.lock.acquire(timeout=timeout):
                logger.warning(f"Booking lock for provider {provider_id} not acquired in {timeout}s")
                raise TransactionTimeout()
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(provider_id, entry)


class RedisProviderLocks:
    """Redis locks shared by every worker that talks to the same Redis."""

    KEY_PREFIX = "lock:booking:provider"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, provider_id: int) -> str:
        return f"{self.KEY_PREFIX}:{provider_id}"

    @contextmanager
    def hold(self, provider_id: int, timeout: float) -> Iterator[None]:
        # Lock TTL outlives the wait so a crashed holder cannot block forever
        lock = self.redis.lock(
            self._key(provider_id),
            timeout=timeout * 2,
            blocking_timeout=timeout,
        )
        if not lock.acquire():
            logger.warning(f"Redis booking lock for provider {provider_id} not acquired in {timeout}s")
            raise TransactionTimeout()
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError:
                logger.error(f"Redis booking lock for provider {provider_id} expired while held")


@lru_cache
def get_provider_locks() -> LocalProviderLocks | RedisProviderLocks:
    """Lock backend selected by settings.booking_lock_backend (singleton)."""
    if settings.booking_lock_backend == "redis":
        from ..redis_client import redis_client
        return RedisProviderLocks(redis_client)
    return LocalProviderLocks()
