# services/reservation-service/src/apps/core/services/lock_manager.py
"""
Resource Lock Manager

Keyed locks over resource keys (court:<id>, equipment:<type>, coach:<id>,
waitlist:<court id>). Keys are always acquired in sorted order under a single
deadline, so two units of work never wait on each other in a cycle.
"""

import time
import uuid
import logging
import threading
from contextlib import contextmanager
from typing import Iterable, List

from django.conf import settings
from django.db import DatabaseError, transaction

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_LEASE = 30


def court_key(court_id) -> str:
    return f"court:{court_id}"


def equipment_key(equipment_type: str) -> str:
    return f"equipment:{equipment_type}"


def coach_key(coach_id) -> str:
    return f"coach:{coach_id}"


def waitlist_key(court_id) -> str:
    return f"waitlist:{court_id}"


def resource_keys(
    court_id: uuid.UUID,
    rackets: int = 0,
    shoes: int = 0,
    coach_id: uuid.UUID = None
) -> List[str]:
    """Keys contended by a resource selection."""
    from apps.core.models import Equipment

    keys = [court_key(court_id)]
    if rackets:
        keys.append(equipment_key(Equipment.EquipmentType.RACKET))
    if shoes:
        keys.append(equipment_key(Equipment.EquipmentType.SHOE))
    if coach_id:
        keys.append(coach_key(coach_id))
    return keys


def _ordered(keys: Iterable[str]) -> List[str]:
    return sorted(set(keys))


class LocalLockManager:
    """
    In-process lock manager backed by one threading.Lock per key.

    Locks are shared by every instance in the process. They are not
    re-entrant.
    """

    _locks = {}
    _registry_lock = threading.Lock()

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def acquire(self, keys: Iterable[str]):
        """Hold every key for the duration of the block."""
        from . import LockTimeoutError

        ordered = _ordered(keys)
        deadline = time.monotonic() + self.timeout
        held = []

        try:
            for key in ordered:
                remaining = max(0.0, deadline - time.monotonic())
                lock = self._lock_for(key)
                if not lock.acquire(timeout=remaining):
                    logger.warning(f"Timed out acquiring lock {key} after {self.timeout}s")
                    raise LockTimeoutError(f"Could not lock {key}")
                held.append(lock)

            yield ordered
        finally:
            for lock in reversed(held):
                lock.release()


class CacheLockManager:
    """
    Distributed lock manager on top of django-redis cache locks.

    Each key is a Redis lock with a lease, so a crashed worker cannot hold
    a resource forever.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        lease: int = DEFAULT_LEASE,
        cache_alias: str = 'default'
    ):
        self.timeout = timeout
        self.lease = lease
        self.cache_alias = cache_alias

    def _cache(self):
        from django.core.cache import caches
        return caches[self.cache_alias]

    @contextmanager
    def acquire(self, keys: Iterable[str]):
        """Hold every key for the duration of the block."""
        from redis.exceptions import RedisError
        from . import LockTimeoutError, TransientInfrastructureError

        ordered = _ordered(keys)
        deadline = time.monotonic() + self.timeout
        held = []
        cache = self._cache()

        try:
            for key in ordered:
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    lock = cache.lock(
                        f"reservation-lock:{key}",
                        timeout=self.lease,
                        blocking_timeout=remaining,
                    )
                    acquired = lock.acquire(blocking=True)
                except RedisError as e:
                    logger.error(f"Lock backend failure on {key}: {e}")
                    raise TransientInfrastructureError(f"Lock backend unavailable: {e}") from e

                if not acquired:
                    logger.warning(f"Timed out acquiring lock {key} after {self.timeout}s")
                    raise LockTimeoutError(f"Could not lock {key}")
                held.append((key, lock))

            yield ordered
        finally:
            for key, lock in reversed(held):
                try:
                    lock.release()
                except RedisError as e:
                    # Lease expired or connection lost; the lock frees itself
                    logger.warning(f"Failed to release lock {key}: {e}")


def get_lock_manager():
    """Lock manager configured by BOOKING_LOCK_BACKEND."""
    backend = getattr(settings, 'BOOKING_LOCK_BACKEND', 'redis')
    timeout = float(getattr(settings, 'BOOKING_LOCK_TIMEOUT', DEFAULT_TIMEOUT))

    if backend == 'local':
        return LocalLockManager(timeout=timeout)

    if backend == 'redis':
        lease = int(getattr(settings, 'BOOKING_LOCK_LEASE', DEFAULT_LEASE))
        return CacheLockManager(timeout=timeout, lease=lease)

    raise ValueError(f"Unknown lock backend: {backend}")


@contextmanager
def locked_transaction(lock_manager, keys: Iterable[str]):
    """
    Hold the resource locks around one database transaction.

    The transaction commits before the locks are released. Database errors
    surface as TransientInfrastructureError.
    """
    from . import TransientInfrastructureError

    keys = _ordered(keys)
    with lock_manager.acquire(keys):
        try:
            with transaction.atomic():
                yield
        except DatabaseError as e:
            logger.error(f"Database failure while holding {keys}: {e}")
            raise TransientInfrastructureError(f"Database unavailable: {e}") from e
