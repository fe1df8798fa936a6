# services/reservation-service/src/tests/unit/test_lock_manager.py
"""
Unit Tests for the Resource Lock Manager
"""

import threading
import uuid
from unittest.mock import MagicMock

import pytest
from django.test import override_settings
from redis.exceptions import ConnectionError as RedisConnectionError

from apps.core.services import (
    CacheLockManager,
    LocalLockManager,
    LockTimeoutError,
    TransientInfrastructureError,
    get_lock_manager,
    resource_keys,
)


class TestResourceKeys:

    def test_court_only(self):
        court_id = uuid.uuid4()
        assert resource_keys(court_id) == [f"court:{court_id}"]

    def test_full_selection(self):
        court_id, coach_id = uuid.uuid4(), uuid.uuid4()

        keys = resource_keys(court_id, rackets=2, shoes=1, coach_id=coach_id)

        assert keys == [
            f"court:{court_id}",
            'equipment:racket',
            'equipment:shoe',
            f"coach:{coach_id}",
        ]


class TestLocalLockManager:

    def test_acquires_in_sorted_order(self):
        manager = LocalLockManager(timeout=0.1)

        with manager.acquire(['court:b', 'coach:a', 'court:b']) as held:
            assert held == ['coach:a', 'court:b']

    def test_released_after_block(self):
        manager = LocalLockManager(timeout=0.1)
        key = f"court:{uuid.uuid4()}"

        with manager.acquire([key]):
            pass

        with manager.acquire([key]):
            pass

    def test_timeout_when_held(self):
        manager = LocalLockManager(timeout=0.05)
        key = f"court:{uuid.uuid4()}"

        with manager.acquire([key]):
            with pytest.raises(LockTimeoutError):
                with manager.acquire([key]):
                    pass

    def test_timeout_releases_partial_acquisition(self):
        manager = LocalLockManager(timeout=0.05)
        free_key = f"a-court:{uuid.uuid4()}"
        busy_key = f"z-court:{uuid.uuid4()}"
        holding = threading.Event()
        done = threading.Event()

        def holder():
            with manager.acquire([busy_key]):
                holding.set()
                done.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        holding.wait(2)

        try:
            with pytest.raises(LockTimeoutError):
                with manager.acquire([free_key, busy_key]):
                    pass

            # The free key was released when acquisition failed
            with manager.acquire([free_key]):
                pass
        finally:
            done.set()
            thread.join()

    def test_locks_shared_across_instances(self):
        key = f"court:{uuid.uuid4()}"

        with LocalLockManager(timeout=0.05).acquire([key]):
            with pytest.raises(LockTimeoutError):
                with LocalLockManager(timeout=0.05).acquire([key]):
                    pass

    def test_timeout_is_transient(self):
        assert issubclass(LockTimeoutError, TransientInfrastructureError)


class TestCacheLockManager:

    def make_manager(self, cache):
        manager = CacheLockManager(timeout=0.5, lease=10)
        manager._cache = lambda: cache
        return manager

    def test_acquire_and_release(self):
        lock = MagicMock()
        lock.acquire.return_value = True
        cache = MagicMock()
        cache.lock.return_value = lock

        with self.make_manager(cache).acquire(['court:1']):
            lock.release.assert_not_called()

        cache.lock.assert_called_once()
        assert cache.lock.call_args[0][0] == 'reservation-lock:court:1'
        assert cache.lock.call_args[1]['timeout'] == 10
        lock.release.assert_called_once()

    def test_not_acquired_raises_timeout(self):
        first, second = MagicMock(), MagicMock()
        first.acquire.return_value = True
        second.acquire.return_value = False
        cache = MagicMock()
        cache.lock.side_effect = [first, second]

        with pytest.raises(LockTimeoutError):
            with self.make_manager(cache).acquire(['a', 'b']):
                pass

        first.release.assert_called_once()
        second.release.assert_not_called()

    def test_backend_error_is_transient(self):
        cache = MagicMock()
        cache.lock.side_effect = RedisConnectionError('down')

        with pytest.raises(TransientInfrastructureError):
            with self.make_manager(cache).acquire(['a']):
                pass


class TestGetLockManager:

    @override_settings(BOOKING_LOCK_BACKEND='local', BOOKING_LOCK_TIMEOUT=3)
    def test_local(self):
        manager = get_lock_manager()
        assert isinstance(manager, LocalLockManager)
        assert manager.timeout == 3.0

    @override_settings(BOOKING_LOCK_BACKEND='redis', BOOKING_LOCK_LEASE=15)
    def test_redis(self):
        manager = get_lock_manager()
        assert isinstance(manager, CacheLockManager)
        assert manager.lease == 15

    @override_settings(BOOKING_LOCK_BACKEND='zookeeper')
    def test_unknown(self):
        with pytest.raises(ValueError):
            get_lock_manager()
