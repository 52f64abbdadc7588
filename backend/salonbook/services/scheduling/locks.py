# backend/salonbook/services/scheduling/locks.py
"""
Per-staff mutual exclusion around "check conflicts, then insert".

LocalStaffLocks serializes bookings inside one process.
RedisStaffLocks uses a Redis lock per staff member so several API
processes share the same boundary.
"""

import logging
import threading
from contextlib import contextmanager
from typing import ContextManager, Iterator, Optional, Protocol

from redis import Redis
from redis.exceptions import LockError, RedisError

from .errors import SchedulingConflict

logger = logging.getLogger(__name__)

BUSY_MESSAGE = (
    "Another booking for this staff member is in progress. Please try again."
)


class StaffLocks(Protocol):
    def hold(self, staff_id: int) -> ContextManager[None]: ...


class LocalStaffLocks:
    """One threading.Lock per staff id, created on first use."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._locks: dict[int, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, staff_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(staff_id)
            if lock is None:
                lock = self._locks[staff_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, staff_id: int) -> Iterator[None]:
        lock = self._lock_for(staff_id)
        if not lock.acquire(timeout=self.timeout):
            logger.warning(f"Staff lock timeout: staff_id={staff_id}")
            raise SchedulingConflict(BUSY_MESSAGE, {"staff_id": staff_id})
        try:
            yield
        finally:
            lock.release()


class RedisStaffLocks:
    """Redis-backed staff locks, key lock:staff:{staff_id}."""

    KEY_PREFIX = "lock:staff"

    def __init__(self, redis: Redis, timeout: float = 10.0, lease: Optional[float] = None):
        self.redis = redis
        self.timeout = timeout
        # Lease bounds how long a crashed holder can block the staff member
        self.lease = lease or max(timeout * 3, 30.0)

    def _key(self, staff_id: int) -> str:
        return f"{self.KEY_PREFIX}:{staff_id}"

    @contextmanager
    def hold(self, staff_id: int) -> Iterator[None]:
        lock = self.redis.lock(
            self._key(staff_id),
            timeout=self.lease,
            blocking_timeout=self.timeout,
        )
        if not lock.acquire():
            logger.warning(f"Redis staff lock timeout: staff_id={staff_id}")
            raise SchedulingConflict(BUSY_MESSAGE, {"staff_id": staff_id})
        try:
            yield
        finally:
            try:
                lock.release()
            except (LockError, RedisError):
                # Lease expired before release; the insert is already committed
                logger.exception(f"Failed to release staff lock: staff_id={staff_id}")
