# =============================================================================
# core/services/lock_service.py - Critical Sections
# =============================================================================
# One exclusive lock guarding multi-step mutations: identifier generation
# followed by an append, and the academic-year rollover.
#
# Waiting is bounded. A caller that cannot get the lock in time receives the
# BUSY sentinel (with_lock) or LockBusyError (critical_section) and should
# ask the user to retry. The lock is released on every exit path, including
# exceptions raised by the guarded action.
#
# Critical sections do not nest: acquiring again from inside one waits for
# the timeout and then reports Busy.
# =============================================================================

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar

from app.config import settings
from app.exceptions import LockBusyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Busy:
    """Returned instead of a result when the lock was not acquired in time."""
    message: str = "Database busy. Try again later."


BUSY = Busy()


class LockManager:
    """
    Process-wide exclusive lock with bounded wait.

    Example:
        locks = LockManager()
        result = locks.with_lock(lambda: register_student(...))
        if isinstance(result, Busy):
            return Outcome.failure(result.message)
    """

    def __init__(self, timeout_ms: int | None = None):
        self.timeout_ms = settings.LOCK_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self._lock = threading.Lock()

    def with_lock(self, action: Callable[[], T], timeout_ms: int | None = None) -> T | Busy:
        """
        Run `action` while holding the lock.

        Returns:
            The action's result, or BUSY if the lock was not acquired in time.
            Exceptions from the action propagate after the lock is released.
        """
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        handle = self._acquire(timeout_ms)
        if handle is None:
            logger.warning(f"Lock not acquired within {timeout_ms}ms")
            return BUSY
        try:
            return action()
        finally:
            self._release(handle)

    @contextmanager
    def critical_section(self, timeout_ms: int | None = None) -> Iterator[None]:
        """
        Context-manager form of with_lock.

        Raises:
            LockBusyError: If the lock was not acquired in time
        """
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        handle = self._acquire(timeout_ms)
        if handle is None:
            logger.warning(f"Lock not acquired within {timeout_ms}ms")
            raise LockBusyError(timeout_ms)
        try:
            yield
        finally:
            self._release(handle)

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    def _acquire(self, timeout_ms: int) -> Any | None:
        # 0 is a single non-blocking attempt
        if self._lock.acquire(timeout=max(timeout_ms, 0) / 1000):
            return self._lock
        return None

    def _release(self, handle: Any) -> None:
        handle.release()


class RedisLockManager(LockManager):
    """
    The same contract across processes, using a Redis lock.

    `lease_seconds` bounds how long a crashed holder can block others.
    """

    def __init__(
        self,
        client: Any | None = None,
        name: str = "schoolvault:lock",
        timeout_ms: int | None = None,
        lease_seconds: float = 300,
    ):
        super().__init__(timeout_ms)
        self._client = client
        self.name = name
        self.lease_seconds = lease_seconds

    @property
    def client(self) -> Any:
        if self._client is None:
            from lib.redis_client import get_redis_client
            self._client = get_redis_client()
        return self._client

    @property
    def locked(self) -> bool:
        return bool(self.client.get(self.name))

    def _acquire(self, timeout_ms: int) -> Any | None:
        lock = self.client.lock(
            self.name,
            timeout=self.lease_seconds,
            blocking_timeout=max(timeout_ms, 0) / 1000,
        )
        if lock.acquire(blocking=True):
            return lock
        return None

    def _release(self, handle: Any) -> None:
        from redis.exceptions import LockError

        try:
            handle.release()
        except LockError as e:
            # Lease expired while the action ran; another holder may own it now
            logger.warning(f"Lock {self.name} was no longer held at release: {e}")


def create_lock_manager() -> LockManager:
    """Lock manager selected by LOCK_BACKEND."""
    if settings.LOCK_BACKEND == "redis":
        return RedisLockManager()
    return LockManager()
