"""Keyed critical sections for the role engine.

Writers that read-then-write the priority sequence of a provider hold
the provider lock; permission matrix writes hold the lock of the role
they touch; role binding writes hold the lock of the user. Locks are
always taken in the order provider -> user -> role.

These are in-process locks. Rows read inside a critical section are
also selected FOR UPDATE so separate worker processes serialize on the
database as well.
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from typing import Any

import structlog

from tenant_roles.config import settings
from tenant_roles.core.errors import ServiceUnavailableError


logger = structlog.get_logger()


class LockRegistry:
    """Lazily created asyncio locks keyed by provider, role or user.

    A lock lives only while someone holds or waits for it, so the
    registry does not grow with every user or role ever administered.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._claims: dict[Hashable, int] = {}
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else settings.lock_timeout_seconds

    def _claim(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._claims[key] = self._claims.get(key, 0) + 1
        return lock

    def _release_claim(self, key: Hashable) -> None:
        remaining = self._claims.get(key, 0) - 1
        if remaining > 0:
            self._claims[key] = remaining
        else:
            self._claims.pop(key, None)
            self._locks.pop(key, None)

    @asynccontextmanager
    async def _hold(self, key: tuple[str, Any]) -> AsyncIterator[None]:
        lock = self._claim(key)
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except TimeoutError:
                logger.warning("lock_timeout", lock=f"{key[0]}:{key[1]}", timeout=self.timeout)
                raise ServiceUnavailableError(
                    "Another administrative change is in progress, try again",
                    error_code="lock_timeout",
                    details={"lock": key[0]},
                ) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._release_claim(key)

    def provider(self, provider: str):
        """Serialize writers of one provider's priority sequence."""
        return self._hold(("provider", provider))

    def role(self, role_id: Any):
        """Serialize writers of one role's permission rows and bindings."""
        return self._hold(("role", str(role_id)))

    def user(self, user_id: Any):
        """Serialize writers of one user's role set."""
        return self._hold(("user", str(user_id)))

    def locked(self, key: tuple[str, Any]) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def clear(self) -> None:
        """Forget every lock (used between event loops in tests)."""
        self._locks.clear()
        self._claims.clear()


role_locks = LockRegistry()
