"""Single-caller-at-a-time lock with nested re-entry detection.

Independent callers queue on the asyncio lock, which totally orders guarded
operations. A call made from *inside* a guarded section (for example a
collaborator calling back into the engine during an asset transfer) sees the
context flag already set and fails fast with ReentrantCallError instead of
deadlocking on the lock it already holds.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

from src.am_common.errors import ReentrantCallError


class ReentrancyGuard:
    def __init__(self, name: str = "market") -> None:
        self._lock = asyncio.Lock()
        self._entered: ContextVar[bool] = ContextVar(f"reentrancy_{name}", default=False)

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        if self._entered.get():
            raise ReentrantCallError()
        async with self._lock:
            token = self._entered.set(True)
            try:
                yield
            finally:
                self._entered.reset(token)


_guard: ReentrancyGuard | None = None


def get_reentrancy_guard() -> ReentrancyGuard:
    """Process-wide guard shared by fulfill, withdraw and the fee withdrawals."""
    global _guard  # noqa: PLW0603
    if _guard is None:
        _guard = ReentrancyGuard()
    return _guard
