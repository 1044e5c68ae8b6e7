"""Serialization guard for claimer operations."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from nft_claimer.errors import ReentrantCall


class SerialGuard:
    """Runs one claimer operation at a time, reads included.

    Other tasks wait their turn. A nested call from the task already holding
    the guard (for example a token adapter calling back into claim() during a
    transfer) is rejected with ReentrantCall.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._holder: asyncio.Task | None = None
        self._operation: str | None = None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self, operation: str) -> AsyncIterator[None]:
        task = asyncio.current_task()
        if self._holder is not None and self._holder is task:
            raise ReentrantCall(
                f"{operation}() called while {self._operation}() is in progress"
            )
        async with self._lock:
            self._holder = task
            self._operation = operation
            try:
                yield
            finally:
                self._holder = None
                self._operation = None
