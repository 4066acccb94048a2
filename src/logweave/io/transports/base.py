"""Transport contract and reusable bases.

A transport is any object with a ``name`` and the four capabilities below.
``write``, ``flush`` and ``close`` may return None (synchronous) or an awaitable.
The dispatcher never waits for one write before issuing the next, so a transport
with asynchronous I/O must keep its own output ordered: ``SerialTransport`` does
that with a FIFO lock that tasks acquire in the order they were created.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from typing import Any, Protocol, runtime_checkable

from logweave.foundation.errors import ExecutionContext, TransportError


@runtime_checkable
class Transport(Protocol):
    """Protocol for log output destinations."""

    name: str

    def write(self, entry: Mapping[str, Any]) -> Awaitable[None] | None: ...
    def flush(self) -> Awaitable[None] | None: ...
    def close(self) -> Awaitable[None] | None: ...
    def supports(self, execution_context: ExecutionContext) -> bool: ...


class BaseTransport(ABC):
    """Synchronous transport base: implement ``write``; flush and close default to no-ops."""

    name: str = "transport"

    @abstractmethod
    def write(self, entry: Mapping[str, Any]) -> Awaitable[None] | None: ...

    def flush(self) -> Awaitable[None] | None:
        return None

    def close(self) -> Awaitable[None] | None:
        return None

    def supports(self, execution_context: ExecutionContext) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class SerialTransport(BaseTransport):
    """Async transport whose operations run strictly one after another.

    Subclasses implement ``_write`` and optionally ``_flush`` / ``_close``. Every
    public operation queues behind the ones issued before it, so entries reach
    the destination in call order and never interleave. Writes after ``close``
    fail with TransportError; repeated ``close`` calls are no-ops.
    """

    def __init__(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _serial(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; a new loop (e.g. per asyncio.run) gets a new chain
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock, self._lock_loop = asyncio.Lock(), loop
        return self._lock

    def write(self, entry: Mapping[str, Any]) -> Awaitable[None]:
        if self._closed:
            raise TransportError("transport is closed", self.name, "write")
        return self._queued_write(entry)

    async def _queued_write(self, entry: Mapping[str, Any]) -> None:
        async with self._serial():
            await self._write(entry)

    async def flush(self) -> None:
        if self._closed:
            return
        async with self._serial():
            await self._flush()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        async with self._serial():
            await self._flush()
            await self._close()

    @abstractmethod
    async def _write(self, entry: Mapping[str, Any]) -> None: ...

    async def _flush(self) -> None:
        return None

    async def _close(self) -> None:
        return None
