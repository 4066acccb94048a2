"""Transport registry and fan-out with per-transport failure isolation.

``dispatch`` hands one entry to every transport in registration order without
waiting on any of them. A transport that raises, or whose pending write fails
later, is reported on the side channel (``error`` event plus the stdlib
``logweave.dispatch`` logger) and never affects the caller or the other
transports. Each dispatch iterates a snapshot of the registry, so adding or
removing transports mid-flight cannot skip or duplicate deliveries.

Writes issued with no running event loop go to the dispatcher's own background
IOLoop. Once that loop has been used, transport flush/close run on it too, so a
transport's I/O always stays on the loop that started it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Coroutine, Mapping
from concurrent.futures import Future
from typing import Any, TypeVar

from logweave.foundation.errors import (
    ConfigurationError,
    ExecutionContext,
    TransportFailure,
    TransportOperation,
    UnsupportedEnvironmentError,
    wrap_transport_error,
)
from logweave.io.transports.base import Transport

from .events import Emitter
from .interop import IOLoop, schedule

logger = logging.getLogger("logweave.dispatch")

T = TypeVar("T")
Pending = asyncio.Task[None] | Future[None]


class Dispatcher:
    """Ordered, name-keyed set of transports shared by a whole logger tree.

    Example:
        >>> dispatcher = Dispatcher(Emitter())
        >>> dispatcher.add(MemoryTransport())
        >>> dispatcher.dispatch(entry)
        >>> failures = await dispatcher.flush()
    """

    __slots__ = ("_transports", "_emitter", "_environment", "_pending", "_pending_lock", "_io", "_closed")

    def __init__(self, emitter: Emitter, environment: ExecutionContext = "server") -> None:
        self._transports: dict[str, Transport] = {}
        self._emitter = emitter
        self._environment: ExecutionContext = environment
        self._pending: set[Pending] = set()
        self._pending_lock = threading.Lock()
        self._io = IOLoop()
        self._closed = False

    # ─────────────────────────────────────────────────────────────────
    # Registry
    # ─────────────────────────────────────────────────────────────────

    def add(self, transport: Transport) -> None:
        """Register a transport. Rejects invalid shapes, duplicate names and unsupported environments."""
        if not isinstance(transport, Transport):
            raise ConfigurationError(
                f"{type(transport).__name__} does not implement write/flush/close/supports", "transports")
        name = transport.name
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"{type(transport).__name__} must have a non-empty name", "transports")
        if name in self._transports:
            raise ConfigurationError(f"Transport '{name}' already registered", "transports")
        if not transport.supports(self._environment):
            raise UnsupportedEnvironmentError(
                f"Transport '{name}' does not support the {self._environment} environment", self._environment)
        self._transports[name] = transport

    def remove(self, name: str) -> Transport | None:
        """Unregister by name. In-flight writes to it still complete."""
        return self._transports.pop(name, None)

    def get(self, name: str) -> Transport | None:
        return self._transports.get(name)

    @property
    def transports(self) -> tuple[Transport, ...]:
        return tuple(self._transports.values())

    @property
    def environment(self) -> ExecutionContext:
        return self._environment

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        with self._pending_lock:
            return len(self._pending)

    @property
    def io(self) -> IOLoop:
        """Background loop used for writes issued without a running event loop."""
        return self._io

    def __contains__(self, name: object) -> bool:
        return name in self._transports

    def __len__(self) -> int:
        return len(self._transports)

    # ─────────────────────────────────────────────────────────────────
    # Fan-out
    # ─────────────────────────────────────────────────────────────────

    def dispatch(self, entry: Mapping[str, Any]) -> None:
        """Start ``write(entry)`` on every transport. Never raises, never awaits."""
        if self._closed:
            return
        for transport in tuple(self._transports.values()):
            try:
                result = transport.write(entry)
            except Exception as e:
                self._report(transport.name, "write", e, entry)
                continue
            if inspect.isawaitable(result):
                self._track(transport.name, result, entry)

    def _track(self, name: str, pending: Awaitable[object], entry: Mapping[str, Any]) -> None:
        async def guarded() -> None:
            try:
                await pending
            except Exception as e:
                self._report(name, "write", e, entry)

        try:
            task = schedule(guarded(), self._io)
        except Exception as e:
            self._report(name, "write", e, entry)
            return
        with self._pending_lock:
            self._pending.add(task)
        task.add_done_callback(self._forget)

    def _forget(self, task: Pending) -> None:
        with self._pending_lock:
            self._pending.discard(task)

    def _report(
        self, name: str, operation: TransportOperation, error: BaseException, entry: Mapping[str, Any] | None = None,
    ) -> TransportFailure:
        failure = TransportFailure(
            transport=name, operation=operation, error=wrap_transport_error(error, name, operation), entry=entry)
        logger.warning("transport %s %s failed: %s", name, operation, error)
        self._emitter.emit("error", failure)
        return failure

    # ─────────────────────────────────────────────────────────────────
    # Synchronization points
    # ─────────────────────────────────────────────────────────────────

    async def drain(self) -> None:
        """Wait until every write started so far has settled."""
        loop = asyncio.get_running_loop()
        while waits := self._awaitables(loop):
            await asyncio.gather(*waits, return_exceptions=True)

    def _awaitables(self, loop: asyncio.AbstractEventLoop) -> list[Awaitable[None]]:
        with self._pending_lock:
            snapshot = tuple(self._pending)
        waits: list[Awaitable[None]] = []
        for task in snapshot:
            if not isinstance(task, asyncio.Task):
                waits.append(asyncio.wrap_future(task, loop=loop))
            elif task.get_loop() is loop:
                waits.append(task)
            elif task.get_loop().is_closed():
                # its loop is gone (e.g. a finished asyncio.run); it can never settle
                self._forget(task)
        return waits

    async def flush(self) -> list[TransportFailure]:
        """Drain in-flight writes, then flush every transport concurrently.

        Failing transports are reported and returned; the rest are still flushed.
        """
        await self.drain()
        failures = await self._on_io(self._each("flush", lambda t: t.flush()))
        self._emitter.emit("flush", failures)
        return failures

    async def close(self) -> list[TransportFailure]:
        """Flush then close every transport. Later calls are no-ops returning [].

        The background loop is shut down afterwards unless ``close`` runs on it,
        in which case the caller stops it with ``shutdown()``.
        """
        if self._closed:
            return []
        self._closed = True
        await self.drain()
        failures = await self._on_io(self._each("flush", lambda t: t.flush()))
        failures += await self._on_io(self._each("close", lambda t: t.close()))
        self._emitter.emit("close", failures)
        if self._io.started and not self._io.is_current():
            await asyncio.to_thread(self._io.stop)
        return failures

    def run_blocking(self, coro: Coroutine[object, object, T]) -> T:
        """Run ``coro`` on the background loop from synchronous code.

        Raises:
            RuntimeError: an event loop is running in the calling thread
        """
        return self._io.run(coro)

    def shutdown(self) -> None:
        """Stop the background loop, if one was started."""
        self._io.stop()

    async def _on_io(self, coro: Coroutine[object, object, T]) -> T:
        if self._io.started and not self._io.is_current():
            return await asyncio.wrap_future(self._io.submit(coro))
        return await coro

    async def _each(
        self, operation: TransportOperation, call: Callable[[Transport], Awaitable[None] | None],
    ) -> list[TransportFailure]:
        snapshot = tuple(self._transports.values())

        async def run(transport: Transport) -> TransportFailure | None:
            try:
                result = call(transport)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                return self._report(transport.name, operation, e)
            return None

        results = await asyncio.gather(*(run(t) for t in snapshot))
        return [f for f in results if f is not None]
