"""Sync/async bridging for fire-and-forget transport I/O.

    - IOLoop: an event loop on a daemon thread, started on first use
    - schedule: start a coroutine on the running loop, or hand it to an IOLoop

``log()`` is synchronous and must never await. When an event loop is running in
the current thread, a transport's pending write becomes a task on that loop.
Without one, the write is submitted to a background IOLoop and ``log()``
returns at once; the dispatcher keeps the returned futures until they settle.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Coroutine
from concurrent.futures import Future
from typing import TypeVar

T = TypeVar("T")


class IOLoop:
    """Event loop running forever on a daemon thread, started lazily.

    Coroutines are submitted with ``asyncio.run_coroutine_threadsafe`` in call
    order, so tasks start on the loop in the order they were submitted.

    Example:
        >>> io = IOLoop()
        >>> future = io.submit(transport.write(entry))   # returns immediately
        >>> io.run(transport.flush())                     # blocks until done
        >>> io.stop()
    """

    __slots__ = ("_name", "_loop", "_thread", "_lock")

    def __init__(self, name: str = "logweave-io") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._loop is not None

    def is_current(self) -> bool:
        """Whether the caller is running on this loop's thread."""
        return self._thread is not None and threading.current_thread() is self._thread

    def _ensure(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=self._serve, args=(loop,), daemon=True, name=self._name)
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    @staticmethod
    def _serve(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    def submit(self, coro: Coroutine[object, object, T]) -> Future[T]:
        """Schedule ``coro`` on the background loop without waiting."""
        return asyncio.run_coroutine_threadsafe(coro, self._ensure())

    def run(self, coro: Coroutine[object, object, T]) -> T:
        """Run ``coro`` on the background loop and block until it finishes.

        Raises:
            RuntimeError: called from a thread with a running event loop, where
                blocking would stall that loop's own pending writes
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return self.submit(coro).result()
        coro.close()
        raise RuntimeError("Cannot block on logweave I/O inside a running event loop; await the async method instead")

    def stop(self) -> None:
        """Shut the loop down and join its thread. A later ``submit`` starts a fresh one."""
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None or thread is None:
            return
        if thread is threading.current_thread():
            raise RuntimeError("IOLoop.stop() cannot be called from its own thread")
        asyncio.run_coroutine_threadsafe(loop.shutdown_default_executor(), loop).result()
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()

    def __repr__(self) -> str:
        return f"<IOLoop {self._name} started={self.started}>"


def schedule(coro: Coroutine[object, object, None], fallback: IOLoop) -> asyncio.Task[None] | Future[None]:
    """Start ``coro`` as a task on the running loop, or on ``fallback`` without one.

    Returns the task or future so callers can keep a strong reference and wait on it.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return fallback.submit(coro)
    return loop.create_task(coro)
