"""Logger trees: level filtering, binding inheritance and entry assembly.

A root logger built by ``create_logger`` owns one LogContext, LevelRegistry,
PluginKernel, Dispatcher and Emitter. Every child shares all five by reference
and only owns its bindings and its minimum level, which is copied from the
parent when the child is created.

Example:
    >>> log = create_logger("api", level="debug", transports=[MemoryTransport()])
    >>> req = log.child(request_id="r-1")
    >>> req.info("handled", status=200)
    # => {"level": "info", "message": "handled", "time": ..., "request_id": "r-1", "status": 200}
"""

from __future__ import annotations

import logging
import sys
import time
import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType, TracebackType
from typing import Any, TypeVar

from logweave.foundation.config import LogweaveSettings, get_settings
from logweave.foundation.env import detect_execution_context
from logweave.foundation.errors import ExecutionContext, Format, TransportFailure, UnsupportedEnvironmentError
from logweave.foundation.levels import DEFAULT_LEVEL, LevelLike, LevelRegistry
from logweave.io.format import error_dict
from logweave.io.transports import ConsoleTransport, Transport

from .context import DEFAULT_NAME, LogContext
from .dispatcher import Dispatcher
from .entry import RESERVED_KEYS, LogEntry
from .events import Emitter, Handler, Unsubscribe
from .kernel import Plugin, PluginKernel

logger = logging.getLogger("logweave")

T = TypeVar("T")
Fields = Mapping[str, Any]


@dataclass(slots=True, eq=False)
class _Tree:
    """State shared by reference across a whole logger tree."""

    context: LogContext
    registry: LevelRegistry
    kernel: PluginKernel
    dispatcher: Dispatcher
    events: Emitter
    closed: bool = False


class Logger:
    """Structured, leveled logger. Build one with ``create_logger``.

    ``log()`` and the level shortcuts are synchronous and return before any
    transport I/O completes. A disabled level is a complete no-op: no entry,
    no event, no write.
    """

    __slots__ = ("_tree", "_bindings", "_level")

    def __init__(self, tree: _Tree, bindings: Fields, level: str) -> None:
        self._tree = tree
        self._bindings: Mapping[str, Any] = MappingProxyType(dict(bindings))
        self._level = level

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._tree.context.name

    @property
    def context(self) -> LogContext:
        return self._tree.context

    @property
    def registry(self) -> LevelRegistry:
        return self._tree.registry

    @property
    def dispatcher(self) -> Dispatcher:
        return self._tree.dispatcher

    @property
    def bindings(self) -> Mapping[str, Any]:
        """This logger's merged bindings (read-only)."""
        return self._bindings

    @property
    def level(self) -> str:
        """Current minimum level of this logger."""
        return self._level

    @property
    def closed(self) -> bool:
        return self._tree.closed

    # ─────────────────────────────────────────────────────────────────
    # Levels
    # ─────────────────────────────────────────────────────────────────

    def is_level_enabled(self, level: LevelLike) -> bool:
        return self._tree.registry.is_enabled(level, self._level)

    def set_level(self, level: LevelLike) -> None:
        """Change this logger's minimum level. Parents and existing children are unaffected."""
        self._level = self._tree.registry.resolve(level)

    # ─────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────

    def log(self, level: LevelLike, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        """Build an entry from bindings, ``fields`` and ``kw`` (most specific wins) and dispatch it."""
        tree = self._tree
        name = tree.registry.resolve(level)
        if not tree.registry.is_enabled(name, self._level):
            return

        merged = {**self._bindings, **(fields or {}), **kw}
        if (locate := tree.context.source) is not None:
            merged = {**locate(), **merged}
        data: dict[str, Any] = {"level": name, "message": message}
        if tree.context.timestamp is True and "time" not in merged:
            data["time"] = time.time_ns() // 1_000_000
        data.update((k, v) for k, v in merged.items() if k not in RESERVED_KEYS)

        entry = LogEntry(data)
        tree.events.emit("log", entry)
        tree.events.emit(f"log:{name}", entry)
        tree.dispatcher.dispatch(entry)

    def trace(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("trace", message, fields, **kw)

    def debug(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("debug", message, fields, **kw)

    def info(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("info", message, fields, **kw)

    def warn(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("warn", message, fields, **kw)

    warning = warn

    def error(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("error", message, fields, **kw)

    def fatal(self, message: str, fields: Fields | None = None, /, **kw: Any) -> None:
        self.log("fatal", message, fields, **kw)

    def exception(self, message: str, exc: BaseException | None = None, /, **kw: Any) -> None:
        """Log at error with ``err={name, message, stack}`` from ``exc`` or the exception being handled."""
        if (exc := exc if exc is not None else sys.exc_info()[1]) is not None:
            kw["err"] = error_dict(exc)
        self.log("error", message, **kw)

    # ─────────────────────────────────────────────────────────────────
    # Children
    # ─────────────────────────────────────────────────────────────────

    def child(self, bindings: Fields | None = None, /, **kw: Any) -> Logger:
        """New logger in the same tree with merged bindings and a copy of this logger's level."""
        return Logger(self._tree, {**self._bindings, **(bindings or {}), **kw}, self._level)

    def with_correlation(self, correlation_id: str | None = None) -> Logger:
        """Child bound with ``correlation_id`` (given, from the context factory, or a UUID4 hex)."""
        if correlation_id is None:
            factory = self._tree.context.correlation_factory
            correlation_id = factory() if factory is not None else uuid.uuid4().hex
        return self.child(correlation_id=correlation_id)

    # ─────────────────────────────────────────────────────────────────
    # Timing
    # ─────────────────────────────────────────────────────────────────

    def _log_duration(self, label: str, start: float) -> float:
        duration = (time.perf_counter() - start) * 1000
        self.debug(f"{label}: {duration:.2f}ms", label=label, duration=duration)
        return duration

    def time(self, label: str) -> None:
        """Start a named timer shared by the whole tree."""
        self._tree.context.timers[label] = time.perf_counter()

    def time_end(self, label: str) -> float | None:
        """Stop a named timer and log its duration at debug. Unknown labels log a warning."""
        start = self._tree.context.timers.pop(label, None)
        if start is None:
            self.warn(f"Timer '{label}' does not exist", label=label)
            return None
        return self._log_duration(label, start)

    def start_timer(self, label: str) -> Callable[[], float]:
        """Return a stop function that logs and returns the elapsed milliseconds."""
        start = time.perf_counter()
        return lambda: self._log_duration(label, start)

    async def time_async(self, label: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Await ``fn()`` and log how long it took, whether or not it raised."""
        start = time.perf_counter()
        try:
            return await fn()
        finally:
            self._log_duration(label, start)

    # ─────────────────────────────────────────────────────────────────
    # Plugins
    # ─────────────────────────────────────────────────────────────────

    def use(self, plugin: Plugin, *, replace: bool = False) -> Logger:
        self._tree.kernel.use(plugin, replace=replace)
        return self

    async def unregister(self, name: str) -> bool:
        return await self._tree.kernel.unregister(name)

    def has_plugin(self, name: str) -> bool:
        return self._tree.kernel.has(name)

    def list_plugins(self) -> list[Plugin]:
        return self._tree.kernel.list()

    async def init(self) -> None:
        """Run plugin ``on_init`` hooks in registration order."""
        await self._tree.kernel.init()

    # ─────────────────────────────────────────────────────────────────
    # Transports and events
    # ─────────────────────────────────────────────────────────────────

    def add_transport(self, transport: Transport) -> Logger:
        """Add a transport for the whole tree, including children created earlier."""
        self._tree.dispatcher.add(transport)
        return self

    def remove_transport(self, name: str) -> Transport | None:
        return self._tree.dispatcher.remove(name)

    @property
    def transports(self) -> tuple[Transport, ...]:
        return self._tree.dispatcher.transports

    def on(self, event: str, handler: Handler) -> Unsubscribe:
        """Subscribe to ``log``, ``log:<level>``, ``error``, ``flush`` or ``close``."""
        return self._tree.events.on(event, handler)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def flush(self) -> list[TransportFailure]:
        """Wait for in-flight writes and flush every transport. Returns the failures."""
        return await self._tree.dispatcher.flush()

    async def close(self) -> list[TransportFailure]:
        """Close transports, then destroy plugins. Only the first call for a tree does anything.

        Raises:
            PluginTeardownError: one or more ``on_destroy`` hooks failed
        """
        tree = self._tree
        if tree.closed:
            return []
        tree.closed = True
        failures = await tree.dispatcher.close()
        await tree.kernel.destroy()
        return failures

    def flush_sync(self) -> list[TransportFailure]:
        """Blocking ``flush()`` for code without a running event loop.

        Raises:
            RuntimeError: called from inside a running event loop; await ``flush()`` there
        """
        return self._tree.dispatcher.run_blocking(self.flush())

    def close_sync(self) -> list[TransportFailure]:
        """Blocking ``close()`` for code without a running event loop.

        Raises:
            RuntimeError: called from inside a running event loop; await ``close()`` there
        """
        dispatcher = self._tree.dispatcher
        try:
            return dispatcher.run_blocking(self.close())
        finally:
            if dispatcher.closed:
                dispatcher.shutdown()

    async def __aenter__(self) -> Logger:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<Logger {self.name} level={self._level} bindings={dict(self._bindings)!r}>"


# ─────────────────────────────────────────────────────────────────────────────
# Factory
# ─────────────────────────────────────────────────────────────────────────────


def create_logger(
    name: str | None = None,
    *,
    level: LevelLike | None = None,
    format: Format | None = None,
    colors: bool | None = None,
    timestamp: bool | None = None,
    transports: Iterable[Transport] | None = None,
    plugins: Iterable[Plugin] = (),
    context: Fields | None = None,
    levels: Mapping[str, int] | None = None,
    environment: ExecutionContext | None = None,
    source: bool | None = None,
    settings: LogweaveSettings | None = None,
) -> Logger:
    """Create a root logger.

    Explicit arguments win over ``LOGWEAVE_*`` settings, which win over plugin
    defaults. Core plugins (level, format, timestamp) are installed first, then
    ``plugins`` in order. Without ``transports`` a ConsoleTransport is added.
    Transports that do not support the execution environment are skipped with a
    warning.

    Args:
        name: Logger name (default "app")
        level: Root minimum level (default "info")
        format: "json" | "pretty" | "auto"
        colors: Colorize pretty output (None = auto-detect)
        timestamp: Stamp entries with epoch milliseconds (default True)
        transports: Output destinations
        plugins: Extra plugins, installed after the core ones
        context: Bindings attached to every entry of the tree
        levels: Custom ``{name: rank}`` levels, least severe first
        environment: "server" | "client" (default: detected)
        source: Add call-site ``file`` and ``line`` to entries (installs SourcePlugin)
        settings: Settings to read defaults from (default: ``get_settings()``)

    Raises:
        ConfigurationError: invalid level, levels, plugin or transport
        PluginLifecycleError: a plugin's install hook failed
    """
    # Imported here: the bundled plugins subclass runtime.kernel.Plugin
    from logweave.plugins import SourcePlugin, core_plugins

    settings = settings if settings is not None else get_settings()
    registry = LevelRegistry(levels)
    level = level if level is not None else settings.level
    env = environment or detect_execution_context()

    ctx = LogContext(
        name=name or settings.name or DEFAULT_NAME,
        level=registry.resolve(level) if level is not None else None,
        format=format if format is not None else settings.format,
        colors=colors if colors is not None else settings.colors,
        timestamp=timestamp if timestamp is not None else settings.timestamp,
        environment=env,
    )
    kernel = PluginKernel(ctx)
    for plugin in core_plugins(DEFAULT_LEVEL if DEFAULT_LEVEL in registry else registry.names[0]):
        kernel.use(plugin)
    for plugin in plugins:
        kernel.use(plugin)
    if (source if source is not None else settings.source) and not kernel.has("source"):
        kernel.use(SourcePlugin())

    events = Emitter()
    dispatcher = Dispatcher(events, env)
    if transports is None:
        transports = [ConsoleTransport(format=ctx.format, colors=ctx.colors, timestamp=bool(ctx.timestamp))]
    for transport in transports:
        try:
            dispatcher.add(transport)
        except UnsupportedEnvironmentError as e:
            logger.warning("skipping transport %s: %s", getattr(transport, "name", transport), e)

    tree = _Tree(context=ctx, registry=registry, kernel=kernel, dispatcher=dispatcher, events=events)
    return Logger(tree, context or {}, registry.resolve(ctx.level))
