"""Plugin contract and the plugin kernel.

Plugins have a two-phase lifecycle:

1. ``install(kernel)`` runs synchronously inside ``kernel.use()``, one plugin at a
   time, so a plugin can adjust the shared LogContext deterministically.
2. ``on_init`` / ``on_destroy`` are optional async-capable hooks run later in bulk:
   init in registration order (fail-fast), destroy in reverse order (every plugin
   is attempted, failures are aggregated).

Example:
    >>> class RequestIdPlugin(Plugin):
    ...     name = "request-id"
    ...     def install(self, kernel):
    ...         kernel.get_context().set_default("request_id_header", "X-Request-ID")
    >>> kernel = PluginKernel(LogContext())
    >>> kernel.use(RequestIdPlugin())
    >>> kernel.has("request-id")
    True
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from logweave.foundation.errors import ConfigurationError, PluginLifecycleError, PluginTeardownError

if TYPE_CHECKING:
    from .context import LogContext

logger = logging.getLogger("logweave.kernel")

Hook = Callable[[], Awaitable[None] | None]


# ─────────────────────────────────────────────────────────────────────────────
# Plugin Contract
# ─────────────────────────────────────────────────────────────────────────────


class Plugin(ABC):
    """Base class for kernel plugins.

    Subclasses set ``name`` (unique within a kernel) and ``version`` and implement
    ``install``. ``on_init`` and ``on_destroy`` are None unless a subclass defines
    them; either may be a plain or an ``async`` method.
    """

    name: str = ""
    version: str = "1.0.0"
    on_init: Hook | None = None
    on_destroy: Hook | None = None

    @abstractmethod
    def install(self, kernel: PluginKernel) -> None:
        """Synchronous registration hook."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}@{self.version}>"


@dataclass(slots=True, repr=False, kw_only=True)
class FunctionPlugin(Plugin):
    """Plugin assembled from plain callables. Build with ``define_plugin``."""

    name: str
    version: str
    setup: Callable[[PluginKernel], None]
    on_init: Hook | None = None
    on_destroy: Hook | None = None

    def install(self, kernel: PluginKernel) -> None:
        self.setup(kernel)


def define_plugin(
    name: str,
    install: Callable[[PluginKernel], None],
    *,
    version: str = "1.0.0",
    on_init: Hook | None = None,
    on_destroy: Hook | None = None,
) -> FunctionPlugin:
    """Create a plugin without subclassing.

    Example:
        >>> audit = define_plugin("audit", lambda k: k.get_context().set_default("audit", True))
    """
    return FunctionPlugin(name=name, version=version, setup=install, on_init=on_init, on_destroy=on_destroy)


def _validate(plugin: object) -> Plugin:
    if not isinstance(plugin, Plugin):
        raise ConfigurationError(f"Expected a Plugin instance, got {type(plugin).__name__}", "plugins")
    if not isinstance(plugin.name, str) or not plugin.name:
        raise ConfigurationError(f"{type(plugin).__name__} must define a non-empty name", "plugins")
    if not isinstance(plugin.version, str):
        raise ConfigurationError(f"Plugin {plugin.name!r} version must be a string", "plugins")
    for hook in ("on_init", "on_destroy"):
        if (fn := getattr(plugin, hook)) is not None and not callable(fn):
            raise ConfigurationError(f"Plugin {plugin.name!r} {hook} must be callable or None", "plugins")
    return plugin


async def _run_hook(hook: Hook) -> None:
    result = hook()
    if inspect.isawaitable(result):
        await result


# ─────────────────────────────────────────────────────────────────────────────
# Kernel
# ─────────────────────────────────────────────────────────────────────────────


class PluginKernel:
    """Registry of named plugins with ordered lifecycle management.

    Registering a name twice raises ConfigurationError; pass ``replace=True`` to
    swap a plugin explicitly. A replaced plugin is dropped without its
    ``on_destroy`` being run and the newcomer moves to the end of the order.
    """

    __slots__ = ("_context", "_plugins")

    def __init__(self, context: LogContext) -> None:
        self._context = context
        self._plugins: dict[str, Plugin] = {}

    def get_context(self) -> LogContext:
        return self._context

    # ─────────────────────────────────────────────────────────────────
    # Registration
    # ─────────────────────────────────────────────────────────────────

    def use(self, plugin: Plugin, *, replace: bool = False) -> None:
        """Register ``plugin`` and run its install hook before returning."""
        plugin = _validate(plugin)
        name = plugin.name
        if name in self._plugins and not replace:
            raise ConfigurationError(
                f"Plugin '{name}' already registered. Use unregister() or replace=True.", "plugins")

        snapshot = dict(self._plugins)
        self._plugins.pop(name, None)
        self._plugins[name] = plugin
        try:
            plugin.install(self)
        except Exception as e:
            self._plugins = snapshot
            raise PluginLifecycleError(f"install failed: {e}", name, "install", cause=e) from e
        logger.debug("installed plugin %s@%s", name, plugin.version)

    async def unregister(self, name: str) -> bool:
        """Tear down and remove a plugin. Returns False if it was not registered."""
        if (plugin := self._plugins.pop(name, None)) is None:
            return False
        if plugin.on_destroy is not None:
            try:
                await _run_hook(plugin.on_destroy)
            except Exception as e:
                raise PluginLifecycleError(f"on_destroy failed: {e}", name, "destroy", cause=e) from e
        return True

    def has(self, name: str) -> bool:
        return name in self._plugins

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def list(self) -> list[Plugin]:
        """Registered plugins in registration order."""
        return list(self._plugins.values())

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def init(self) -> None:
        """Run every ``on_init`` in registration order, one at a time. Fail-fast."""
        for plugin in tuple(self._plugins.values()):
            if plugin.on_init is None:
                continue
            try:
                await _run_hook(plugin.on_init)
            except Exception as e:
                raise PluginLifecycleError(f"on_init failed: {e}", plugin.name, "init", cause=e) from e

    async def destroy(self) -> None:
        """Run every ``on_destroy`` in reverse registration order, then clear the registry.

        Every plugin gets its teardown call; failures are raised together as a
        PluginTeardownError once all have been attempted.
        """
        failures: list[PluginLifecycleError] = []
        for plugin in reversed(tuple(self._plugins.values())):
            if plugin.on_destroy is None:
                continue
            try:
                await _run_hook(plugin.on_destroy)
            except Exception as e:
                logger.warning("plugin %s on_destroy failed: %s", plugin.name, e)
                err = PluginLifecycleError(f"on_destroy failed: {e}", plugin.name, "destroy", cause=e)
                failures.append(err)
        self._plugins.clear()
        if failures:
            raise PluginTeardownError(failures)
