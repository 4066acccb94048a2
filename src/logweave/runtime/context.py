"""Shared mutable logging context.

One LogContext is created by the root logger and shared by reference with every
descendant logger and every plugin (through ``kernel.get_context()``). Changes made
after construction are visible across the whole tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Callable

from logweave.foundation.errors import ExecutionContext

DEFAULT_NAME = "app"


@dataclass(slots=True, eq=False)
class LogContext:
    """Cross-cutting settings read and written by loggers and plugins.

    Fields left as None are "absent": plugins fill them in with ``set_default``,
    so explicit construction-time values always win.

    Plugin-owned keys that have no dedicated field live in ``data`` and are
    reachable through item access.

    Example:
        >>> ctx = LogContext(timestamp=False)
        >>> ctx.set_default("timestamp", True)
        False
        >>> ctx.timestamp
        False
        >>> ctx["request_id"] = "abc123"
        >>> ctx.get("request_id")
        'abc123'
    """

    name: str = DEFAULT_NAME
    level: str | None = None
    format: str | None = None
    colors: bool | None = None
    timestamp: bool | None = None
    environment: ExecutionContext = "server"
    correlation_factory: Callable[[], str] | None = None
    source: Callable[[], Mapping[str, object]] | None = None
    timers: dict[str, float] = field(default_factory=dict)
    data: dict[str, object] = field(default_factory=dict)

    def set_default(self, key: str, value: object) -> bool:
        """Set ``key`` only if it is currently unset. Returns whether it was written."""
        if key in _FIELDS:
            if getattr(self, key) is not None:
                return False
            setattr(self, key, value)
            return True
        if self.data.get(key) is not None:
            return False
        self.data[key] = value
        return True

    def get(self, key: str, default: object = None) -> object:
        if key in _FIELDS:
            value = getattr(self, key)
            return default if value is None else value
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> object:
        if key in _FIELDS:
            return getattr(self, key)
        return self.data[key]

    def __setitem__(self, key: str, value: object) -> None:
        if key in _FIELDS:
            setattr(self, key, value)
        else:
            self.data[key] = value

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


_FIELDS = frozenset(f.name for f in fields(LogContext)) - {"data"}
