"""Core plugins installed by every root logger.

Each one only fills in context keys that are still absent, so values passed to
``create_logger`` (or set by an earlier plugin) are never overridden.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from logweave.foundation.env import detect_format
from logweave.foundation.levels import DEFAULT_LEVEL

from ..runtime.kernel import Plugin

if TYPE_CHECKING:
    from ..runtime.kernel import PluginKernel


class LevelPlugin(Plugin):
    """Default minimum level (info unless the registry has no such level)."""

    name = "level"

    def __init__(self, default: str = DEFAULT_LEVEL) -> None:
        self.default = default

    def install(self, kernel: PluginKernel) -> None:
        kernel.get_context().set_default("level", self.default)


class FormatPlugin(Plugin):
    """Resolve output format. Absent or "auto" becomes "pretty" on a dev terminal, else "json"."""

    name = "format"

    def install(self, kernel: PluginKernel) -> None:
        ctx = kernel.get_context()
        if ctx.format == "auto":
            ctx.format = None
        ctx.set_default("format", detect_format())


class TimestampPlugin(Plugin):
    """Stamp entries with epoch milliseconds unless timestamps were switched off."""

    name = "timestamp"

    def install(self, kernel: PluginKernel) -> None:
        kernel.get_context().set_default("timestamp", True)


def core_plugins(default_level: str = DEFAULT_LEVEL) -> list[Plugin]:
    """Fresh core plugin instances in install order."""
    return [LevelPlugin(default_level), FormatPlugin(), TimestampPlugin()]
