"""Bundled plugins.

- LevelPlugin, FormatPlugin, TimestampPlugin: context defaults, always installed
- CorrelationPlugin: correlation id factory for ``Logger.with_correlation()``
- SourcePlugin: call-site ``file`` / ``line`` on every entry
"""

from .core import FormatPlugin, LevelPlugin, TimestampPlugin, core_plugins
from .correlation import CorrelationPlugin, generate_correlation_id
from .source import SourcePlugin, find_caller

__all__ = [
    "LevelPlugin", "FormatPlugin", "TimestampPlugin", "core_plugins",
    "CorrelationPlugin", "generate_correlation_id",
    "SourcePlugin", "find_caller",
]
