"""Logweave - Structured, pluggable logging for sync and async Python.

Leveled log calls become structured entries that fan out to any number of
transports. A failing transport never raises into the caller and never stops
the others; async transports keep their writes in call order.

Quick Start:
    >>> from logweave import create_logger
    >>>
    >>> log = create_logger("checkout", level="debug")
    >>> log.info("order placed", order_id=42, total=19.99)
    >>>
    >>> req = log.child(request_id="r-81")
    >>> req.warn("slow upstream", upstream="payments", ms=812)

Transports:
    >>> from logweave import FileTransport, HttpTransport
    >>>
    >>> log = create_logger(transports=[
    ...     FileTransport("logs/app.log", max_size="10MB", max_files=7),
    ...     HttpTransport("https://logs.example.com/ingest", batch=50),
    ... ])
    >>> log.on("error", lambda failure: print(failure.message))

Plugins:
    >>> from logweave import define_plugin
    >>>
    >>> audit = define_plugin("audit", lambda kernel: kernel.get_context().set_default("audit", True))
    >>> log.use(audit)

Lifecycle:
    >>> async with create_logger() as log:   # init() on enter, close() on exit
    ...     log.info("ready")
"""

from __future__ import annotations

__version__ = "0.1.0"

# Foundation
from .foundation import (
    DEFAULT_LEVEL,
    ConfigurationError,
    ErrorCode,
    Level,
    LevelRegistry,
    LogError,
    LogweaveSettings,
    PluginLifecycleError,
    PluginTeardownError,
    TransportError,
    TransportFailure,
    UnsupportedEnvironmentError,
    clear_settings_cache,
    detect_execution_context,
    get_settings,
)

# Output
from .io import (
    BaseTransport,
    ConsoleTransport,
    ConstantBackoff,
    ExponentialBackoff,
    FileTransport,
    HttpTransport,
    MemoryTransport,
    SerialTransport,
    StreamTransport,
    Transport,
    format_json,
    format_pretty,
)

# Engine
from .runtime import (
    Dispatcher,
    Emitter,
    FunctionPlugin,
    LogContext,
    LogEntry,
    Logger,
    Plugin,
    PluginKernel,
    create_logger,
    define_plugin,
)

# Bundled plugins
from .plugins import CorrelationPlugin, FormatPlugin, LevelPlugin, SourcePlugin, TimestampPlugin

__all__ = [
    # Version
    "__version__",
    # Logger
    "Logger",
    "create_logger",
    "LogEntry",
    "LogContext",
    # Levels
    "Level",
    "LevelRegistry",
    "DEFAULT_LEVEL",
    # Plugins
    "Plugin",
    "FunctionPlugin",
    "PluginKernel",
    "define_plugin",
    "LevelPlugin",
    "FormatPlugin",
    "TimestampPlugin",
    "CorrelationPlugin",
    "SourcePlugin",
    # Transports
    "Transport",
    "BaseTransport",
    "SerialTransport",
    "ConsoleTransport",
    "StreamTransport",
    "FileTransport",
    "HttpTransport",
    "MemoryTransport",
    "ExponentialBackoff",
    "ConstantBackoff",
    "format_json",
    "format_pretty",
    # Dispatch
    "Dispatcher",
    "Emitter",
    # Errors
    "ErrorCode",
    "LogError",
    "ConfigurationError",
    "UnsupportedEnvironmentError",
    "PluginLifecycleError",
    "PluginTeardownError",
    "TransportError",
    "TransportFailure",
    # Config
    "LogweaveSettings",
    "get_settings",
    "clear_settings_cache",
    "detect_execution_context",
]
