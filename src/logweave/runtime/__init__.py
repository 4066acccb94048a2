"""Logging engine: context, plugin kernel, dispatcher and logger trees.

- LogContext: shared mutable settings for one logger tree
- PluginKernel / Plugin / define_plugin: plugin registry and lifecycle
- Dispatcher: transport fan-out with failure isolation
- Emitter: side-channel events (log, error, flush, close)
- Logger / create_logger: the user-facing API
"""

from .context import DEFAULT_NAME, LogContext
from .entry import RESERVED_KEYS, LogEntry
from .events import Emitter, Handler, Unsubscribe
from .kernel import FunctionPlugin, Hook, Plugin, PluginKernel, define_plugin
from .dispatcher import Dispatcher
from .interop import IOLoop, schedule
from .logger import Logger, create_logger

__all__ = [
    # Context
    "LogContext", "DEFAULT_NAME",
    # Entries
    "LogEntry", "RESERVED_KEYS",
    # Events
    "Emitter", "Handler", "Unsubscribe",
    # Plugins
    "Plugin", "FunctionPlugin", "PluginKernel", "Hook", "define_plugin",
    # Dispatch
    "Dispatcher", "IOLoop", "schedule",
    # Logger
    "Logger", "create_logger",
]
