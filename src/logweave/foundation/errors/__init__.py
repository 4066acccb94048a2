"""Unified error handling for logweave.

- ErrorCode: machine-readable error classification
- LogError and subclasses: configuration, plugin lifecycle and transport failures
- TransportFailure: side-channel payload for isolated transport failures
- JSON type aliases shared across the package
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    LogError,
    PluginLifecycleError,
    PluginTeardownError,
    TransportError,
    UnsupportedEnvironmentError,
    ensure_error,
    wrap_transport_error,
)
from .types import (
    ExecutionContext,
    Format,
    JsonDict,
    JsonPrimitive,
    JsonValue,
    PluginPhase,
    TransportFailure,
    TransportOperation,
)

__all__ = [
    # Errors
    "ErrorCode", "LogError", "ConfigurationError", "UnsupportedEnvironmentError",
    "PluginLifecycleError", "PluginTeardownError", "TransportError",
    "ensure_error", "wrap_transport_error",
    # Side channel
    "TransportFailure",
    # Type aliases
    "JsonDict", "JsonPrimitive", "JsonValue", "ExecutionContext", "Format",
    "PluginPhase", "TransportOperation",
]
