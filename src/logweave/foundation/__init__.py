"""Foundation layer: errors, levels, configuration and environment detection."""

from .config import LogweaveSettings, clear_settings_cache, get_settings
from .env import detect_execution_context, detect_format, is_development, is_tty, should_use_colors
from .errors import (
    ConfigurationError,
    ErrorCode,
    ExecutionContext,
    Format,
    JsonDict,
    JsonValue,
    LogError,
    PluginLifecycleError,
    PluginTeardownError,
    TransportError,
    TransportFailure,
    UnsupportedEnvironmentError,
    ensure_error,
)
from .levels import DEFAULT_LEVEL, Level, LevelLike, LevelRegistry

__all__ = [
    # Errors
    "ErrorCode", "LogError", "ConfigurationError", "UnsupportedEnvironmentError",
    "PluginLifecycleError", "PluginTeardownError", "TransportError", "TransportFailure",
    "ensure_error",
    # Types
    "JsonDict", "JsonValue", "ExecutionContext", "Format",
    # Levels
    "Level", "LevelLike", "LevelRegistry", "DEFAULT_LEVEL",
    # Config
    "LogweaveSettings", "get_settings", "clear_settings_cache",
    # Environment
    "detect_execution_context", "detect_format", "is_development", "is_tty", "should_use_colors",
]
