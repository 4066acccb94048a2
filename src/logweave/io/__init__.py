"""Output side of logweave: entry formatting, transports and retry backoff."""

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff
from .format import error_dict, format_json, format_pretty, format_time, to_json
from .transports import (
    BaseTransport,
    ConsoleTransport,
    FileTransport,
    HttpTransport,
    MemoryTransport,
    SerialTransport,
    StreamTransport,
    Transport,
)

__all__ = [
    # Formatting
    "format_json", "format_pretty", "format_time", "to_json", "error_dict",
    # Transports
    "Transport", "BaseTransport", "SerialTransport", "ConsoleTransport", "StreamTransport",
    "FileTransport", "HttpTransport", "MemoryTransport",
    # Backoff
    "Backoff", "ExponentialBackoff", "ConstantBackoff",
]
