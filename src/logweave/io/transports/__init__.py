"""Log output destinations.

- Transport: the protocol the dispatcher accepts
- BaseTransport / SerialTransport: bases for synchronous and ordered async transports
- ConsoleTransport, StreamTransport, FileTransport, HttpTransport, MemoryTransport
"""

from .base import BaseTransport, SerialTransport, Transport
from .console import ConsoleTransport
from .file import FileTransport, parse_size
from .http import HttpTransport
from .memory import MemoryTransport
from .stream import StreamTransport

__all__ = [
    "Transport", "BaseTransport", "SerialTransport",
    "ConsoleTransport", "StreamTransport", "FileTransport", "HttpTransport", "MemoryTransport",
    "parse_size",
]
