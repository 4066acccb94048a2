"""Stream transport: JSON lines into any writable text stream."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TextIO

from logweave.foundation.errors import ExecutionContext, TransportError

from ..format import format_json
from .base import BaseTransport


class StreamTransport(BaseTransport):
    """Write each entry as one JSON line to ``stream``. Server only.

    Example:
        >>> buf = io.StringIO()
        >>> log = create_logger(transports=[StreamTransport(buf)])
    """

    __slots__ = ("stream", "close_stream", "_closed")

    def __init__(self, stream: TextIO, *, name: str = "stream", close_stream: bool = False) -> None:
        if stream is None:
            raise TransportError("stream is required", name)
        self.name = name
        self.stream = stream
        self.close_stream = close_stream
        self._closed = False

    def write(self, entry: Mapping[str, Any]) -> None:
        if self._closed:
            raise TransportError("stream is closed", self.name, "write")
        self.stream.write(format_json(entry) + "\n")

    def flush(self) -> None:
        if not self._closed:
            self.stream.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.stream.flush()
        if self.close_stream:
            self.stream.close()

    def supports(self, execution_context: ExecutionContext) -> bool:
        return execution_context == "server"
