"""Console transport: one line per entry on stdout, errors on stderr."""

from __future__ import annotations

import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, TextIO

from logweave.foundation.env import should_use_colors

from ..format import format_json, format_pretty
from .base import BaseTransport

_STDERR_LEVELS = frozenset({"error", "fatal"})


@dataclass(slots=True, repr=False)
class ConsoleTransport(BaseTransport):
    """Human-readable or JSON console output. Works in server and client contexts.

    Args: format ("pretty" | "json"), colors (None = auto-detect), timestamp,
    stream / err_stream (None = the current sys.stdout / sys.stderr)
    """

    format: Literal["pretty", "json"] = "json"
    colors: bool | None = None
    timestamp: bool = True
    stream: TextIO | None = None
    err_stream: TextIO | None = None
    name: str = "console"

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = self.format == "pretty" and should_use_colors(self.stream)

    def write(self, entry: Mapping[str, Any]) -> None:
        if self.format == "pretty":
            line = format_pretty(entry, colors=bool(self.colors), timestamp=self.timestamp)
        else:
            line = format_json(entry)
        if entry.get("level") in _STDERR_LEVELS:
            out = self.err_stream or sys.stderr
        else:
            out = self.stream or sys.stdout
        print(line, file=out)

    def flush(self) -> None:
        for out in (self.stream or sys.stdout, self.err_stream or sys.stderr):
            out.flush()
