"""Execution environment detection.

Used only to choose defaults for transports and formatters; dispatch logic never
branches on these.

The "client" context is Python hosted in a browser (Pyodide / Emscripten) or a WASI
runtime, where there is no real filesystem or subprocess access.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO

from .config import get_settings
from .errors import ExecutionContext

_CLIENT_PLATFORMS = frozenset({"emscripten", "wasi"})


def detect_execution_context() -> ExecutionContext:
    """'client' under browser/WASI hosted interpreters, 'server' otherwise."""
    return "client" if sys.platform in _CLIENT_PLATFORMS else "server"


def is_client() -> bool:
    return detect_execution_context() == "client"


def is_tty(stream: TextIO | None = None) -> bool:
    """Whether the stream (stdout by default) is attached to a terminal."""
    stream = stream if stream is not None else sys.stdout
    return bool(getattr(stream, "isatty", lambda: False)())


def is_development() -> bool:
    """True unless the settings environment (LOGWEAVE_ENVIRONMENT, else PYTHON_ENV) is production."""
    return get_settings().is_development


def should_use_colors(stream: TextIO | None = None) -> bool:
    """Color support: NO_COLOR disables, FORCE_COLOR and CI enable, else TTY detection."""
    if is_client():
        return False
    if "NO_COLOR" in os.environ:
        return False
    if "FORCE_COLOR" in os.environ or "CI" in os.environ:
        return True
    return is_tty(stream)


def detect_format() -> str:
    """'pretty' for an interactive development terminal, 'json' otherwise."""
    return "pretty" if is_development() and is_tty() else "json"
