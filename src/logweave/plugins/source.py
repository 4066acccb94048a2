"""Call-site capture: the file and line of the logging call, added to every entry."""

from __future__ import annotations

import os
import sys
from types import FrameType
from typing import TYPE_CHECKING

import logweave.runtime.logger as _logger_module

from ..foundation.errors import ConfigurationError
from ..runtime.kernel import Plugin

if TYPE_CHECKING:
    from ..runtime.kernel import PluginKernel

# frames in these files belong to the logging machinery, never to the caller
_INTERNAL = frozenset(os.path.normcase(path) for path in (__file__, _logger_module.__file__))


def find_caller(skip: int = 0) -> FrameType | None:
    """The first frame outside logweave's Logger methods, then ``skip`` frames further out."""
    frame: FrameType | None = sys._getframe(1)
    while frame is not None and os.path.normcase(frame.f_code.co_filename) in _INTERNAL:
        frame = frame.f_back
    for _ in range(skip):
        if frame is None:
            break
        frame = frame.f_back
    return frame


class SourcePlugin(Plugin):
    """Add ``file`` and ``line`` of the logging call to each entry.

    ``depth`` skips that many extra frames, for code that logs through its own
    helper functions. Fields passed at the call site win over the captured ones.

    Example:
        >>> log = create_logger(plugins=[SourcePlugin()])
        >>> log.info("ready")   # file="server.py", line=42
    """

    name = "source"

    def __init__(self, depth: int = 0, include_full_path: bool = False) -> None:
        if depth < 0:
            raise ConfigurationError("depth must be >= 0", "depth")
        self.depth = depth
        self.include_full_path = include_full_path

    def locate(self) -> dict[str, object]:
        if (frame := find_caller(self.depth)) is None:
            return {}
        path = frame.f_code.co_filename
        return {"file": path if self.include_full_path else os.path.basename(path), "line": frame.f_lineno}

    def install(self, kernel: PluginKernel) -> None:
        kernel.get_context().set_default("source", self.locate)
