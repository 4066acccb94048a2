"""File transport: JSON lines appended to a file, with size/time based rotation.

Blocking file I/O runs in a worker thread (``asyncio.to_thread``) so the event
loop never stalls; SerialTransport keeps the lines in call order.
"""

from __future__ import annotations

import asyncio
import gzip
import logging
import re
import shutil
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import IO, Any

from pydantic import ByteSize, TypeAdapter, ValidationError

from logweave.foundation.errors import ConfigurationError, ExecutionContext

from ..format import format_json
from .base import SerialTransport

logger = logging.getLogger("logweave.transports")

_BYTE_SIZE = TypeAdapter(ByteSize)


def parse_size(value: int | str) -> int:
    """Bytes from an int or a size string such as "10MB" or "512KiB"."""
    try:
        return int(_BYTE_SIZE.validate_python(value))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid size: {value!r}", "max_size", cause=e) from e


class FileTransport(SerialTransport):
    """Append entries to ``path``; rotate when ``max_size`` or ``rotate_every`` is exceeded.

    Rotated files are renamed ``<stem>.<UTC timestamp><suffix>`` (gzip-compressed
    when ``compress`` is set) and only the newest ``max_files`` are kept.

    Example:
        >>> FileTransport("logs/app.log", max_size="10MB", max_files=7)
    """

    def __init__(
        self,
        path: str | Path,
        *,
        max_size: int | str | None = None,
        rotate_every: float | None = None,
        max_files: int = 5,
        compress: bool = False,
        name: str = "file",
    ) -> None:
        super().__init__(name)
        if max_files < 0:
            raise ConfigurationError("max_files must be >= 0", "max_files")
        if rotate_every is not None and rotate_every <= 0:
            raise ConfigurationError("rotate_every must be positive", "rotate_every")
        self.path = Path(path)
        self.max_size = parse_size(max_size) if max_size is not None else None
        self.rotate_every = rotate_every
        self.max_files = max_files
        self.compress = compress
        self._fh: IO[str] | None = None
        self._size = 0
        self._opened_at = time.monotonic()
        self._rotated_name = re.compile(
            rf"{re.escape(self.path.stem)}\.\d{{8}}T\d{{12}}(-\d+)?{re.escape(self.path.suffix)}(\.gz)?")

    def supports(self, execution_context: ExecutionContext) -> bool:
        return execution_context == "server"

    # ─────────────────────────────────────────────────────────────────
    # SerialTransport hooks
    # ─────────────────────────────────────────────────────────────────

    async def _write(self, entry: Mapping[str, Any]) -> None:
        line = format_json(entry) + "\n"
        await asyncio.to_thread(self._append, line)

    async def _flush(self) -> None:
        if self._fh is not None:
            await asyncio.to_thread(self._fh.flush)

    async def _close(self) -> None:
        if self._fh is not None:
            fh, self._fh = self._fh, None
            await asyncio.to_thread(fh.close)

    # ─────────────────────────────────────────────────────────────────
    # Blocking helpers (worker thread)
    # ─────────────────────────────────────────────────────────────────

    def _append(self, line: str) -> None:
        # open first so a file left over from a previous run counts toward max_size
        self._open()
        if self._should_rotate():
            self._rotate()
        fh = self._open()
        fh.write(line)
        self._size += len(line.encode("utf-8"))

    def _open(self) -> IO[str]:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8")
            self._size = self.path.stat().st_size
            self._opened_at = time.monotonic()
        return self._fh

    def _should_rotate(self) -> bool:
        if self.max_size is not None and self._size >= self.max_size:
            return True
        return self.rotate_every is not None and time.monotonic() - self._opened_at >= self.rotate_every

    def _rotate(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        if not self.path.exists():
            return
        stamp = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S%f")
        rotated = self.path.with_name(f"{self.path.stem}.{stamp}{self.path.suffix}")
        seq = 0
        while rotated.exists() or rotated.with_name(f"{rotated.name}.gz").exists():
            seq += 1
            rotated = self.path.with_name(f"{self.path.stem}.{stamp}-{seq}{self.path.suffix}")
        self.path.rename(rotated)
        if self.compress:
            with rotated.open("rb") as src, gzip.open(f"{rotated}.gz", "wb") as dst:
                shutil.copyfileobj(src, dst)
            rotated.unlink()
        self._size = 0
        self._cleanup()

    def rotated_files(self) -> list[Path]:
        """Files this transport rotated out of ``path``, newest first. Other siblings are never matched."""
        if not self.path.parent.is_dir():
            return []
        files = [
            p for p in self.path.parent.iterdir()
            if self._rotated_name.fullmatch(p.name) and p.is_file()
        ]
        return sorted(files, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)

    def _cleanup(self) -> None:
        for stale in self.rotated_files()[self.max_files:]:
            logger.debug("removing rotated log file %s", stale)
            stale.unlink(missing_ok=True)
