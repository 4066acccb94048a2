"""The log entry handed to transports."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from typing import Any

from logweave.foundation.errors import JsonDict

RESERVED_KEYS = frozenset({"level", "message"})


class LogEntry(Mapping[str, Any]):
    """Read-only record ``{level, message, time?, ...fields}``.

    Built once per ``log()`` call and shared by every transport, so it offers no
    way to mutate it. Nested values are not copied; treat them as read-only too.

    Example:
        >>> entry = LogEntry({"level": "info", "message": "hello", "user": 7})
        >>> entry.level, entry["user"]
        ('info', 7)
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data: JsonDict = dict(data)

    @property
    def level(self) -> str:
        return self._data["level"]

    @property
    def message(self) -> str:
        return self._data["message"]

    @property
    def time(self) -> int | None:
        """Epoch milliseconds, if the entry was stamped."""
        return self._data.get("time")

    @property
    def fields(self) -> JsonDict:
        """Everything except level, message and time."""
        return {k: v for k, v in self._data.items() if k not in RESERVED_KEYS and k != "time"}

    @property
    def ts_iso(self) -> str | None:
        """ISO formatted timestamp."""
        t = self.time
        return None if t is None else datetime.fromtimestamp(t / 1000, tz=UTC).isoformat()

    def to_dict(self) -> JsonDict:
        """A fresh, mutable copy in wire shape."""
        return dict(self._data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LogEntry):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"LogEntry({self._data!r})"
