"""In-memory transport for tests and inspection."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from logweave.foundation.errors import ExecutionContext, TransportError

from .base import BaseTransport


@dataclass(slots=True, repr=False)
class MemoryTransport(BaseTransport):
    """Record every entry written, in order.

    Example:
        >>> mem = MemoryTransport()
        >>> log = create_logger(transports=[mem])
        >>> log.info("hi"); mem.messages()
        ['hi']
    """

    name: str = "memory"
    environments: frozenset[ExecutionContext] = frozenset({"server", "client"})
    entries: list[dict[str, Any]] = field(default_factory=list)
    flushes: int = 0
    closed: bool = False

    def write(self, entry: Mapping[str, Any]) -> None:
        if self.closed:
            raise TransportError("transport is closed", self.name, "write")
        self.entries.append(dict(entry))

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True

    def supports(self, execution_context: ExecutionContext) -> bool:
        return execution_context in self.environments

    def messages(self) -> list[str]:
        return [e.get("message", "") for e in self.entries]

    def levels(self) -> list[str]:
        return [e.get("level", "") for e in self.entries]

    def clear(self) -> None:
        self.entries.clear()
