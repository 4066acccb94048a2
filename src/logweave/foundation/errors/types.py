"""Shared type aliases and the transport failure record.

TransportFailure is the payload of the dispatcher's side channel. It is a frozen
Pydantic model so listeners and flush/close summaries get a validated, immutable view.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

# ═══════════════════════════════════════════════════════════════════════════════
# Type Aliases
# ═══════════════════════════════════════════════════════════════════════════════

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]  # Any for recursive slots
JsonDict = dict[str, Any]

ExecutionContext = Literal["server", "client"]
Format = Literal["json", "pretty", "auto"]
TransportOperation = Literal["write", "flush", "close"]
PluginPhase = Literal["install", "init", "destroy"]


# ═══════════════════════════════════════════════════════════════════════════════
# Side-channel payload
# ═══════════════════════════════════════════════════════════════════════════════


class TransportFailure(BaseModel):
    """One failed transport operation, as reported on the ``error`` event."""

    model_config = ConfigDict(
        frozen=True, arbitrary_types_allowed=True, extra="forbid",
        json_schema_extra={"title": "Transport Failure"},
    )

    transport: Annotated[str, Field(min_length=1)]
    operation: TransportOperation
    error: Exception
    entry: Any = Field(default=None, repr=False)

    @computed_field
    @property
    def message(self) -> str:
        return str(self.error)

    def __str__(self) -> str:
        return f"{self.transport}.{self.operation}: {self.error}"
