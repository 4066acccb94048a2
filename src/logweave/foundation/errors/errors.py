"""Exception hierarchy for the logging engine.

Every error raised by logweave derives from LogError and carries a machine-readable
ErrorCode. Configuration and plugin lifecycle failures propagate to the caller;
transport failures are wrapped in TransportError and only ever travel the dispatcher's
side channel.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import ExecutionContext, PluginPhase, TransportOperation


class ErrorCode(StrEnum):
    """Standard error codes for logging failures."""
    CONFIG_ERROR = "CONFIG_ERROR"
    ENVIRONMENT_ERROR = "ENVIRONMENT_ERROR"
    PLUGIN_ERROR = "PLUGIN_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    WRAPPED_ERROR = "WRAPPED_ERROR"


class LogError(Exception):
    """Base class for all logweave errors."""

    code: ErrorCode = ErrorCode.WRAPPED_ERROR

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ConfigurationError(LogError):
    """Invalid construction option, unknown level name, or bad registration."""

    code = ErrorCode.CONFIG_ERROR

    def __init__(self, message: str, option: str | None = None, *, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)
        self.option = option


class UnsupportedEnvironmentError(ConfigurationError):
    """A transport declared itself incompatible with the execution context."""

    code = ErrorCode.ENVIRONMENT_ERROR

    def __init__(self, message: str, required: ExecutionContext, *, cause: BaseException | None = None) -> None:
        super().__init__(message, "transports", cause=cause)
        self.required = required


class PluginLifecycleError(LogError):
    """A plugin's install, on_init or on_destroy hook failed."""

    code = ErrorCode.PLUGIN_ERROR

    def __init__(self, message: str, plugin_name: str, phase: PluginPhase, *, cause: BaseException | None = None) -> None:
        super().__init__(f"[Plugin: {plugin_name}] {message}", cause=cause)
        self.plugin_name = plugin_name
        self.phase = phase


class PluginTeardownError(PluginLifecycleError):
    """Aggregate of every on_destroy failure seen during one kernel teardown."""

    def __init__(self, failures: Sequence[PluginLifecycleError]) -> None:
        names = ", ".join(f.plugin_name for f in failures)
        super().__init__(f"{len(failures)} plugin(s) failed to tear down: {names}",
                         failures[0].plugin_name if failures else "*", "destroy")
        self.failures: tuple[PluginLifecycleError, ...] = tuple(failures)


class TransportError(LogError):
    """A transport's write, flush or close failed."""

    code = ErrorCode.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        transport_name: str,
        operation: TransportOperation = "write",
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"[Transport: {transport_name}] {message}", cause=cause)
        self.transport_name = transport_name
        self.operation = operation


def ensure_error(value: object) -> BaseException:
    """Normalize anything raised or rejected into an exception instance."""
    match value:
        case BaseException():
            return value
        case str():
            return Exception(value)
        case {"message": str(msg)}:
            return Exception(msg)
        case _:
            return Exception(str(value))


def wrap_transport_error(error: object, transport_name: str, operation: TransportOperation) -> TransportError:
    """Wrap a raw transport failure, keeping TransportErrors as they are."""
    if isinstance(error, TransportError):
        return error
    cause = ensure_error(error)
    return TransportError(f"{operation} failed: {cause}", transport_name, operation, cause=cause)
