"""Correlation ids for tracing a request across log lines."""

from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING, Callable

from ..runtime.kernel import Plugin

if TYPE_CHECKING:
    from ..runtime.kernel import PluginKernel


def generate_correlation_id(prefix: str = "cid") -> str:
    """``<prefix>_<epoch ms hex><8 random hex chars>``, e.g. ``cid_19a2b3c4d5e6f01a2b3c4``."""
    return f"{prefix}_{time.time_ns() // 1_000_000:x}{secrets.token_hex(4)}"


class CorrelationPlugin(Plugin):
    """Provide the id factory used by ``Logger.with_correlation()`` when no id is given.

    Example:
        >>> log = create_logger(plugins=[CorrelationPlugin(prefix="req")])
        >>> log.with_correlation().info("handled")   # correlation_id="req_..."
    """

    name = "correlation"

    def __init__(self, prefix: str = "cid", generator: Callable[[], str] | None = None) -> None:
        self.prefix = prefix
        self.generator = generator

    def new_id(self) -> str:
        return self.generator() if self.generator is not None else generate_correlation_id(self.prefix)

    def install(self, kernel: PluginKernel) -> None:
        kernel.get_context().set_default("correlation_factory", self.new_id)
