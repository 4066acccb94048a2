"""HTTP transport: batched JSON delivery with retry. Requires: pip install logweave[http]"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

from logweave.foundation.errors import ConfigurationError, ExecutionContext, TransportError, TransportOperation

from ..backoff import Backoff, ExponentialBackoff
from ..format import to_json
from .base import SerialTransport

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger("logweave.transports")

HttpMethod = Literal["POST", "PUT", "PATCH"]


def _require_httpx() -> Any:
    try:
        import httpx
    except ImportError as e:
        raise ImportError("HttpTransport requires: pip install logweave[http]") from e
    return httpx


class HttpTransport(SerialTransport):
    """Buffer entries and send them as a JSON array.

    A batch is sent when ``batch`` entries are buffered, every ``interval``
    seconds while an event loop is running, and on flush/close. Each send is
    attempted ``retry + 1`` times, pausing per ``backoff`` between attempts. A
    batch that still fails goes back to the front of the buffer, which keeps at
    most ``2 * batch`` entries, and the failure is raised as TransportError.

    Example:
        >>> HttpTransport("https://logs.example.com/ingest", headers={"X-API-Key": "..."})
    """

    def __init__(
        self,
        url: str,
        *,
        method: HttpMethod = "POST",
        headers: Mapping[str, str] | None = None,
        batch: int = 100,
        interval: float = 5.0,
        retry: int = 3,
        backoff: Backoff | None = None,
        timeout: float = 10.0,
        client_transport: httpx.AsyncBaseTransport | None = None,
        name: str = "http",
    ) -> None:
        if not url:
            raise ConfigurationError("URL is required", "url")
        if batch < 1:
            raise ConfigurationError("batch must be >= 1", "batch")
        if retry < 0:
            raise ConfigurationError("retry must be >= 0", "retry")
        self._httpx = _require_httpx()
        super().__init__(name)
        self.url = url
        self.method = method
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self.batch = batch
        self.interval = interval
        self.retry = retry
        self.backoff: Backoff = backoff or ExponentialBackoff()
        self.timeout = timeout
        self._client_transport = client_transport
        self._buffer: list[dict[str, Any]] = []
        self._ticker: asyncio.Task[None] | None = None

    @property
    def buffered(self) -> int:
        """Entries waiting to be sent."""
        return len(self._buffer)

    def supports(self, execution_context: ExecutionContext) -> bool:
        return execution_context == "server"

    async def close(self) -> None:
        if self._ticker is not None and not self._ticker.done():
            self._ticker.cancel()
        self._ticker = None
        await super().close()

    # ─────────────────────────────────────────────────────────────────
    # SerialTransport hooks
    # ─────────────────────────────────────────────────────────────────

    async def _write(self, entry: Mapping[str, Any]) -> None:
        self._ensure_ticker()
        self._buffer.append(dict(entry))
        if len(self._buffer) >= self.batch:
            await self._send_buffer("write")

    async def _flush(self) -> None:
        await self._send_buffer("flush")

    # ─────────────────────────────────────────────────────────────────
    # Delivery
    # ─────────────────────────────────────────────────────────────────

    def _ensure_ticker(self) -> None:
        if self.interval <= 0:
            return
        loop = asyncio.get_running_loop()
        if self._ticker is None or self._ticker.done() or self._ticker.get_loop() is not loop:
            self._ticker = loop.create_task(self._tick(), name=f"logweave-{self.name}-interval")

    async def _tick(self) -> None:
        while not self.closed:
            await asyncio.sleep(self.interval)
            try:
                await self.flush()
            except TransportError as e:
                logger.warning("interval flush failed: %s", e)

    async def _send_buffer(self, operation: TransportOperation) -> None:
        if not self._buffer:
            return
        entries, self._buffer = self._buffer, []
        try:
            await self._send_with_retry(entries, operation)
        except (TransportError, asyncio.CancelledError):
            self._buffer = (entries + self._buffer)[: self.batch * 2]
            raise

    async def _send_with_retry(self, entries: list[dict[str, Any]], operation: TransportOperation) -> None:
        body = to_json(entries)
        last: Exception | None = None
        for attempt in range(self.retry + 1):
            try:
                await self._post(body)
                return
            except self._httpx.HTTPError as e:
                last = e
                logger.debug("send attempt %d to %s failed: %s", attempt + 1, self.url, e)
                if attempt < self.retry:
                    await asyncio.sleep(self.backoff.delay(attempt))
        raise TransportError(
            f"Failed to send logs after {self.retry + 1} attempts: {last}", self.name, operation, cause=last,
        )

    async def _post(self, body: bytes) -> None:
        async with self._httpx.AsyncClient(transport=self._client_transport, timeout=self.timeout) as client:
            response = await client.request(self.method, self.url, content=body, headers=self.headers)
            response.raise_for_status()
