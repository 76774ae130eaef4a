"""HTTP transport primitive built on ``httpx.AsyncClient``.

Each ``HttpxTransport`` performs one exchange as an ``asyncio`` task on the
running event loop and reports its outcome through signals. It translates
``httpx`` failures into ``TransportErrorCode`` values instead of raising, and
has NO knowledge of middleware or request tracking.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any
import asyncio

import httpx
import structlog

from http_remote.transport.base import (
    ProgressEvent,
    Signal,
    SignalEmitter,
    TransportErrorCode,
)
from http_remote.transport.exceptions import TransportStateError

logger = structlog.get_logger()

DEFAULT_CHUNK_SIZE = 64 * 1024


class HttpxTransport(SignalEmitter):
    """Single-use HTTP transport primitive.

    The primitive does not own the ``httpx.AsyncClient``; connection pooling
    is shared by every primitive created from the same client.

    Features:
        - Upload progress by streaming the body in chunks
        - Download progress while reading the response stream
        - Synchronous abort that emits ``error`` then ``complete``
        - Status codes >= 400 reported as ``HTTP_ERROR``

    Args:
        client: Shared async HTTP client
        chunk_size: Chunk size in bytes for progress reporting (default: 64 KiB)

    Example:
        >>> async with httpx.AsyncClient(base_url="http://localhost:8001") as client:
        ...     transport = HttpxTransport(client)
        ...     transport.listen(Signal.SUCCESS, lambda _: print(transport.response_text()))
        ...     transport.send("/api", "POST", b"{}", {})
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        super().__init__()
        self.client = client
        self.chunk_size = chunk_size
        self._progress_enabled = False
        self._task: asyncio.Task[None] | None = None
        self._terminal = False
        self._disposed = False

        self._response_text = ""
        self._status_code = 0
        self._status_text = ""
        self._error_code = TransportErrorCode.NONE
        self._error_text = ""

    def enable_progress_events(self) -> None:
        self._progress_enabled = True

    def send(
        self,
        url: str,
        method: str,
        body: bytes | str | None,
        headers: dict[str, str],
    ) -> None:
        """Schedule the exchange on the running event loop.

        Raises:
            TransportStateError: If the primitive was already sent or disposed
            RuntimeError: If no event loop is running
        """
        if self._disposed:
            raise TransportStateError("Transport already disposed")
        if self._task is not None:
            raise TransportStateError("Transport already sent")

        content = body.encode("utf-8") if isinstance(body, str) else body
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._exchange(url, method, content, dict(headers)))

    def abort(self) -> None:
        if self._task is None or self._terminal:
            return

        logger.debug("transport_aborted")
        task = self._task
        self._fail(TransportErrorCode.ABORT, "Request aborted")
        task.cancel()

    def dispose(self) -> None:
        if self._disposed:
            return

        self._disposed = True
        self._clear_listeners()
        if self._task is not None and not self._terminal:
            self._terminal = True
            self._task.cancel()

    def response_text(self) -> str:
        return self._response_text

    def status_code(self) -> int:
        return self._status_code

    def status_text(self) -> str:
        return self._status_text

    def last_error_code(self) -> int:
        return int(self._error_code)

    def last_error_text(self) -> str:
        return self._error_text

    async def _exchange(
        self,
        url: str,
        method: str,
        content: bytes | None,
        headers: dict[str, str],
    ) -> None:
        request_content: bytes | AsyncIterator[bytes] | None = content
        if self._progress_enabled and content:
            headers.setdefault("Content-Length", str(len(content)))
            request_content = self._upload_stream(content)

        try:
            request = self.client.build_request(
                method,
                url,
                content=request_content,
                headers=headers,
            )
            response = await self.client.send(request, stream=True)
            try:
                payload = await self._read_body(response)
            finally:
                await response.aclose()

        except asyncio.CancelledError:
            if self._terminal:
                return
            raise

        except httpx.TimeoutException as e:
            self._fail(TransportErrorCode.TIMEOUT, f"Request timed out: {e}")
            return

        except httpx.HTTPError as e:
            self._fail(TransportErrorCode.EXCEPTION, f"Transport error: {e}")
            return

        except Exception as e:
            logger.warning("transport_exchange_failed", url=url, error=str(e))
            self._fail(TransportErrorCode.EXCEPTION, f"Transport error: {e}")
            return

        if self._terminal:
            return

        self._status_code = response.status_code
        self._status_text = response.reason_phrase
        self._response_text = payload.decode(response.encoding or "utf-8", errors="replace")

        if response.status_code >= 400:
            self._fail(
                TransportErrorCode.HTTP_ERROR,
                f"HTTP {response.status_code}: {response.reason_phrase}",
            )
            return

        self._terminal = True
        self._emit(Signal.SUCCESS)
        self._emit(Signal.COMPLETE)

    async def _upload_stream(self, content: bytes) -> AsyncIterator[bytes]:
        total = len(content)
        for offset in range(0, total, self.chunk_size):
            chunk = content[offset : offset + self.chunk_size]
            yield chunk
            if not self._terminal:
                self._emit(
                    Signal.UPLOAD_PROGRESS,
                    ProgressEvent(loaded=offset + len(chunk), total=total),
                )

    async def _read_body(self, response: httpx.Response) -> bytes:
        total = _content_length(response)
        loaded = 0
        chunks: list[bytes] = []
        async for chunk in response.aiter_bytes(self.chunk_size):
            chunks.append(chunk)
            loaded += len(chunk)
            if self._progress_enabled and not self._terminal:
                self._emit(Signal.DOWNLOAD_PROGRESS, ProgressEvent(loaded=loaded, total=total))
        return b"".join(chunks)

    def _fail(self, code: TransportErrorCode, text: str) -> None:
        if self._terminal:
            return

        self._terminal = True
        self._error_code = code
        self._error_text = text
        self._emit(Signal.ERROR)
        self._emit(Signal.COMPLETE)


def _content_length(response: httpx.Response) -> int | None:
    value: Any = response.headers.get("Content-Length")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None
