"""Awaitable client over the callback-based remote contract."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any
import asyncio

import structlog

from http_remote.exceptions import NetworkError, RemoteError
from http_remote.lifecycle import UpdateCallback
from http_remote.models import ErrorKind, OutgoingRequest, WireResponse
from http_remote.remote import Remote

logger = structlog.get_logger()


class RemoteClient:
    """Send requests through a ``Remote`` and await their outcome.

    Translates the error callback into typed exceptions:
    - NETWORK_FAILED -> NetworkError (``.response`` carries the details)
    - MIDDLEWARE_FAILED -> RequestMiddlewareError
    - MIDDLEWARE_ABORTED -> ResponseMiddlewareError

    Args:
        remote: Remote used for every request

    Example:
        >>> client = RemoteClient(create_remote("http://localhost:8001/api"))
        >>> response = await client.send({"op": "ping"})
        >>> print(response.body)
        'pong'
    """

    def __init__(self, remote: Remote) -> None:
        self.remote = remote

    async def send(
        self,
        payload: Any,
        abort_id: Hashable | None = None,
        on_progress: UpdateCallback | None = None,
    ) -> WireResponse:
        """Transmit ``payload`` and wait for the normalized response.

        Args:
            payload: Application transaction
            abort_id: Optional identity for ``cancel``
            on_progress: Optional progress callback

        Returns:
            Normalized response

        Raises:
            NetworkError: Transport failure or cancellation
            RequestMiddlewareError: Request middleware failed; nothing sent
            ResponseMiddlewareError: Response middleware failed
        """
        future: asyncio.Future[WireResponse] = asyncio.get_running_loop().create_future()

        def on_complete(response: WireResponse) -> None:
            if not future.done():
                future.set_result(response)

        def on_error(kind: ErrorKind, detail: Any) -> None:
            if not future.done():
                future.set_exception(_as_exception(kind, detail))

        self.remote.transmit(
            OutgoingRequest(payload=payload, abort_id=abort_id),
            on_complete,
            on_error,
            on_progress,
        )
        return await future

    def cancel(self, abort_id: Hashable) -> None:
        self.remote.cancel(abort_id)


def _as_exception(kind: ErrorKind, detail: Any) -> Exception:
    if isinstance(detail, RemoteError):
        return detail
    if isinstance(detail, WireResponse):
        return NetworkError(detail)

    logger.warning("unexpected_error_detail", kind=kind.value, detail_type=type(detail).__name__)
    return RemoteError(f"{kind.value}: {detail}")
