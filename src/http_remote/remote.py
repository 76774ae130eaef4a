"""Remote facade.

A remote is a configured transport endpoint: a URL, a request/response
middleware pair and the table of in-flight requests used for cancellation.
``Remote`` is the capability protocol callers program against;
``HttpRemote`` sends over HTTP and ``MockRemote`` answers locally.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from http_remote.exceptions import RequestMiddlewareError
from http_remote.lifecycle import (
    CompleteCallback,
    ErrorCallback,
    RequestLifecycle,
    UpdateCallback,
)
from http_remote.middleware import (
    RequestMiddleware,
    ResponseMiddleware,
    default_request_middleware,
    default_response_middleware,
)
from http_remote.models import (
    BehaviorFlags,
    ErrorCode,
    ErrorKind,
    OutgoingRequest,
    ProgressPhase,
    ProgressUpdate,
    WireRequest,
    WireResponse,
)
from http_remote.tracker import RequestTracker
from http_remote.transport.base import TransportPrimitive
from http_remote.transport.http import HttpxTransport

logger = structlog.get_logger()

DEFAULT_URL = "/api"

TransportFactory = Callable[[], TransportPrimitive]


class Remote(Protocol):
    """Capability interface shared by every remote variant."""

    def transmit(
        self,
        request: OutgoingRequest | Mapping[str, Any],
        on_complete: CompleteCallback,
        on_error: ErrorCallback,
        on_update: UpdateCallback | None = None,
    ) -> None:
        """Send ``request``; the outcome arrives through exactly one callback."""
        ...

    def cancel(self, abort_id: Hashable) -> None:
        """Abort every in-flight request registered under ``abort_id``."""
        ...

    def behavior_flags(self) -> BehaviorFlags:
        """Return the declarative hints for callers of this remote."""
        ...


def _as_outgoing(request: OutgoingRequest | Mapping[str, Any]) -> OutgoingRequest:
    if isinstance(request, OutgoingRequest):
        return request
    return OutgoingRequest.model_validate(request)


class HttpRemote:
    """Remote that sends requests over HTTP.

    Args:
        url: Endpoint URL, absolute or relative to the client's base URL
            (default: "/api")
        request_middleware: Base request -> wire request (default: encode body)
        response_middleware: Raw response -> normalized response
            (default: decode body)
        transport_factory: Creates one transport primitive per request
            (default: ``HttpxTransport`` over ``client``)
        serial: Advertised ``serial`` behaviour flag (default: True)
        client: Async HTTP client for the default transport factory; created
            lazily and owned by the remote when omitted

    Example:
        >>> async with HttpRemote("http://localhost:8001/api") as remote:
        ...     remote.transmit(
        ...         {"payload": {"op": "ping"}, "abort_id": "ping"},
        ...         on_complete=lambda response: print(response.body),
        ...         on_error=lambda kind, detail: print(kind, detail),
        ...     )
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        request_middleware: RequestMiddleware | None = None,
        response_middleware: ResponseMiddleware | None = None,
        transport_factory: TransportFactory | None = None,
        serial: bool = True,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not url:
            raise ValueError("url cannot be empty")

        self.url = url
        self.request_middleware = request_middleware or default_request_middleware
        self.response_middleware = response_middleware or default_response_middleware
        self.serial = serial
        self._transport_factory = transport_factory or self._httpx_transport
        self._client = client
        self._owns_client = client is None
        self._tracker = RequestTracker()

    def transmit(
        self,
        request: OutgoingRequest | Mapping[str, Any],
        on_complete: CompleteCallback,
        on_error: ErrorCallback,
        on_update: UpdateCallback | None = None,
    ) -> None:
        """Send one request.

        Failures are reported through ``on_error`` and never raised:
            - MIDDLEWARE_FAILED: request middleware raised or returned a
              malformed request; nothing is sent
            - MIDDLEWARE_ABORTED: response middleware raised
            - NETWORK_FAILED: the transport reported an error or was cancelled

        Args:
            request: ``OutgoingRequest`` or mapping with ``payload`` and
                optional ``abort_id``
            on_complete: Receives the normalized ``WireResponse``
            on_error: Receives ``(ErrorKind, detail)``
            on_update: Optional progress callback
        """
        outgoing = _as_outgoing(request)
        base = WireRequest(url=self.url, method="POST", headers={}, body=outgoing.payload)

        try:
            wire_request = self._apply_request_middleware(base)
        except RequestMiddlewareError as e:
            logger.error("request_middleware_failed", url=self.url, error=str(e))
            on_error(ErrorKind.MIDDLEWARE_FAILED, e)
            return

        try:
            transport = self._transport_factory()
        except Exception as e:
            logger.error("transport_create_failed", url=wire_request.url, error=str(e))
            on_error(
                ErrorKind.NETWORK_FAILED,
                WireResponse(
                    original_payload=outgoing.payload,
                    outgoing_request=wire_request,
                    error_code=ErrorCode.EXCEPTION,
                    error_text=str(e),
                ),
            )
            return

        logger.debug(
            "remote_request_sent",
            url=wire_request.url,
            method=wire_request.method,
            abort_id=outgoing.abort_id,
        )
        RequestLifecycle(
            request=outgoing,
            wire_request=wire_request,
            transport=transport,
            tracker=self._tracker,
            response_middleware=self.response_middleware,
            on_complete=on_complete,
            on_error=on_error,
            on_update=on_update,
        ).start()

    def cancel(self, abort_id: Hashable) -> None:
        self._tracker.cancel_all(abort_id)

    def behavior_flags(self) -> BehaviorFlags:
        return BehaviorFlags(serial=self.serial)

    def is_tracking(self, abort_id: Hashable) -> bool:
        """Whether any request registered under ``abort_id`` is in flight."""
        return self._tracker.is_tracking(abort_id)

    def in_flight(self, abort_id: Hashable) -> frozenset[TransportPrimitive]:
        return self._tracker.handles(abort_id)

    def _apply_request_middleware(self, base: WireRequest) -> WireRequest:
        try:
            result = self.request_middleware(base)
        except Exception as e:
            raise RequestMiddlewareError(str(e), cause=e) from e

        if isinstance(result, WireRequest):
            return result
        try:
            return WireRequest.model_validate(result)
        except ValidationError as e:
            raise RequestMiddlewareError(
                "Request middleware returned a malformed request",
                cause=e,
                output=result,
            ) from e

    def _httpx_transport(self) -> HttpxTransport:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return HttpxTransport(self._client)

    async def aclose(self) -> None:
        """Close the HTTP client if this remote created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpRemote:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()


def create_remote(
    url: str = DEFAULT_URL,
    request_middleware: RequestMiddleware | None = None,
    response_middleware: ResponseMiddleware | None = None,
    **options: Any,
) -> HttpRemote:
    """Create an HTTP remote.

    Args:
        url: Endpoint URL (default: "/api")
        request_middleware: Request middleware (default: encode body)
        response_middleware: Response middleware (default: decode body)
        **options: ``transport_factory``, ``serial`` or ``client``

    Returns:
        Configured ``HttpRemote``
    """
    return HttpRemote(
        url=url,
        request_middleware=request_middleware,
        response_middleware=response_middleware,
        **options,
    )


class MockRemote:
    """Remote that answers locally without any transport.

    Every transmitted request is recorded. ``handler`` maps the payload to a
    response body; an exception from it is reported as ``NETWORK_FAILED``
    with code ``exception``. Without a handler every request completes with
    a ``None`` body. Requests complete synchronously, so ``cancel`` has
    nothing to abort.

    Args:
        handler: Payload -> response body
        serial: Advertised ``serial`` behaviour flag (default: True)
    """

    def __init__(
        self,
        handler: Callable[[Any], Any] | None = None,
        serial: bool = True,
    ) -> None:
        self.handler = handler
        self.serial = serial
        self.transmitted: list[OutgoingRequest] = []

    def transmit(
        self,
        request: OutgoingRequest | Mapping[str, Any],
        on_complete: CompleteCallback,
        on_error: ErrorCallback,
        on_update: UpdateCallback | None = None,
    ) -> None:
        outgoing = _as_outgoing(request)
        self.transmitted.append(outgoing)
        if on_update is not None:
            on_update(ProgressUpdate(progress=ProgressPhase.SENDING))

        try:
            body = self.handler(outgoing.payload) if self.handler else None
        except Exception as e:
            if on_update is not None:
                on_update(ProgressUpdate(progress=ProgressPhase.FAILED))
            on_error(
                ErrorKind.NETWORK_FAILED,
                WireResponse(
                    original_payload=outgoing.payload,
                    error_code=ErrorCode.EXCEPTION,
                    error_text=str(e),
                ),
            )
            return

        if on_update is not None:
            on_update(ProgressUpdate(progress=ProgressPhase.COMPLETE))
        on_complete(
            WireResponse(
                original_payload=outgoing.payload,
                body=body,
                status_code=200,
                status_text="OK",
            )
        )

    def cancel(self, abort_id: Hashable) -> None:
        pass

    def behavior_flags(self) -> BehaviorFlags:
        return BehaviorFlags(serial=self.serial)
