"""Lifecycle of a single transmitted request.

``RequestLifecycle`` wires a transport primitive's signals to the caller's
callbacks, classifies the outcome and guarantees cleanup. It owns the
primitive for the duration of the call.

Guarantees:
    - Cleanup (untrack + dispose) runs exactly once, before any callback
    - Exactly one of ``on_complete`` / ``on_error`` fires
    - Progress updates, when requested, start with ``sending`` and end with
      ``complete`` or ``failed``
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from http_remote.exceptions import ResponseMiddlewareError
from http_remote.middleware import ResponseMiddleware
from http_remote.models import (
    ErrorCode,
    ErrorKind,
    OutgoingRequest,
    ProgressPhase,
    ProgressUpdate,
    WireRequest,
    WireResponse,
    classify_error_code,
)
from http_remote.tracker import RequestTracker
from http_remote.transport.base import Signal, TransportErrorCode, TransportPrimitive

logger = structlog.get_logger()

CompleteCallback = Callable[[WireResponse], None]
ErrorCallback = Callable[[ErrorKind, Any], None]
UpdateCallback = Callable[[ProgressUpdate], None]


class RequestLifecycle:
    """Orchestrates one request from send to cleanup.

    Args:
        request: Caller's outgoing request
        wire_request: Request produced by request middleware
        transport: Fresh transport primitive owned by this lifecycle
        tracker: Tracker used for cancellation lookups
        response_middleware: Applied once to a successful response
        on_complete: Receives the normalized response
        on_error: Receives ``(ErrorKind, detail)``
        on_update: Optional progress callback; when omitted the transport's
            progress events are never enabled
    """

    def __init__(
        self,
        request: OutgoingRequest,
        wire_request: WireRequest,
        transport: TransportPrimitive,
        tracker: RequestTracker,
        response_middleware: ResponseMiddleware,
        on_complete: CompleteCallback,
        on_error: ErrorCallback,
        on_update: UpdateCallback | None = None,
    ) -> None:
        self.request = request
        self.wire_request = wire_request
        self.transport = transport
        self.tracker = tracker
        self.response_middleware = response_middleware
        self.on_complete = on_complete
        self.on_error = on_error
        self.on_update = on_update
        self._finished = False
        self._cleaned_up = False

    def start(self) -> None:
        """Subscribe to the transport, register for cancellation and send."""
        transport = self.transport

        if self.on_update is not None:
            transport.enable_progress_events()
            transport.listen(Signal.UPLOAD_PROGRESS, self._on_upload_progress)
            transport.listen(Signal.DOWNLOAD_PROGRESS, self._on_download_progress)

        transport.listen(Signal.SUCCESS, self._on_success)
        transport.listen(Signal.ERROR, self._on_error)
        transport.listen(Signal.COMPLETE, self._on_complete)

        try:
            self._update(ProgressPhase.SENDING)
        except Exception:
            # Nothing tracked or sent yet.
            self._finished = True
            self._cleanup()
            raise
        self.tracker.track(self.request.abort_id, transport)

        request = self.wire_request
        try:
            transport.send(request.url, request.method, request.body, request.headers)
        except Exception as e:
            logger.error("transport_send_failed", url=request.url, error=str(e))
            if self._finished:
                return
            self._finished = True
            response = self._snapshot().model_copy(
                update={"error_code": ErrorCode.EXCEPTION, "error_text": str(e)}
            )
            self._cleanup()
            self._update(ProgressPhase.FAILED)
            self.on_error(ErrorKind.NETWORK_FAILED, response)

    def _on_upload_progress(self, event: Any) -> None:
        if not self._finished:
            self._update(ProgressPhase.SENDING, event)

    def _on_download_progress(self, event: Any) -> None:
        if not self._finished:
            self._update(ProgressPhase.RECEIVING, event)

    def _on_complete(self, event: Any) -> None:
        # Primitives that signal complete before success/error still get
        # exactly one outcome.
        if not self._finished:
            if self.transport.last_error_code() == TransportErrorCode.NONE:
                self._on_success(event)
            else:
                self._on_error(event)
        self._cleanup()

    def _on_success(self, event: Any) -> None:
        if self._finished:
            return
        self._finished = True

        raw = self._snapshot()
        self._cleanup()

        try:
            response = self.response_middleware(raw)
            if not isinstance(response, WireResponse):
                response = WireResponse.model_validate(response)
        except Exception as e:
            logger.error(
                "response_middleware_failed",
                url=self.wire_request.url,
                status_code=raw.status_code,
                error=str(e),
            )
            self._update(ProgressPhase.FAILED)
            self.on_error(
                ErrorKind.MIDDLEWARE_ABORTED,
                ResponseMiddlewareError(str(e), response=raw, cause=e),
            )
            return

        self._update(ProgressPhase.COMPLETE)
        self.on_complete(response)

    def _on_error(self, event: Any) -> None:
        if self._finished:
            return
        self._finished = True

        response = self._snapshot()
        self._cleanup()

        logger.debug(
            "remote_request_failed",
            url=self.wire_request.url,
            abort_id=self.request.abort_id,
            error_code=response.error_code.value,
            status_code=response.status_code,
        )
        self._update(ProgressPhase.FAILED)
        self.on_error(ErrorKind.NETWORK_FAILED, response)

    def _snapshot(self) -> WireResponse:
        transport = self.transport
        return WireResponse(
            original_payload=self.request.payload,
            outgoing_request=self.wire_request,
            body=transport.response_text(),
            status_code=transport.status_code(),
            status_text=transport.status_text(),
            error_code=classify_error_code(transport.last_error_code()),
            error_text=transport.last_error_text(),
        )

    def _cleanup(self) -> None:
        if self._cleaned_up:
            return
        self._cleaned_up = True
        self.tracker.untrack(self.request.abort_id, self.transport)
        self.transport.dispose()

    def _update(self, phase: ProgressPhase, event: Any = None) -> None:
        if self.on_update is not None:
            self.on_update(ProgressUpdate(progress=phase, status=event))
