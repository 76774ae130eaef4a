"""Scriptable transport primitive for tests and offline use.

``FakeTransport`` performs no I/O. A test drives it explicitly by calling
``succeed``, ``fail`` or the progress helpers after ``send``, which makes the
signal sequence fully deterministic on a single thread.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from http_remote.transport.base import (
    ProgressEvent,
    Signal,
    SignalEmitter,
    TransportErrorCode,
)
from http_remote.transport.exceptions import TransportStateError


@dataclass
class SentRequest:
    """Arguments captured from ``FakeTransport.send``."""

    url: str
    method: str
    body: bytes | str | None
    headers: dict[str, str] = field(default_factory=dict)


class FakeTransport(SignalEmitter):
    """Transport test double.

    Args:
        complete_first: Emit ``complete`` before ``success``/``error``, the
            order some browser-style primitives use
        send_error: Exception raised synchronously from ``send``

    Attributes:
        sent: Captured request, or None before ``send``
        aborted: Whether ``abort`` reached an in-flight exchange
        disposed: Whether ``dispose`` was called
        progress_enabled: Whether ``enable_progress_events`` was called

    Example:
        >>> transport = FakeTransport()
        >>> transport.send("/api", "POST", b"{}", {})
        >>> transport.succeed(body="42")
    """

    def __init__(
        self,
        complete_first: bool = False,
        send_error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.complete_first = complete_first
        self.send_error = send_error
        self.sent: SentRequest | None = None
        self.aborted = False
        self.disposed = False
        self.dispose_count = 0
        self.progress_enabled = False
        self.terminal = False

        self._response_text = ""
        self._status_code = 0
        self._status_text = ""
        self._error_code = TransportErrorCode.NONE
        self._error_text = ""

    def enable_progress_events(self) -> None:
        self.progress_enabled = True

    def send(
        self,
        url: str,
        method: str,
        body: bytes | str | None,
        headers: dict[str, str],
    ) -> None:
        if self.sent is not None:
            raise TransportStateError("Transport already sent")
        if self.send_error is not None:
            raise self.send_error
        self.sent = SentRequest(url=url, method=method, body=body, headers=dict(headers))

    def abort(self) -> None:
        if self.sent is None or self.terminal:
            return
        self.aborted = True
        self.fail(TransportErrorCode.ABORT, "Request aborted")

    def dispose(self) -> None:
        self.dispose_count += 1
        self.disposed = True
        self._clear_listeners()

    def upload_progress(self, loaded: int, total: int | None = None) -> None:
        if self.progress_enabled:
            self._emit(Signal.UPLOAD_PROGRESS, ProgressEvent(loaded=loaded, total=total))

    def download_progress(self, loaded: int, total: int | None = None) -> None:
        if self.progress_enabled:
            self._emit(Signal.DOWNLOAD_PROGRESS, ProgressEvent(loaded=loaded, total=total))

    def succeed(self, status: int = 200, body: str = "", status_text: str = "OK") -> None:
        """Finish the exchange successfully."""
        self._status_code = status
        self._status_text = status_text
        self._response_text = body
        self._finish(Signal.SUCCESS)

    def fail(
        self,
        code: int = TransportErrorCode.EXCEPTION,
        text: str = "",
        status: int = 0,
        body: str = "",
        status_text: str = "",
    ) -> None:
        """Finish the exchange with a transport error.

        ``code`` is passed through untouched so tests can report codes the
        primitive interface does not define.
        """
        self._error_code = code  # type: ignore[assignment]
        self._error_text = text
        self._status_code = status
        self._status_text = status_text
        self._response_text = body
        self._finish(Signal.ERROR)

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

    def _finish(self, outcome: Signal) -> None:
        if self.terminal:
            raise TransportStateError("Transport already finished")
        self.terminal = True
        if self.complete_first:
            self._emit(Signal.COMPLETE)
            self._emit(outcome)
        else:
            self._emit(outcome)
            self._emit(Signal.COMPLETE)


class FakeTransportFactory:
    """Transport factory that hands out ``FakeTransport`` instances.

    Attributes:
        created: Every transport created, in order

    Example:
        >>> factory = FakeTransportFactory()
        >>> remote = HttpRemote(transport_factory=factory)
        >>> remote.transmit({"payload": {"op": "ping"}}, on_complete, on_error)
        >>> factory.last.succeed(body="42")
    """

    def __init__(self, **options: Any) -> None:
        self.options = options
        self.created: list[FakeTransport] = []

    def __call__(self) -> FakeTransport:
        transport = FakeTransport(**self.options)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        if not self.created:
            raise LookupError("No transport created yet")
        return self.created[-1]
