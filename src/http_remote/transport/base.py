"""Transport primitive interface.

A transport primitive performs exactly one HTTP exchange. It emits discrete
lifecycle signals and keeps post-hoc state (status, body, last error) that
listeners query once a terminal signal has fired. It has NO knowledge of
middleware, request tracking or application payloads.

Signal order for one exchange:
    upload-progress* -> download-progress* -> (success | error) -> complete
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Protocol

import structlog

logger = structlog.get_logger()


class Signal(str, Enum):
    """Lifecycle signals emitted by a transport primitive."""

    UPLOAD_PROGRESS = "upload-progress"
    DOWNLOAD_PROGRESS = "download-progress"
    SUCCESS = "success"
    ERROR = "error"
    COMPLETE = "complete"


class TransportErrorCode(IntEnum):
    """Low-level error codes reported by ``last_error_code()``."""

    NONE = 0
    EXCEPTION = 1
    HTTP_ERROR = 2
    ABORT = 3
    TIMEOUT = 4


@dataclass(frozen=True)
class ProgressEvent:
    """Byte counts carried by progress signals.

    Attributes:
        loaded: Bytes transferred so far
        total: Expected byte count, or None when unknown
    """

    loaded: int
    total: int | None = None

    @property
    def length_computable(self) -> bool:
        return bool(self.total)


Listener = Callable[[Any], None]


class TransportPrimitive(Protocol):
    """Protocol every transport backend must implement.

    Instances are single use: one ``send`` per primitive. Creation is the
    responsibility of a transport factory (any zero-argument callable).
    """

    def listen(self, signal: Signal, listener: Listener) -> None:
        """Subscribe ``listener`` to ``signal``; it receives the low-level event."""
        ...

    def enable_progress_events(self) -> None:
        """Turn on upload/download progress signals (off by default)."""
        ...

    def send(
        self,
        url: str,
        method: str,
        body: bytes | str | None,
        headers: dict[str, str],
    ) -> None:
        """Start the exchange. Returns immediately; results arrive as signals."""
        ...

    def abort(self) -> None:
        """Abort an in-flight exchange. No-op once a terminal signal fired."""
        ...

    def dispose(self) -> None:
        """Release listeners and resources. Post-hoc state stays readable."""
        ...

    def response_text(self) -> str: ...

    def status_code(self) -> int: ...

    def status_text(self) -> str: ...

    def last_error_code(self) -> int: ...

    def last_error_text(self) -> str: ...


class SignalEmitter:
    """Listener registry shared by the concrete transport primitives.

    A listener that raises is logged and does not prevent the remaining
    listeners for the same signal from running.
    """

    def __init__(self) -> None:
        self._listeners: dict[Signal, list[Listener]] = {}

    def listen(self, signal: Signal, listener: Listener) -> None:
        self._listeners.setdefault(Signal(signal), []).append(listener)

    def _emit(self, signal: Signal, event: Any = None) -> None:
        # Snapshot: a listener may dispose the primitive mid-dispatch.
        for listener in list(self._listeners.get(signal, ())):
            try:
                listener(event)
            except Exception:
                logger.exception("transport_listener_failed", signal=signal.value)

    def _clear_listeners(self) -> None:
        self._listeners.clear()
