"""Remote transport data models.

Pydantic models for the values that flow through a remote: the caller's
outgoing request, the wire request produced by request middleware, the
normalized response handed to response middleware and callbacks, and the
progress updates reported while a request is in flight.
"""

from __future__ import annotations

from collections.abc import Hashable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from http_remote.transport.base import TransportErrorCode


class ErrorKind(str, Enum):
    """Failure taxonomy reported through the error callback."""

    MIDDLEWARE_ABORTED = "middleware-aborted"
    MIDDLEWARE_FAILED = "middleware-failed"
    NETWORK_FAILED = "network-failed"


class ErrorCode(str, Enum):
    """Classified transport error code carried by ``WireResponse``."""

    NONE = "none"
    EXCEPTION = "exception"
    HTTP_ERROR = "http-error"
    ABORT = "abort"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ProgressPhase(str, Enum):
    """Phase reported by a progress update."""

    SENDING = "sending"
    RECEIVING = "receiving"
    COMPLETE = "complete"
    FAILED = "failed"


_ERROR_CODES: dict[int, ErrorCode] = {
    TransportErrorCode.NONE: ErrorCode.NONE,
    TransportErrorCode.EXCEPTION: ErrorCode.EXCEPTION,
    TransportErrorCode.HTTP_ERROR: ErrorCode.HTTP_ERROR,
    TransportErrorCode.ABORT: ErrorCode.ABORT,
    TransportErrorCode.TIMEOUT: ErrorCode.TIMEOUT,
}


def classify_error_code(raw: int) -> ErrorCode:
    """Map a low-level transport error code to an ``ErrorCode``.

    Example:
        >>> classify_error_code(3)
        <ErrorCode.ABORT: 'abort'>
        >>> classify_error_code(99)
        <ErrorCode.UNKNOWN: 'unknown'>
    """
    return _ERROR_CODES.get(raw, ErrorCode.UNKNOWN)


class OutgoingRequest(BaseModel):
    """Request handed to ``Remote.transmit`` by the caller.

    Attributes:
        payload: Application transaction (opaque to the remote)
        abort_id: Optional identity used to cancel the request later

    Example:
        >>> request = OutgoingRequest(payload={"op": "ping"}, abort_id="x")
        >>> request.abort_id
        'x'
    """

    payload: Any = Field(default=None, description="Application transaction")
    abort_id: Hashable | None = Field(default=None, description="Cancellation identity")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class WireRequest(BaseModel):
    """HTTP request produced by request middleware.

    Request middleware receives the base request (remote url, ``POST``, no
    headers, payload as body) and may rewrite any field.

    Attributes:
        url: Request URL (absolute, or relative to the client's base URL)
        method: HTTP verb
        headers: HTTP headers
        body: Request body; bytes or text once encoded
    """

    url: str = Field(..., description="Request URL")
    method: str = Field(default="POST", description="HTTP verb")
    headers: dict[str, str] = Field(default_factory=dict, description="HTTP headers")
    body: Any = Field(..., description="Request body")

    model_config = ConfigDict(frozen=False)


class WireResponse(BaseModel):
    """Normalized result of one transport exchange.

    This is the input of response middleware, the value passed to the
    completion callback, and the detail of ``network-failed`` errors.

    Attributes:
        original_payload: Payload of the outgoing request
        outgoing_request: Wire request that was sent
        body: Raw response text, or the decoded value after middleware
        status_code: HTTP status code (0 when no response arrived)
        status_text: HTTP reason phrase
        error_code: Classified transport error code
        error_text: Transport error description
    """

    original_payload: Any = Field(default=None, description="Outgoing payload")
    outgoing_request: WireRequest | None = Field(default=None, description="Sent request")
    body: Any = Field(default=None, description="Response body")
    status_code: int = Field(default=0, description="HTTP status code")
    status_text: str = Field(default="", description="HTTP reason phrase")
    error_code: ErrorCode = Field(default=ErrorCode.NONE, description="Error code")
    error_text: str = Field(default="", description="Error description")

    model_config = ConfigDict(frozen=False)


class ProgressUpdate(BaseModel):
    """Progress notification passed to the update callback.

    Attributes:
        progress: Current phase
        status: Opaque low-level event from the transport (may be None)
    """

    progress: ProgressPhase
    status: Any = None

    model_config = ConfigDict(frozen=True)


class BehaviorFlags(BaseModel):
    """Declarative hints a remote advertises to its caller.

    Attributes:
        serial: Whether the caller should queue requests to this remote
            instead of dispatching them concurrently. Advertised only.
    """

    serial: bool = True

    model_config = ConfigDict(frozen=True)
