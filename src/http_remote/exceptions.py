"""Exceptions for http-remote.

The callback contract never raises across ``transmit``: these exceptions
are passed as error details for the middleware failure kinds, and raised by
the awaitable ``RemoteClient`` for every kind.
"""

from __future__ import annotations

from typing import Any

from http_remote.models import ErrorCode, ErrorKind, WireResponse


class RemoteError(Exception):
    """Base exception for remote errors.

    Args:
        message: Human-readable error description
        cause: Original exception that caused this error

    Attributes:
        kind: Error taxonomy value for this exception type
    """

    kind: ErrorKind | None = None

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class RequestMiddlewareError(RemoteError):
    """Request middleware raised or returned a malformed request.

    No network request was made.

    Attributes:
        output: The malformed middleware output, when the middleware returned
            instead of raising
    """

    kind = ErrorKind.MIDDLEWARE_FAILED

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        output: Any = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.output = output


class ResponseMiddlewareError(RemoteError):
    """Response middleware raised while processing a successful exchange.

    Attributes:
        response: The raw response the middleware was given
    """

    kind = ErrorKind.MIDDLEWARE_ABORTED

    def __init__(
        self,
        message: str,
        response: WireResponse,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.response = response


class NetworkError(RemoteError):
    """The transport reported a failure (including cancellation).

    Attributes:
        response: Response carrying ``error_code``, ``error_text``,
            ``status_code``, ``status_text`` and ``body``
    """

    kind = ErrorKind.NETWORK_FAILED

    def __init__(self, response: WireResponse) -> None:
        text = response.error_text or response.error_code.value
        super().__init__(f"Network request failed: {text}")
        self.response = response

    @property
    def error_code(self) -> ErrorCode:
        return self.response.error_code

    @property
    def aborted(self) -> bool:
        return self.response.error_code is ErrorCode.ABORT
