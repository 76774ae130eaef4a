"""Request and response middleware.

Middleware are plain functions applied once per call: request middleware
turns the base ``WireRequest`` into the request that is actually sent, and
response middleware normalizes the raw ``WireResponse`` before the
completion callback sees it.

The ``wrap_*`` helpers build middleware in wrapper style: each one performs
its own step and then delegates to ``handler``, so pipelines compose by
nesting::

    request_middleware = wrap_csrf_token(wrap_wire_request(), token="abc")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import structlog

from http_remote.codec import CodecError, WireCodec, default_codec
from http_remote.models import WireRequest, WireResponse

logger = structlog.get_logger()

CSRF_HEADER = "X-CSRF-Token"

RequestMiddleware = Callable[[WireRequest], WireRequest]
ResponseMiddleware = Callable[[WireResponse], WireResponse]

T = TypeVar("T")


def _identity(value: T) -> T:
    return value


def _is_blank(body: Any) -> bool:
    if body is None:
        return True
    if isinstance(body, (str, bytes)):
        return not body.strip()
    return False


def wrap_wire_request(
    handler: RequestMiddleware | None = None,
    *,
    codec: WireCodec | None = None,
    headers: Mapping[str, str] | None = None,
) -> RequestMiddleware:
    """Build request middleware that encodes the body for the wire.

    Sets ``Content-Type`` and ``Accept`` to the codec's content type, then
    merges ``headers`` on top.

    Args:
        handler: Middleware to run after encoding (identity when None)
        codec: Codec used for the body (default: tagged JSON)
        headers: Extra headers added to every request

    Returns:
        Request middleware

    Example:
        >>> middleware = wrap_wire_request()
        >>> middleware(WireRequest(url="/api", body={"op": "ping"})).body
        b'{"op":"ping"}'
    """
    next_step = handler or _identity
    wire_codec = codec or default_codec
    extra_headers = dict(headers or {})

    def middleware(request: WireRequest) -> WireRequest:
        merged = {
            **request.headers,
            "Content-Type": wire_codec.content_type,
            "Accept": wire_codec.content_type,
            **extra_headers,
        }
        encoded = request.model_copy(
            update={"headers": merged, "body": wire_codec.encode(request.body)}
        )
        return next_step(encoded)

    return middleware


def wrap_wire_response(
    handler: ResponseMiddleware | None = None,
    *,
    codec: WireCodec | None = None,
) -> ResponseMiddleware:
    """Build response middleware that decodes the body from the wire.

    An empty body is replaced by the HTTP status code. When decoding fails
    the failure is logged and the original response is returned unmodified,
    without running ``handler``, so callers can still inspect the raw body.

    Args:
        handler: Middleware to run after decoding (identity when None)
        codec: Codec used for the body (default: tagged JSON)

    Returns:
        Response middleware
    """
    next_step = handler or _identity
    wire_codec = codec or default_codec

    def middleware(response: WireResponse) -> WireResponse:
        if _is_blank(response.body):
            body = response.status_code
        else:
            try:
                body = wire_codec.decode(response.body)
            except CodecError as e:
                logger.warning(
                    "response_decode_failed",
                    error=str(e),
                    status_code=response.status_code,
                )
                return response

        return next_step(response.model_copy(update={"body": body}))

    return middleware


def wrap_csrf_token(
    handler: RequestMiddleware | None = None,
    token: str | None = None,
) -> RequestMiddleware:
    """Build request middleware that adds the ``X-CSRF-Token`` header.

    Without a token the request passes through unchanged.
    """
    next_step = handler or _identity

    def middleware(request: WireRequest) -> WireRequest:
        if token:
            request = request.model_copy(
                update={"headers": {**request.headers, CSRF_HEADER: token}}
            )
        return next_step(request)

    return middleware


default_request_middleware: RequestMiddleware = wrap_wire_request()
default_response_middleware: ResponseMiddleware = wrap_wire_response()
