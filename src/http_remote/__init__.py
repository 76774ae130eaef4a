"""Pluggable HTTP remote transport.

Turns application transactions into HTTP requests, tracks them for
cancellation, reports progress, and runs encode/decode middleware around
the wire format.
"""

from http_remote.client import RemoteClient
from http_remote.codec import TaggedValue, TypeHandler, WireCodec
from http_remote.exceptions import (
    NetworkError,
    RemoteError,
    RequestMiddlewareError,
    ResponseMiddlewareError,
)
from http_remote.legacy import LegacyRemote
from http_remote.middleware import (
    default_request_middleware,
    default_response_middleware,
    wrap_csrf_token,
    wrap_wire_request,
    wrap_wire_response,
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
from http_remote.remote import HttpRemote, MockRemote, Remote, create_remote

__version__ = "0.1.0"

__all__ = [
    # Remotes
    "Remote",
    "HttpRemote",
    "MockRemote",
    "LegacyRemote",
    "RemoteClient",
    "create_remote",
    # Models
    "BehaviorFlags",
    "ErrorCode",
    "ErrorKind",
    "OutgoingRequest",
    "ProgressPhase",
    "ProgressUpdate",
    "WireRequest",
    "WireResponse",
    # Middleware
    "default_request_middleware",
    "default_response_middleware",
    "wrap_csrf_token",
    "wrap_wire_request",
    "wrap_wire_response",
    # Codec
    "TaggedValue",
    "TypeHandler",
    "WireCodec",
    # Exceptions
    "NetworkError",
    "RemoteError",
    "RequestMiddlewareError",
    "ResponseMiddlewareError",
]
