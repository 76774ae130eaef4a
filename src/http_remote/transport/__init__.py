"""Transport layer for http-remote.

This module performs single HTTP exchanges with no knowledge of middleware,
request tracking or application payloads. It is responsible for:
- The transport primitive protocol and its lifecycle signals
- An httpx-backed primitive with upload/download progress
- A scriptable primitive for tests
- Translating network failures into low-level error codes
"""

from http_remote.transport.base import (
    ProgressEvent,
    Signal,
    SignalEmitter,
    TransportErrorCode,
    TransportPrimitive,
)
from http_remote.transport.exceptions import TransportError, TransportStateError
from http_remote.transport.fake import FakeTransport, FakeTransportFactory
from http_remote.transport.http import HttpxTransport

__all__ = [
    "FakeTransport",
    "FakeTransportFactory",
    "HttpxTransport",
    "ProgressEvent",
    "Signal",
    "SignalEmitter",
    "TransportError",
    "TransportErrorCode",
    "TransportPrimitive",
    "TransportStateError",
]
