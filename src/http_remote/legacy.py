"""Deprecated narrow remote contract.

``LegacyRemote`` adapts any ``Remote`` to the older two-callback interface:
the success callback receives only the response body, a single error
callback receives the failure detail, and no progress is reported.
New code should use ``Remote.transmit`` directly.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any
import warnings

from http_remote.models import ErrorKind, OutgoingRequest, WireResponse
from http_remote.remote import Remote


class LegacyRemote:
    """Two-callback adapter over a ``Remote``.

    Args:
        remote: Remote that performs the requests

    Example:
        >>> legacy = LegacyRemote(create_remote())
        >>> legacy.transmit({"op": "ping"}, on_ok=print, on_error=print)
    """

    def __init__(self, remote: Remote) -> None:
        warnings.warn(
            "LegacyRemote is deprecated; use Remote.transmit with structured callbacks",
            DeprecationWarning,
            stacklevel=2,
        )
        self.remote = remote

    def transmit(
        self,
        payload: Any,
        on_ok: Callable[[Any], None],
        on_error: Callable[[Any], None],
        abort_id: Hashable | None = None,
    ) -> None:
        """Send ``payload``; ``on_ok`` gets the body, ``on_error`` the detail."""

        def complete(response: WireResponse) -> None:
            on_ok(response.body)

        def error(kind: ErrorKind, detail: Any) -> None:
            on_error(detail)

        self.remote.transmit(
            OutgoingRequest(payload=payload, abort_id=abort_id),
            complete,
            error,
        )

    def cancel(self, abort_id: Hashable) -> None:
        self.remote.cancel(abort_id)

    def serial(self) -> bool:
        return self.remote.behavior_flags().serial
