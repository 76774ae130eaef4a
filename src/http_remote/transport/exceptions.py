"""Transport layer exceptions.

Raised only when a primitive is misused. Network failures never raise: they
arrive through the ``error`` signal and the primitive's post-hoc error state.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base exception for transport primitives.

    Attributes:
        message: Error message
        cause: Original exception (or None)
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class TransportStateError(TransportError):
    """Primitive used outside its single-use lifecycle.

    Raised by ``send()`` on a primitive that was already sent or disposed,
    and by ``FakeTransport`` when a test finishes an exchange twice.
    """
