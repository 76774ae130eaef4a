"""Test helpers for code that drives a remote through callbacks."""

from __future__ import annotations

from typing import Any

from http_remote.models import ErrorKind, ProgressUpdate, WireResponse


class CallbackRecorder:
    """Records remote callbacks in the order they fire.

    Pass ``recorder.on_complete``, ``recorder.on_error`` and
    ``recorder.on_update`` to ``Remote.transmit``.

    Attributes:
        completed: Responses passed to the completion callback
        errors: ``(kind, detail)`` pairs passed to the error callback
        updates: Progress updates
        events: Ordered log: ``complete``, ``error`` or ``update:<phase>``
    """

    def __init__(self) -> None:
        self.completed: list[WireResponse] = []
        self.errors: list[tuple[ErrorKind, Any]] = []
        self.updates: list[ProgressUpdate] = []
        self.events: list[str] = []

    def on_complete(self, response: WireResponse) -> None:
        self.completed.append(response)
        self.events.append("complete")

    def on_error(self, kind: ErrorKind, detail: Any) -> None:
        self.errors.append((kind, detail))
        self.events.append("error")

    def on_update(self, update: ProgressUpdate) -> None:
        self.updates.append(update)
        self.events.append(f"update:{update.progress.value}")

    @property
    def terminal_count(self) -> int:
        return len(self.completed) + len(self.errors)

    @property
    def phases(self) -> list[str]:
        return [update.progress.value for update in self.updates]
