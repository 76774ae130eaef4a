"""Progress helpers for update callbacks.

Turn ``ProgressUpdate`` values into integer percentages suitable for a
progress bar. Sending covers the first half of the overall range and
receiving the second half.
"""

from __future__ import annotations

from typing import Any

from http_remote.models import ProgressPhase, ProgressUpdate


def progress_percent(event: Any) -> int:
    """Percentage (0-100) of bytes transferred in a progress event.

    Events without a known total report 0.
    """
    loaded = getattr(event, "loaded", None)
    total = getattr(event, "total", None)
    if not total or loaded is None:
        return 0
    return max(0, min(100, int(loaded * 100 / total)))


def send_progress(update: ProgressUpdate) -> int:
    """Upload percentage; 100 once the request moved past sending."""
    if update.progress is ProgressPhase.SENDING:
        return progress_percent(update.status)
    if update.progress in (ProgressPhase.RECEIVING, ProgressPhase.COMPLETE):
        return 100
    return 0


def receive_progress(update: ProgressUpdate) -> int:
    """Download percentage; 0 while still sending."""
    if update.progress is ProgressPhase.RECEIVING:
        return progress_percent(update.status)
    if update.progress is ProgressPhase.COMPLETE:
        return 100
    return 0


def overall_progress(update: ProgressUpdate) -> int:
    """Combined percentage across sending and receiving.

    Example:
        >>> overall_progress(ProgressUpdate(progress="receiving", status=ProgressEvent(50, 100)))
        75
    """
    return (send_progress(update) + receive_progress(update)) // 2
