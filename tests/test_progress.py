"""Tests for progress percentage helpers."""

from __future__ import annotations

import pytest

from http_remote.models import ProgressPhase, ProgressUpdate
from http_remote.progress import (
    overall_progress,
    progress_percent,
    receive_progress,
    send_progress,
)
from http_remote.transport.base import ProgressEvent


def _update(phase: ProgressPhase, loaded: int | None = None, total: int | None = None) -> ProgressUpdate:
    status = ProgressEvent(loaded, total) if loaded is not None else None
    return ProgressUpdate(progress=phase, status=status)


class TestProgressPercent:
    """Tests for progress_percent."""

    @pytest.mark.parametrize(
        ("event", "expected"),
        [
            (ProgressEvent(50, 200), 25),
            (ProgressEvent(200, 200), 100),
            (ProgressEvent(300, 200), 100),
            (ProgressEvent(10, None), 0),
            (ProgressEvent(10, 0), 0),
            (None, 0),
        ],
    )
    def test_percent(self, event: ProgressEvent | None, expected: int) -> None:
        """Test byte counts convert to a clamped percentage."""
        assert progress_percent(event) == expected


class TestPhaseProgress:
    """Tests for the per-phase helpers."""

    def test_sending(self) -> None:
        """Test progress while uploading."""
        update = _update(ProgressPhase.SENDING, 30, 60)

        assert send_progress(update) == 50
        assert receive_progress(update) == 0
        assert overall_progress(update) == 25

    def test_receiving(self) -> None:
        """Test upload counts as done while downloading."""
        update = _update(ProgressPhase.RECEIVING, 50, 100)

        assert send_progress(update) == 100
        assert receive_progress(update) == 50
        assert overall_progress(update) == 75

    def test_complete(self) -> None:
        """Test a completed request is at 100 percent."""
        update = _update(ProgressPhase.COMPLETE)

        assert overall_progress(update) == 100

    def test_failed(self) -> None:
        """Test a failed request reports no progress."""
        update = _update(ProgressPhase.FAILED)

        assert send_progress(update) == 0
        assert overall_progress(update) == 0

    def test_initial_sending_update(self) -> None:
        """Test the opening update without an event is 0 percent."""
        assert overall_progress(_update(ProgressPhase.SENDING)) == 0
