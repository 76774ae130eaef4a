"""In-flight request tracking for cancellation.

Maps an abort identity to the set of transport primitives currently in
flight for it. The tracker holds non-owning references: the lifecycle that
created a primitive is responsible for untracking and disposing it.
"""

from __future__ import annotations

from collections.abc import Hashable

import structlog

from http_remote.transport.base import TransportPrimitive

logger = structlog.get_logger()


class RequestTracker:
    """Abort identity -> in-flight transport primitives.

    Invariants:
        - A primitive is tracked only between send and its terminal signal
        - No identity maps to an empty set

    All mutation happens on the event loop thread, so no locking is needed.

    Example:
        >>> tracker = RequestTracker()
        >>> tracker.track("load-people", transport)
        >>> tracker.cancel_all("load-people")  # aborts transport
    """

    def __init__(self) -> None:
        self._active: dict[Hashable, set[TransportPrimitive]] = {}

    def track(self, abort_id: Hashable | None, handle: TransportPrimitive) -> None:
        """Register ``handle`` under ``abort_id``; untracked calls are ignored."""
        if abort_id is None:
            return
        self._active.setdefault(abort_id, set()).add(handle)

    def untrack(self, abort_id: Hashable | None, handle: TransportPrimitive) -> None:
        """Remove ``handle``; the identity is dropped with its last handle."""
        if abort_id is None:
            return

        handles = self._active.get(abort_id)
        if not handles or handle not in handles:
            return

        if len(handles) == 1:
            del self._active[abort_id]
        else:
            handles.discard(handle)

    def cancel_all(self, abort_id: Hashable | None) -> None:
        """Abort every primitive tracked under ``abort_id``.

        Unknown or already completed identities are a silent no-op:
        cancellation races completion and losing the race is not an error.
        """
        handles = self._active.get(abort_id) if abort_id is not None else None
        if not handles:
            return

        logger.debug("requests_cancelled", abort_id=abort_id, count=len(handles))
        # abort() untracks synchronously, so iterate over a snapshot
        for handle in list(handles):
            handle.abort()

    def is_tracking(self, abort_id: Hashable) -> bool:
        return abort_id in self._active

    def handles(self, abort_id: Hashable) -> frozenset[TransportPrimitive]:
        return frozenset(self._active.get(abort_id, ()))

    def __contains__(self, abort_id: object) -> bool:
        return abort_id in self._active

    def __len__(self) -> int:
        return len(self._active)
