"""In-memory, capacity-bounded queue of pending event reports.

Design notes:
    - Records are appended at the tail and trimmed from the head only.
      Arrival times are assigned monotonically at admission, so insertion
      order is also non-decreasing arrival_time order.
    - No lock: the queue is touched only from the event loop, and a
      scheduler tick never awaits mid-pass.
    - The queue does NOT decide *which* records match.  It only stores
      them and hands out age-based prefixes.
"""

from __future__ import annotations

import logging

from event_match.domain.errors import QueueFullError
from event_match.domain.event import EventRecord

logger = logging.getLogger(__name__)


class EventQueue:
    """FIFO of EventRecords bounded by *capacity*.

    Args:
        capacity: Maximum number of records held at once.  Admissions
            beyond it are rejected immediately.
    """

    def __init__(self, capacity: int = 1000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self._capacity = capacity
        self._records: list[EventRecord] = []

    # ── Public API ───────────────────────────────────────────────────────

    def admit(self, record: EventRecord) -> None:
        """Append *record* to the tail.

        Raises:
            QueueFullError: If the queue is at capacity.  The queue is left
                untouched.
        """
        if len(self._records) >= self._capacity:
            raise QueueFullError(f"queue at capacity ({self._capacity})")
        self._records.append(record)

    def peek_prefix_older_than(self, age_cutoff: float) -> list[EventRecord]:
        """Return the leading run of records with arrival_time < *age_cutoff*.

        Nothing is removed.  The scan stops at the first record that is
        not old enough.
        """
        prefix: list[EventRecord] = []
        for record in self._records:
            if record.arrival_time >= age_cutoff:
                break
            prefix.append(record)
        return prefix

    def drain_prefix(self, n: int) -> None:
        """Remove the first *n* records from the head."""
        if n < 0 or n > len(self._records):
            raise ValueError(
                f"cannot drain {n} record(s) from a queue of {len(self._records)}"
            )
        del self._records[:n]
        if n:
            logger.debug("Drained %d record(s), %d remaining", n, len(self._records))

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def records(self) -> tuple[EventRecord, ...]:
        """Read-only snapshot of queued records in arrival order."""
        return tuple(self._records)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._records) >= self._capacity

    def __len__(self) -> int:
        return len(self._records)
