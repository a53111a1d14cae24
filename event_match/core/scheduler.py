"""Match Scheduler — periodic, windowed batch matching of queued reports.

Each tick finalizes every record that has sat in the queue for at least
max_request_skew milliseconds.  The delay gives a record's potential
partners, which may arrive slightly later, time to be admitted before a
final decision is made.

Grouping is anchor-based: the earliest unmatched aged record seeds a group
and pulls in every later unmatched record within tolerance of *itself*.
This is not a transitive closure.  Two members may be farther apart from
each other than the tolerances allow and still share a group, as long as
both are close to the anchor.

Concurrency:
    Admission and ticks both run on the event loop.  process_batch() never
    awaits, so a tick can neither overlap another tick nor an admission.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from event_match.domain.criteria import DistanceFunction, MatchCriteria
from event_match.domain.errors import NoMatchError, QueueFullError
from event_match.domain.event import MISSING, EventRecord, Location, MatchResult
from event_match.foundation.clock import monotonic_ms
from event_match.foundation.identifiers import new_token
from event_match.store.event_queue import EventQueue

logger = logging.getLogger(__name__)


class BatchReport:
    """What a single tick decided.  Observability only."""

    __slots__ = ("finalized", "groups", "matched", "unmatched", "remaining")

    def __init__(
        self,
        finalized: int = 0,
        groups: int = 0,
        matched: int = 0,
        unmatched: int = 0,
        remaining: int = 0,
    ) -> None:
        self.finalized = finalized
        self.groups = groups
        self.matched = matched
        self.unmatched = unmatched
        self.remaining = remaining

    def to_dict(self) -> dict:
        return {
            "finalized": self.finalized,
            "groups": self.groups,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "remaining": self.remaining,
        }


class SchedulerStats:
    """Cumulative counters across the scheduler's lifetime."""

    __slots__ = ("admitted", "rejected", "matched", "unmatched", "groups", "ticks")

    def __init__(self) -> None:
        self.admitted: int = 0
        self.rejected: int = 0
        self.matched: int = 0
        self.unmatched: int = 0
        self.groups: int = 0
        self.ticks: int = 0

    def record_batch(self, report: BatchReport) -> None:
        self.ticks += 1
        self.matched += report.matched
        self.unmatched += report.unmatched
        self.groups += report.groups

    def to_dict(self) -> dict:
        return {
            "admitted": self.admitted,
            "rejected": self.rejected,
            "matched": self.matched,
            "unmatched": self.unmatched,
            "groups": self.groups,
            "ticks": self.ticks,
        }


class MatchScheduler:
    """Owns the event queue and the periodic task that matches its contents.

    All time values are in milliseconds.

    Args:
        max_request_skew: Minimum queue residency before a record may be
            finalized.
        max_clock_skew: Largest event_time difference that still matches.
        max_queue_size: Admission capacity of the queue.
        max_distance: Reports must be strictly closer than this (metres).
        interval: Tick period.
        distance: Optional replacement for the great-circle metric.
    """

    def __init__(
        self,
        max_request_skew: float = 3000,
        max_clock_skew: float = 100,
        max_queue_size: int = 1000,
        max_distance: float = 100,
        interval: float = 400,
        distance: DistanceFunction | None = None,
    ) -> None:
        if max_request_skew < 0:
            raise ValueError("max_request_skew must be non-negative")
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._max_request_skew = max_request_skew
        self._interval = interval
        self._criteria = MatchCriteria(
            max_clock_skew=max_clock_skew,
            max_distance=max_distance,
            distance=distance,
        )
        self._queue = EventQueue(capacity=max_queue_size)
        self._stats = SchedulerStats()
        self._task: asyncio.Task | None = None

    # ── Public API ───────────────────────────────────────────────────────

    def submit(
        self,
        event_time: float,
        longitude: float,
        latitude: float,
        payload: Any = MISSING,
    ) -> asyncio.Future:
        """Queue an event report and return the future its outcome lands in.

        Never suspends.  The future resolves to a MatchResult, or fails with
        NoMatchError once the report ages out alone.  If the queue is full
        the future is returned already failed with QueueFullError and
        nothing is enqueued.

        The first successful admission starts the scheduler.
        """
        future = asyncio.get_running_loop().create_future()
        record = EventRecord(
            arrival_time=monotonic_ms(),
            event_time=event_time,
            location=Location(longitude=longitude, latitude=latitude),
            payload=payload,
            outcome=future,
        )

        try:
            self._queue.admit(record)
        except QueueFullError as exc:
            self._stats.rejected += 1
            logger.warning("Rejected event at %s: %s", record.location, exc)
            future.set_exception(exc)
            return future

        self._stats.admitted += 1
        logger.debug(
            "Admitted event t=%s at %s (queued=%d)",
            event_time,
            record.location,
            len(self._queue),
        )

        self.start()
        return future

    def start(self) -> None:
        """Begin periodic ticks.  No-op if already running."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="event-match-scheduler"
        )
        logger.info("Match scheduler started (interval=%sms)", self._interval)

    def stop(self) -> None:
        """Cancel periodic ticks.  No-op if already stopped.

        Queued records are kept and resume once the scheduler restarts.
        """
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Match scheduler stopped (%d record(s) queued)", len(self._queue))

    def process_batch(self, now: float | None = None) -> BatchReport:
        """Finalize every record older than the request-skew window.

        Args:
            now: Clock reading to evaluate against; defaults to monotonic_ms().

        Returns:
            A BatchReport describing the decisions made this pass.
        """
        if now is None:
            now = monotonic_ms()
        cutoff = now - self._max_request_skew

        aged = self._queue.peek_prefix_older_than(cutoff)
        records = self._queue.records
        report = BatchReport(finalized=len(aged))

        decided = 0
        try:
            for i, anchor in enumerate(aged):
                if not anchor.matched:
                    self._finalize_anchor(anchor, records[i + 1:], report)
                decided += 1
        finally:
            # Drain by count: only the prefix whose outcomes are delivered.
            self._queue.drain_prefix(decided)

        report.remaining = len(self._queue)
        self._stats.record_batch(report)

        if report.finalized:
            logger.info(
                "Tick finalized %d record(s): %d group(s), %d no_match, %d queued",
                report.finalized,
                report.groups,
                report.unmatched,
                report.remaining,
            )
        return report

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def queue(self) -> EventQueue:
        return self._queue

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def criteria(self) -> MatchCriteria:
        return self._criteria

    @property
    def stats(self) -> dict:
        return self._stats.to_dict()

    # ── Internals ────────────────────────────────────────────────────────

    def _finalize_anchor(
        self,
        anchor: EventRecord,
        later: tuple[EventRecord, ...],
        report: BatchReport,
    ) -> None:
        """Group *anchor* with every later unmatched record within tolerance.

        Nothing is marked until the scan completes, so a scan that raises
        leaves every record pending and eligible on the next tick.
        """
        group = [anchor]
        group.extend(
            other for other in later
            if not other.matched and self._criteria.matches(anchor, other)
        )

        if len(group) == 1:
            anchor.reject(NoMatchError("no partner within tolerance"))
            report.unmatched += 1
            return

        for record in group:
            record.mark_matched()
        self._resolve_group(group)
        report.groups += 1
        report.matched += len(group)

    def _resolve_group(self, group: list[EventRecord]) -> None:
        token = new_token()
        data = [r.payload for r in group if r.has_payload]
        for record in group:
            # Each member gets its own copy of the pool.
            record.resolve(MatchResult(token=token, data=list(data)))
        logger.debug("Resolved group %s with %d member(s)", token, len(group))

    async def _run(self) -> None:
        period = self._interval / 1000.0
        while True:
            await asyncio.sleep(period)
            try:
                self.process_batch()
            except Exception:
                logger.exception("Match tick failed")
