"""Tests for the EventQueue."""

import pytest

from event_match.domain.errors import QueueFullError
from event_match.domain.event import EventRecord, Location
from event_match.store.event_queue import EventQueue


def _record(arrival_time: float, event_time: float = 0.0, **kw) -> EventRecord:
    return EventRecord(
        arrival_time=arrival_time,
        event_time=event_time,
        location=Location(longitude=kw.pop("longitude", 0.0), latitude=kw.pop("latitude", 0.0)),
        **kw,
    )


class TestAdmission:
    @pytest.mark.asyncio
    async def test_admit_appends_to_tail(self) -> None:
        queue = EventQueue(capacity=3)
        first, second = _record(1.0), _record(2.0)
        queue.admit(first)
        queue.admit(second)
        assert queue.records == (first, second)
        assert len(queue) == 2

    @pytest.mark.asyncio
    async def test_admit_rejects_when_full_without_mutation(self) -> None:
        queue = EventQueue(capacity=2)
        queue.admit(_record(1.0))
        queue.admit(_record(2.0))
        assert queue.is_full
        with pytest.raises(QueueFullError) as exc_info:
            queue.admit(_record(3.0))
        assert exc_info.value.code == "queue_full"
        assert len(queue) == 2
        assert [r.arrival_time for r in queue.records] == [1.0, 2.0]

    def test_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            EventQueue(capacity=0)

    def test_capacity_is_queryable(self) -> None:
        assert EventQueue(capacity=7).capacity == 7


class TestPrefix:
    @pytest.mark.asyncio
    async def test_peek_returns_leading_run_only(self) -> None:
        queue = EventQueue()
        records = [_record(t) for t in (1.0, 2.0, 5.0, 6.0)]
        for r in records:
            queue.admit(r)
        assert queue.peek_prefix_older_than(5.0) == records[:2]
        assert len(queue) == 4

    @pytest.mark.asyncio
    async def test_peek_cutoff_is_strict(self) -> None:
        queue = EventQueue()
        queue.admit(_record(10.0))
        assert queue.peek_prefix_older_than(10.0) == []
        assert len(queue.peek_prefix_older_than(10.1)) == 1

    @pytest.mark.asyncio
    async def test_peek_empty_queue(self) -> None:
        assert EventQueue().peek_prefix_older_than(1_000.0) == []

    @pytest.mark.asyncio
    async def test_drain_removes_head(self) -> None:
        queue = EventQueue()
        records = [_record(t) for t in (1.0, 2.0, 3.0)]
        for r in records:
            queue.admit(r)
        queue.drain_prefix(2)
        assert queue.records == (records[2],)

    @pytest.mark.asyncio
    async def test_drain_zero_is_noop(self) -> None:
        queue = EventQueue()
        queue.admit(_record(1.0))
        queue.drain_prefix(0)
        assert len(queue) == 1

    @pytest.mark.asyncio
    async def test_drain_out_of_bounds_raises(self) -> None:
        queue = EventQueue()
        queue.admit(_record(1.0))
        with pytest.raises(ValueError):
            queue.drain_prefix(2)
        with pytest.raises(ValueError):
            queue.drain_prefix(-1)
        assert len(queue) == 1

    @pytest.mark.asyncio
    async def test_records_is_a_snapshot(self) -> None:
        queue = EventQueue()
        queue.admit(_record(1.0))
        snapshot = queue.records
        queue.admit(_record(2.0))
        assert len(snapshot) == 1
