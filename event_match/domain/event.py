"""EventRecord — one pending event report waiting in the match queue.

An EventRecord is NOT a match.  It is a claim from a single submitter that
something happened at a given time and place, together with a result
future the submitter is waiting on.

Lifecycle:  pending → matched-group | no_match
    - pending:       admitted, sitting in the queue
    - matched-group: grouped with at least one other report (success)
    - no_match:      aged out alone (failure)

Both terminal states are reached only during a scheduler pass.
"""

from __future__ import annotations

import asyncio
from typing import Any

from pydantic import BaseModel, Field

from event_match.domain.errors import MatchError


# ── Absent Payload ───────────────────────────────────────────────────────────

class _Missing:
    """Marker for a report submitted without any payload.

    Distinct from None, which is a payload in its own right (JSON null).
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


# ── Value Objects ────────────────────────────────────────────────────────────

class Location(BaseModel):
    """A point on the Earth's surface in decimal degrees."""

    longitude: float
    latitude: float

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"({self.longitude}, {self.latitude})"


class MatchResult(BaseModel):
    """Success value delivered to every member of a match group."""

    token: str = Field(..., description="Correlation token shared by the whole group")
    data: list[Any] = Field(
        default_factory=list,
        description="Pooled payloads of the group members, in evaluation order",
    )

    model_config = {"frozen": True}


# ── Event Record ─────────────────────────────────────────────────────────────

class EventRecord:
    """A queued event report and the future its submitter awaits.

    Thread-safety note:
        Records are mutated *only* from scheduler ticks, which never
        interleave with admissions on the event loop.  They are not locked.
    """

    __slots__ = ("arrival_time", "event_time", "location", "payload", "outcome", "_matched")

    def __init__(
        self,
        arrival_time: float,
        event_time: float,
        location: Location,
        payload: Any = MISSING,
        outcome: asyncio.Future | None = None,
    ) -> None:
        self.arrival_time = arrival_time
        self.event_time = event_time
        self.location = location
        self.payload = payload
        if outcome is None:
            outcome = asyncio.get_running_loop().create_future()
        self.outcome: asyncio.Future = outcome
        self._matched = False

    # ── Mutation ─────────────────────────────────────────────────────────

    @property
    def matched(self) -> bool:
        return self._matched

    def mark_matched(self) -> None:
        """Flag this record as part of a group.  Never reverts."""
        self._matched = True

    def resolve(self, result: MatchResult) -> None:
        """Deliver a successful match to the submitter."""
        if self.outcome.cancelled():
            return
        self.outcome.set_result(result)

    def reject(self, error: MatchError) -> None:
        """Deliver a terminal failure to the submitter."""
        if self.outcome.cancelled():
            return
        self.outcome.set_exception(error)

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def has_payload(self) -> bool:
        return self.payload is not MISSING

    @property
    def resolved(self) -> bool:
        return self.outcome.done()

    # ── Dunder ───────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return (
            f"EventRecord(event_time={self.event_time}, "
            f"location={self.location}, "
            f"matched={self._matched}, "
            f"arrived={self.arrival_time:.1f})"
        )
