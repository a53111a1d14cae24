"""Matching predicate for pairs of event reports.

MatchCriteria decides whether two reports describe the same occurrence.
The distance function is injected so the spatial test can be swapped
without touching the scheduler.
"""

from __future__ import annotations

from typing import Protocol

from event_match.domain.event import EventRecord, Location
from event_match.foundation.geo import great_circle_distance


class DistanceFunction(Protocol):
    """Protocol for a metric between two locations, in metres."""

    def __call__(self, a: Location, b: Location) -> float:
        ...


def haversine_distance(a: Location, b: Location) -> float:
    """Default distance: great-circle metres between *a* and *b*."""
    return great_circle_distance(a.longitude, a.latitude, b.longitude, b.latitude)


class MatchCriteria:
    """Time and space tolerances for pairing two records.

    Args:
        max_clock_skew: Largest allowed event_time difference, inclusive (ms).
        max_distance: Distance two reports must be strictly closer than (m).
        distance: Metric used for the spatial test.
    """

    __slots__ = ("max_clock_skew", "max_distance", "_distance")

    def __init__(
        self,
        max_clock_skew: float = 100,
        max_distance: float = 100,
        distance: DistanceFunction | None = None,
    ) -> None:
        if max_clock_skew < 0:
            raise ValueError("max_clock_skew must be non-negative")
        if max_distance <= 0:
            raise ValueError("max_distance must be positive")

        self.max_clock_skew = max_clock_skew
        self.max_distance = max_distance
        self._distance = distance or haversine_distance

    def within_clock_skew(self, a: EventRecord, b: EventRecord) -> bool:
        return abs(a.event_time - b.event_time) <= self.max_clock_skew

    def within_distance(self, a: EventRecord, b: EventRecord) -> bool:
        return self._distance(a.location, b.location) < self.max_distance

    def matches(self, a: EventRecord, b: EventRecord) -> bool:
        """True if *a* and *b* are close enough in both time and space."""
        return self.within_clock_skew(a, b) and self.within_distance(a, b)
