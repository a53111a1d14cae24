"""Failure outcomes a submitter can observe.

Only two failure kinds are user-visible.  Every other exception raised
inside the matcher is an operational fault, not part of its contract.
"""

from __future__ import annotations


class MatchError(Exception):
    """Base class for terminal, user-visible match failures."""

    code: str = "match_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.code)


class QueueFullError(MatchError):
    """Raised at admission time when the queue is at capacity."""

    code = "queue_full"


class NoMatchError(MatchError):
    """Delivered to a record that aged out without finding any partner."""

    code = "no_match"
