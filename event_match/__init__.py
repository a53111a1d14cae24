from event_match.core.scheduler import MatchScheduler
from event_match.domain.errors import MatchError, NoMatchError, QueueFullError
from event_match.domain.event import MatchResult

__all__ = ["MatchScheduler", "MatchError", "NoMatchError", "QueueFullError", "MatchResult"]
