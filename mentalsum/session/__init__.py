"""Practice sessions: the controller state machine and session statistics."""

from mentalsum.session.controller import (
    SessionController,
    SessionProgress,
    SessionStatus,
    parse_answer,
)
from mentalsum.session.statistics import (
    PerformanceLedger,
    SessionSummary,
    merge_session,
    summarize,
)

__all__ = [
    "PerformanceLedger",
    "SessionController",
    "SessionProgress",
    "SessionStatus",
    "SessionSummary",
    "merge_session",
    "parse_answer",
    "summarize",
]
