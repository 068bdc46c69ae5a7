"""
Session Controller: the practice-session state machine.

States:
    NOT_STARTED -> ACTIVE <-> PAUSED -> COMPLETED

- start_session pre-generates every problem from one performance snapshot
- tick() is the 1-second countdown; reaching zero times the problem out
- focus loss pauses the countdown, focus regain resumes it
- answers and timeouts are stamped on the problem, reported to the
  performance ledger, and the session advances
- completion aggregates completed problems only, merges the ledger into
  the profile and writes both to the store in one call

Single-threaded: callers deliver ticks, answers and focus events one at a time.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from loguru import logger

from mentalsum.core.errors import InvalidAnswerError, SessionStateError
from mentalsum.core.models import Problem, Session, User
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.types import StrategyId, normalize_performance
from mentalsum.engine.problem_engine import ProblemEngine
from mentalsum.session.statistics import PerformanceLedger, merge_session, summarize
from mentalsum.storage.base import ProfileStore

AttemptListener = Callable[[Problem], None]


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SessionProgress:
    index: int
    total: int

    @property
    def fraction(self) -> float:
        return self.index / self.total if self.total else 0.0

    @property
    def percentage(self) -> float:
        return self.fraction * 100


def parse_answer(raw: int | str) -> int:
    """Parse learner input into an integer answer."""
    if isinstance(raw, bool):
        raise InvalidAnswerError(f"Not a number: {raw!r}")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip().replace(",", "").replace("_", "")
    try:
        return int(text)
    except ValueError:
        raise InvalidAnswerError(f"Not a number: {raw!r}") from None


class SessionController:
    """
    Drives one learner through timed practice sessions.

    Args:
        user: Learner whose preferences and statistics drive the session
        store: Persistent store written once per completed session
        engine: Problem engine (inject a seeded one for reproducible runs)
        history_limit: Maximum problems retained in the user's history
        clock: Source of timestamps
        on_attempt: Called with each problem as soon as it is answered or times out
        preferences: Per-run override of the user's stored preferences (never saved)
    """

    def __init__(
        self,
        user: User,
        store: ProfileStore,
        engine: ProblemEngine | None = None,
        history_limit: int = 100,
        clock: Callable[[], datetime] = datetime.now,
        on_attempt: AttemptListener | None = None,
        preferences: UserPreferences | None = None,
    ):
        self.user = user
        self.store = store
        self.engine = engine or ProblemEngine()
        self.history_limit = history_limit
        self.clock = clock
        self.on_attempt = on_attempt
        self.preferences_override = preferences

        self.session: Session | None = None
        self.status = SessionStatus.NOT_STARTED
        self.problem_index = 0
        self.time_limit = self.preferences.time_limit
        self.time_remaining = self.time_limit
        self.ledger = PerformanceLedger()

    # =========================================================================
    # Observability
    # =========================================================================

    @property
    def preferences(self) -> UserPreferences:
        return self.preferences_override or self.user.preferences

    @property
    def current_problem(self) -> Problem | None:
        if self.session is None or self.status == SessionStatus.COMPLETED:
            return None
        return self.session.problems[self.problem_index]

    @property
    def is_active(self) -> bool:
        return self.status in (SessionStatus.ACTIVE, SessionStatus.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.status == SessionStatus.PAUSED

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    @property
    def elapsed(self) -> int:
        return self.time_limit - self.time_remaining

    def progress(self) -> SessionProgress:
        if self.session is None:
            return SessionProgress(0, 0)
        if self.status == SessionStatus.COMPLETED:
            return SessionProgress(self.session.session_length, self.session.session_length)
        return SessionProgress(self.problem_index, self.session.session_length)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_session(self, focused_strategy_id: StrategyId | str | None = None) -> Session | None:
        """
        Start a new session with a fully pre-generated problem list.

        Returns:
            The new Session, or None if no problem could be generated
            (no operation enabled). The controller stays NOT_STARTED then.
        """
        if self.is_active:
            raise SessionStateError("A session is already in progress")

        preferences = self.preferences
        snapshot = normalize_performance(self.user.statistics.strategy_performance)
        problems = self.engine.generate_batch(
            preferences, snapshot, preferences.session_length, focused_strategy_id
        )
        if not problems:
            logger.warning(f"Refusing to start session for user {self.user.id}: no problems generated")
            self._reset()
            return None

        self.session = Session(
            user_id=self.user.id,
            problems=problems,
            start_time=self.clock(),
            focused_strategy=StrategyId.parse(focused_strategy_id) if focused_strategy_id else None,
        )
        self.status = SessionStatus.ACTIVE
        self.problem_index = 0
        self.time_limit = preferences.time_limit
        self.time_remaining = self.time_limit
        self.ledger = PerformanceLedger()

        logger.info(
            f"Started session {self.session.id} for user {self.user.id}: "
            f"{len(problems)} problems, {self.time_limit}s each"
        )
        return self.session

    def end_session(self) -> Session | None:
        """
        Finalise the session, from the last problem or early termination.

        Idempotent: ending an already completed session returns it unchanged
        and writes nothing. Store failures propagate to the caller and leave
        ``self.user`` at its last persisted state.
        """
        session = self.session
        if session is None:
            return None
        if session.completed:
            return session

        now = self.clock()
        summary = summarize(session.problems)
        session.end_time = now
        session.completed = True
        session.total_correct = summary.total_correct
        session.total_wrong = summary.total_wrong
        session.average_time = summary.average_time
        session.session_length = summary.completed
        self.status = SessionStatus.COMPLETED

        statistics = merge_session(
            self.user.statistics,
            session.completed_problems,
            self.ledger,
            ended_at=now,
            history_limit=self.history_limit,
        )
        updated = dataclasses.replace(self.user, statistics=statistics)

        logger.info(
            f"Completed session {session.id}: {summary.total_correct}/{summary.completed} correct, "
            f"streak {statistics.current_streak} (best {statistics.best_streak})"
        )
        # The in-memory profile only moves forward once the store has it
        self.store.save_session_result(session, updated)
        self.user = updated
        return session

    def clear_session(self) -> None:
        """Discard the current session without recording anything."""
        if self.session is not None:
            logger.info(f"Cleared session {self.session.id} without saving")
        self._reset()

    def _reset(self) -> None:
        self.session = None
        self.status = SessionStatus.NOT_STARTED
        self.problem_index = 0
        self.time_remaining = self.time_limit
        self.ledger = PerformanceLedger()

    # =========================================================================
    # Events
    # =========================================================================

    def tick(self) -> Problem | None:
        """
        Advance the countdown by one second.

        Returns:
            The problem that timed out on this tick, else None
        """
        if self.status != SessionStatus.ACTIVE:
            return None
        self.time_remaining = max(0, self.time_remaining - 1)
        if self.time_remaining == 0:
            return self._time_out()
        return None

    def elapse(self, seconds: int) -> Problem | None:
        """Deliver up to ``seconds`` ticks, stopping at the first timeout."""
        for _ in range(max(0, seconds)):
            timed_out = self.tick()
            if timed_out is not None:
                return timed_out
        return None

    def pause(self) -> bool:
        if self.status != SessionStatus.ACTIVE:
            return False
        self.status = SessionStatus.PAUSED
        logger.debug("Session paused")
        return True

    def resume(self) -> bool:
        if self.status != SessionStatus.PAUSED:
            return False
        self.status = SessionStatus.ACTIVE
        logger.debug("Session resumed")
        return True

    def set_focus(self, has_focus: bool) -> bool:
        """Focus/visibility change from the UI: lost focus pauses, regained focus resumes."""
        return self.resume() if has_focus else self.pause()

    def submit_answer(self, answer: int | str) -> Problem | None:
        """
        Answer the current problem and advance.

        Returns:
            The answered problem, or None when not ACTIVE (paused, completed,
            not started)

        Raises:
            InvalidAnswerError: input is not a number; nothing is recorded
        """
        if self.status != SessionStatus.ACTIVE:
            return None
        value = parse_answer(answer)
        problem = self.current_problem
        is_correct = value == problem.correct_answer
        problem.record_outcome(
            user_answer=value,
            is_correct=is_correct,
            time_spent=self.time_limit - self.time_remaining,
            completed_at=self.clock(),
        )
        logger.debug(f"Answer {value} for {problem.expression}: {'correct' if is_correct else 'wrong'}")
        self._report(problem)
        self._advance()
        return problem

    def _time_out(self) -> Problem:
        problem = self.current_problem
        problem.record_outcome(
            user_answer=None,
            is_correct=False,
            time_spent=self.time_limit,
            completed_at=self.clock(),
            timed_out=True,
        )
        logger.debug(f"Timed out on {problem.expression}")
        self._report(problem)
        self._advance()
        return problem

    def _report(self, problem: Problem) -> None:
        self.ledger.record_attempt(problem.intended_strategy, bool(problem.is_correct))
        if self.on_attempt is not None:
            self.on_attempt(problem)

    def _advance(self) -> None:
        if self.problem_index < len(self.session.problems) - 1:
            self.problem_index += 1
            self.time_remaining = self.time_limit
        else:
            self.end_session()
