"""
Session statistics and the per-attempt performance ledger.

Only problems that reached completed_at count toward any aggregate, so
unattempted problems left behind by an early end are ignored.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from mentalsum.core.models import Problem, UserStatistics
from mentalsum.core.types import PerformanceProfile, StrategyId, StrategyMetrics, normalize_performance


@dataclass(frozen=True)
class SessionSummary:
    completed: int
    total_correct: int
    total_wrong: int
    total_time: int
    average_time: float

    @property
    def accuracy(self) -> float:
        return self.total_correct / self.completed if self.completed else 0.0

    @property
    def all_correct(self) -> bool:
        return self.completed > 0 and self.total_correct == self.completed


def summarize(problems: Iterable[Problem]) -> SessionSummary:
    """Aggregate the completed problems of a session."""
    completed = [p for p in problems if p.completed_at is not None]
    correct = sum(1 for p in completed if p.is_correct)
    total_time = sum(p.time_spent for p in completed)
    return SessionSummary(
        completed=len(completed),
        total_correct=correct,
        total_wrong=len(completed) - correct,
        total_time=total_time,
        average_time=total_time / len(completed) if completed else 0.0,
    )


class PerformanceLedger:
    """
    Collects per-strategy outcomes as they happen during a session.

    The controller reports each answered or timed-out problem here right
    away; the accumulated deltas are merged into the stored profile once,
    when the session completes. Clearing a session simply drops the ledger.
    """

    def __init__(self) -> None:
        self._deltas: dict[StrategyId, StrategyMetrics] = {}

    def record_attempt(self, strategy_id: StrategyId, is_correct: bool) -> StrategyMetrics:
        metrics = self._deltas.setdefault(strategy_id, StrategyMetrics())
        metrics.record(is_correct)
        return metrics

    @property
    def total_attempts(self) -> int:
        return sum(m.total_attempts for m in self._deltas.values())

    def deltas(self) -> dict[StrategyId, StrategyMetrics]:
        return {sid: copy.copy(m) for sid, m in self._deltas.items()}

    def apply_to(self, profile: PerformanceProfile) -> PerformanceProfile:
        """Return a new profile with this ledger's counts added."""
        merged = normalize_performance(profile)
        for strategy_id, delta in self._deltas.items():
            current = merged[strategy_id]
            merged[strategy_id] = StrategyMetrics(
                correct=current.correct + delta.correct,
                incorrect=current.incorrect + delta.incorrect,
                total_attempts=current.total_attempts + delta.total_attempts,
            )
        return merged

    def clear(self) -> None:
        self._deltas.clear()


def merge_session(
    statistics: UserStatistics,
    completed_problems: list[Problem],
    ledger: PerformanceLedger,
    ended_at: datetime,
    history_limit: int = 100,
) -> UserStatistics:
    """
    Fold one finished session into a user's lifetime statistics.

    Args:
        statistics: Statistics before the session (not modified)
        completed_problems: Problems of the session that have an outcome
        ledger: Per-strategy outcomes recorded during the session
        ended_at: Completion time, stored as last_session_date
        history_limit: Maximum problems kept in problem_history

    Returns:
        New UserStatistics instance
    """
    updated = copy.deepcopy(statistics)
    summary = summarize(completed_problems)

    previous_total = updated.total_problems
    updated.total_problems += summary.completed
    updated.correct_answers += summary.total_correct
    updated.wrong_answers += summary.total_wrong
    updated.total_sessions += 1
    updated.last_session_date = ended_at

    if updated.total_problems > 0:
        updated.average_time_per_problem = (
            updated.average_time_per_problem * previous_total + summary.total_time
        ) / updated.total_problems
    else:
        updated.average_time_per_problem = 0.0

    if summary.completed > 0:
        if summary.all_correct:
            updated.current_streak += 1
        else:
            updated.current_streak = 0
        updated.best_streak = max(updated.best_streak, updated.current_streak)

    for problem in completed_problems:
        op_stats = updated.operation_stats[problem.operation_type]
        op_stats.attempted += 1
        if problem.is_correct:
            op_stats.correct += 1
        op_stats.average_time = (
            op_stats.average_time * (op_stats.attempted - 1) + problem.time_spent
        ) / op_stats.attempted
        if op_stats.fastest_time == 0:
            op_stats.fastest_time = problem.time_spent
        else:
            op_stats.fastest_time = min(op_stats.fastest_time, problem.time_spent)

    updated.strategy_performance = ledger.apply_to(updated.strategy_performance)

    history = updated.problem_history + [copy.deepcopy(p) for p in completed_problems]
    if history_limit >= 0 and len(history) > history_limit:
        history = history[len(history) - history_limit:]
    updated.problem_history = history

    return updated
