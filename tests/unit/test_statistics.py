"""
Unit tests for session summaries, the performance ledger and merge_session.
"""

from datetime import datetime

import pytest

from mentalsum.core.models import Problem, UserStatistics
from mentalsum.core.types import (
    Difficulty,
    Operation,
    StrategyId,
    StrategyMetrics,
    initialize_strategy_performance,
)
from mentalsum.session.statistics import PerformanceLedger, merge_session, summarize

ENDED = datetime(2024, 3, 1, 10, 0, 0)


def make_problem(
    is_correct: bool | None,
    time_spent: int = 5,
    operation: Operation = Operation.ADDITION,
    strategy: StrategyId = StrategyId.ADDITION_DOUBLES,
) -> Problem:
    problem = Problem(
        operation_type=operation,
        operands=(4, 5),
        correct_answer=9,
        intended_strategy=strategy,
        difficulty=Difficulty.BEGINNER,
    )
    if is_correct is not None:
        problem.record_outcome(9 if is_correct else 8, is_correct, time_spent, completed_at=ENDED)
    return problem


def ledger_for(problems: list[Problem]) -> PerformanceLedger:
    ledger = PerformanceLedger()
    for p in problems:
        if p.is_completed:
            ledger.record_attempt(p.intended_strategy, bool(p.is_correct))
    return ledger


class TestSummarize:
    """Tests for session aggregates."""

    def test_only_completed_problems_count(self):
        problems = [make_problem(True, 4), make_problem(False, 6), make_problem(None)]
        summary = summarize(problems)

        assert summary.completed == 2
        assert summary.total_correct == 1
        assert summary.total_wrong == 1
        assert summary.average_time == pytest.approx(5.0)
        assert summary.accuracy == pytest.approx(0.5)
        assert not summary.all_correct

    def test_empty_session(self):
        summary = summarize([make_problem(None)])
        assert summary.completed == 0
        assert summary.average_time == 0.0
        assert not summary.all_correct


class TestPerformanceLedger:
    """Tests for per-attempt recording."""

    def test_record_and_apply(self):
        ledger = PerformanceLedger()
        ledger.record_attempt(StrategyId.ADDITION_DOUBLES, True)
        ledger.record_attempt(StrategyId.ADDITION_DOUBLES, False)
        ledger.record_attempt(StrategyId.MULTIPLICATION_TIMES_9, True)

        profile = initialize_strategy_performance()
        profile[StrategyId.ADDITION_DOUBLES] = StrategyMetrics(3, 1, 4)
        merged = ledger.apply_to(profile)

        assert merged[StrategyId.ADDITION_DOUBLES] == StrategyMetrics(4, 2, 6)
        assert merged[StrategyId.MULTIPLICATION_TIMES_9] == StrategyMetrics(1, 0, 1)
        assert profile[StrategyId.ADDITION_DOUBLES] == StrategyMetrics(3, 1, 4)
        assert ledger.total_attempts == 3

    def test_deltas_are_copies(self):
        ledger = PerformanceLedger()
        ledger.record_attempt(StrategyId.ADDITION_DOUBLES, True)
        ledger.deltas()[StrategyId.ADDITION_DOUBLES].correct = 99
        assert ledger.deltas()[StrategyId.ADDITION_DOUBLES].correct == 1

    def test_clear(self):
        ledger = PerformanceLedger()
        ledger.record_attempt(StrategyId.ADDITION_DOUBLES, True)
        ledger.clear()
        assert ledger.total_attempts == 0
        assert ledger.deltas() == {}


class TestMergeSession:
    """Tests for folding a session into lifetime statistics."""

    def test_totals_and_original_untouched(self):
        stats = UserStatistics()
        problems = [make_problem(True), make_problem(True), make_problem(False)]

        updated = merge_session(stats, problems, ledger_for(problems), ENDED)

        assert updated.total_problems == 3
        assert updated.correct_answers == 2
        assert updated.wrong_answers == 1
        assert updated.total_sessions == 1
        assert updated.last_session_date == ENDED
        assert stats.total_problems == 0
        assert stats.total_sessions == 0

    def test_running_average(self):
        stats = UserStatistics(total_problems=2, average_time_per_problem=10.0)
        problems = [make_problem(True, 4), make_problem(True, 4)]

        updated = merge_session(stats, problems, ledger_for(problems), ENDED)

        assert updated.average_time_per_problem == pytest.approx(7.0)

    def test_streak_increments_on_perfect_session(self):
        stats = UserStatistics(current_streak=1, best_streak=1)
        problems = [make_problem(True)]
        updated = merge_session(stats, problems, ledger_for(problems), ENDED)
        assert updated.current_streak == 2
        assert updated.best_streak == 2

    def test_streak_resets_on_mistake(self):
        stats = UserStatistics(current_streak=5, best_streak=7)
        problems = [make_problem(True), make_problem(False)]
        updated = merge_session(stats, problems, ledger_for(problems), ENDED)
        assert updated.current_streak == 0
        assert updated.best_streak == 7

    def test_empty_session_keeps_streak(self):
        stats = UserStatistics(current_streak=5, best_streak=7)
        updated = merge_session(stats, [], PerformanceLedger(), ENDED)
        assert updated.current_streak == 5
        assert updated.total_sessions == 1

    def test_operation_stats(self):
        problems = [
            make_problem(True, 6, Operation.DIVISION, StrategyId.DIVISION_FACTOR_RECOGNITION),
            make_problem(False, 2, Operation.DIVISION, StrategyId.DIVISION_FACTOR_RECOGNITION),
            make_problem(True, 3),
        ]
        updated = merge_session(UserStatistics(), problems, ledger_for(problems), ENDED)

        division = updated.operation_stats[Operation.DIVISION]
        assert division.attempted == 2
        assert division.correct == 1
        assert division.average_time == pytest.approx(4.0)
        assert division.fastest_time == 2
        assert updated.operation_stats[Operation.ADDITION].fastest_time == 3
        assert updated.operation_stats[Operation.MULTIPLICATION].attempted == 0

    def test_strategy_performance_merged(self):
        problems = [make_problem(True), make_problem(False)]
        updated = merge_session(UserStatistics(), problems, ledger_for(problems), ENDED)
        assert updated.strategy_performance[StrategyId.ADDITION_DOUBLES] == StrategyMetrics(1, 1, 2)

    def test_history_capped_to_most_recent(self):
        old = [make_problem(True) for _ in range(3)]
        stats = UserStatistics(problem_history=old)
        new = [make_problem(False) for _ in range(2)]

        updated = merge_session(stats, new, ledger_for(new), ENDED, history_limit=4)

        assert len(updated.problem_history) == 4
        assert [p.id for p in updated.problem_history] == [old[1].id, old[2].id, new[0].id, new[1].id]
