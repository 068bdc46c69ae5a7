"""
Unit tests for domain models and preferences.

Tests:
- Problem outcomes are written exactly once
- Stored documents from older versions are normalised on load
- Preference validation
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from mentalsum.core.errors import ProblemAlreadyAnsweredError
from mentalsum.core.models import Problem, Session, User
from mentalsum.core.preferences import NumberRange, UserPreferences
from mentalsum.core.types import (
    Difficulty,
    Operation,
    StrategyId,
    StrategyMetrics,
    normalize_performance,
)


@pytest.fixture
def problem():
    return Problem(
        operation_type=Operation.MULTIPLICATION,
        operands=(7, 9),
        correct_answer=63,
        intended_strategy=StrategyId.MULTIPLICATION_TIMES_9,
        difficulty=Difficulty.BEGINNER,
    )


class TestProblem:
    """Tests for Problem."""

    def test_expression(self, problem):
        assert problem.expression == "7 × 9"

    def test_record_outcome_once(self, problem):
        problem.record_outcome(63, True, 4)
        assert problem.is_completed
        with pytest.raises(ProblemAlreadyAnsweredError):
            problem.record_outcome(62, False, 5)
        assert problem.user_answer == 63

    def test_serialisation_keeps_outcome(self, problem):
        problem.record_outcome(None, False, 30, timed_out=True)
        restored = Problem.from_dict(problem.to_dict())
        assert restored.timed_out
        assert restored.user_answer is None
        assert restored.completed_at == problem.completed_at
        assert restored.operands == (7, 9)


class TestSession:
    def test_session_length_defaults_to_problem_count(self, problem):
        assert Session(user_id="u", problems=[problem]).session_length == 1

    def test_zero_length_survives_round_trip(self, problem):
        session = Session(user_id="u", problems=[problem, problem], session_length=0, completed=True)
        restored = Session.from_dict(session.to_dict())
        assert restored.session_length == 0
        assert len(restored.problems) == 2

    def test_missing_length_falls_back_to_problem_count(self, problem):
        data = Session(user_id="u", problems=[problem]).to_dict()
        del data["session_length"]
        assert Session.from_dict(data).session_length == 1

    def test_accuracy(self, problem):
        session = Session(user_id="u", problems=[problem], total_correct=3, total_wrong=1)
        assert session.accuracy == pytest.approx(0.75)


class TestUserDocuments:
    """Tests for loading stored user documents."""

    def test_missing_strategies_filled(self):
        user = User.from_dict(
            {
                "id": "u1",
                "name": "Old",
                "created_at": "2023-01-01T00:00:00",
                "statistics": {
                    "total_problems": 4,
                    "strategy_performance": {"AdditionDoubles": {"correct": 3, "incorrect": 1}},
                },
            }
        )
        performance = user.statistics.strategy_performance
        assert len(performance) == 15
        assert performance[StrategyId.ADDITION_DOUBLES] == StrategyMetrics(3, 1, 4)
        assert performance[StrategyId.DIVISION_FACTOR_RECOGNITION].total_attempts == 0
        assert user.preferences == UserPreferences()
        assert user.created_at == datetime(2023, 1, 1)

    def test_unknown_strategies_dropped(self):
        profile = normalize_performance({"Retired": {"correct": 1}, "AdditionDoubles": {"correct": 2}})
        assert "Retired" not in profile
        assert profile[StrategyId.ADDITION_DOUBLES].correct == 2

    def test_total_recomputed_from_counts(self):
        metrics = StrategyMetrics.from_dict({"correct": 2, "incorrect": 3, "total_attempts": 99})
        assert metrics.total_attempts == 5

    def test_round_trip(self, sample_user):
        sample_user.statistics.current_streak = 4
        sample_user.statistics.operation_stats[Operation.DIVISION].attempted = 2
        restored = User.from_dict(sample_user.to_dict())
        assert restored.statistics.current_streak == 4
        assert restored.statistics.operation_stats[Operation.DIVISION].attempted == 2
        assert restored.preferences == sample_user.preferences


class TestPreferences:
    """Tests for preference validation."""

    def test_defaults(self, default_preferences):
        assert default_preferences.session_length == 10
        assert default_preferences.time_limit == 30
        assert default_preferences.difficulty_level == Difficulty.BEGINNER
        assert default_preferences.number_ranges.for_operation(Operation.MULTIPLICATION).normalized() == (1, 12)
        assert default_preferences.number_ranges.for_operation(Operation.DIVISION).normalized() == (1, 144)
        assert default_preferences.enabled_operations.enabled() == list(Operation)

    def test_inverted_range_swapped(self):
        assert NumberRange(min=40, max=5).normalized() == (5, 40)
        assert NumberRange.model_validate({"min": 40, "max": 5}).min == 5

    @pytest.mark.parametrize("field", ["session_length", "time_limit"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            UserPreferences(**{field: 0})

    def test_unknown_difficulty_rejected(self):
        with pytest.raises(ValidationError):
            UserPreferences(difficulty_level="expert")
