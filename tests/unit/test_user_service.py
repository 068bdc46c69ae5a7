"""
Unit tests for UserService and relative date formatting.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from mentalsum.core.errors import UserNotFoundError
from mentalsum.core.models import Problem, Session
from mentalsum.core.types import Difficulty, Operation, StrategyId
from mentalsum.profile.service import UserService, format_relative_date


@pytest.fixture
def service(store):
    return UserService(store)


def missed(answer: int | None, timed_out: bool = False) -> Problem:
    problem = Problem(
        operation_type=Operation.ADDITION,
        operands=(8, 7),
        correct_answer=15,
        intended_strategy=StrategyId.ADDITION_BRIDGING_TO_10S,
        difficulty=Difficulty.BEGINNER,
    )
    problem.record_outcome(answer, answer == 15, 5, timed_out=timed_out)
    return problem


class TestUsers:
    """Tests for creating, selecting and deleting learners."""

    def test_first_user_becomes_current(self, service):
        ada = service.create_user("  Ada ")
        service.create_user("Grace")

        assert ada.name == "Ada"
        assert service.get_current_user().id == ada.id
        assert [u.name for u in service.list_users()] == ["Ada", "Grace"]

    def test_empty_name_rejected(self, service):
        with pytest.raises(ValueError):
            service.create_user("   ")

    def test_select_user(self, service):
        service.create_user("Ada")
        grace = service.create_user("Grace")

        service.select_user(grace.id)

        assert service.get_current_user().name == "Grace"

    def test_select_unknown_user(self, service):
        with pytest.raises(UserNotFoundError) as exc_info:
            service.select_user("missing")
        assert exc_info.value.user_id == "missing"

    def test_find_user_by_name_or_prefix(self, service):
        ada = service.create_user("Ada")
        assert service.find_user("ada").id == ada.id
        assert service.find_user(ada.id[:6]).id == ada.id
        with pytest.raises(UserNotFoundError):
            service.find_user("nobody")

    def test_delete_current_falls_back_to_next(self, service, store):
        ada = service.create_user("Ada")
        grace = service.create_user("Grace")
        store.save_session(Session(user_id=ada.id, problems=[missed(14)]))

        assert service.delete_user(ada.id)

        assert service.get_current_user().id == grace.id
        assert store.list_sessions(ada.id) == []

    def test_delete_last_user_clears_current(self, service):
        ada = service.create_user("Ada")
        service.delete_user(ada.id)
        assert service.get_current_user() is None

    def test_delete_unknown_user(self, service):
        assert not service.delete_user("missing")


class TestPreferences:
    """Tests for preference updates."""

    def test_update_scalar(self, service):
        user = service.create_user("Ada")
        updated = service.update_preferences(user.id, time_limit="15", difficulty_level="advanced")

        assert updated.preferences.time_limit == 15
        assert updated.preferences.difficulty_level == Difficulty.ADVANCED
        assert service.get_user(user.id).preferences.time_limit == 15

    def test_nested_updates_merge(self, service):
        user = service.create_user("Ada")
        service.set_operation_enabled(user.id, Operation.DIVISION, False)
        updated = service.set_number_range(user.id, Operation.ADDITION, 50, 10)

        prefs = updated.preferences
        assert not prefs.enabled_operations.division
        assert prefs.enabled_operations.addition
        assert prefs.number_ranges.addition.normalized() == (10, 50)
        assert prefs.number_ranges.subtraction.normalized() == (1, 99)

    def test_invalid_update_not_saved(self, service):
        user = service.create_user("Ada")
        with pytest.raises(ValidationError):
            service.update_preferences(user.id, session_length=0)
        assert service.get_user(user.id).preferences.session_length == 10


class TestReview:
    def test_incorrect_problems_newest_first(self, service, sample_user):
        first, right, second, timeout = missed(14), missed(15), missed(16), missed(None, timed_out=True)
        sample_user.statistics.problem_history = [first, right, second, timeout]

        result = service.incorrect_problems(sample_user, limit=2)

        assert [p.id for p in result] == [timeout.id, second.id]

    def test_recent_sessions(self, service, store, sample_user):
        older = Session(user_id=sample_user.id, problems=[], start_time=datetime(2024, 1, 1))
        newer = Session(user_id=sample_user.id, problems=[], start_time=datetime(2024, 2, 1))
        store.save_session(older)
        store.save_session(newer)

        assert [s.id for s in service.recent_sessions(sample_user)] == [newer.id, older.id]


class TestFormatRelativeDate:
    TODAY = date(2024, 3, 10)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "N/A"),
            (datetime(2024, 3, 10, 23, 59), "Today"),
            (datetime(2024, 3, 9, 0, 1), "Yesterday"),
            (date(2024, 3, 3), "7 days ago"),
            (date(2024, 3, 12), "2024-03-12"),
        ],
    )
    def test_format(self, value, expected):
        assert format_relative_date(value, today=self.TODAY) == expected
