"""
User Service: learner profiles on top of a ProfileStore.

- create / select / delete learners and track the current one
- preference updates re-validated through the pydantic models
- review helpers: recently missed problems, recent sessions
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from loguru import logger

from mentalsum.core.errors import UserNotFoundError
from mentalsum.core.models import Problem, Session, User
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.types import Operation
from mentalsum.storage.base import ProfileStore


def _deep_merge(base: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def format_relative_date(value: datetime | date | None, today: date | None = None) -> str:
    """Human-friendly day distance: Today, Yesterday, 'N days ago' or N/A."""
    if value is None:
        return "N/A"
    target = value.date() if isinstance(value, datetime) else value
    today = today or date.today()
    days = (today - target).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days > 1:
        return f"{days} days ago"
    return target.isoformat()


class UserService:
    """Learner profile operations."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def create_user(self, name: str, preferences: UserPreferences | None = None) -> User:
        name = name.strip()
        if not name:
            raise ValueError("User name cannot be empty")
        user = User(name=name, preferences=preferences or UserPreferences())
        self.store.save_user(user)
        if self.store.get_current_user_id() is None:
            self.store.set_current_user_id(user.id)
        logger.info(f"Created user {user.name} ({user.id})")
        return user

    def get_user(self, user_id: str) -> User:
        user = self.store.load_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def get_current_user(self) -> User | None:
        user_id = self.store.get_current_user_id()
        if user_id is None:
            return None
        user = self.store.load_user(user_id)
        if user is None:
            logger.warning(f"Current user {user_id} no longer exists, clearing selection")
            self.store.set_current_user_id(None)
        return user

    def select_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        self.store.set_current_user_id(user.id)
        return user

    def list_users(self) -> list[User]:
        return self.store.list_users()

    def find_user(self, key: str) -> User:
        """Look a user up by id, id prefix, or case-insensitive name."""
        users = self.list_users()
        for user in users:
            if user.id == key:
                return user
        matches = [u for u in users if u.id.startswith(key) or u.name.lower() == key.lower()]
        if len(matches) == 1:
            return matches[0]
        raise UserNotFoundError(key)

    def update_preferences(self, user_id: str, **changes: Any) -> User:
        """
        Apply preference changes and persist them.

        Nested dicts (enabled_operations, number_ranges) are merged key by key.

        Raises:
            UserNotFoundError: Unknown user
            pydantic.ValidationError: The resulting preferences are invalid
        """
        user = self.get_user(user_id)
        merged = _deep_merge(user.preferences.to_dict(), changes)
        user.preferences = UserPreferences.model_validate(merged)
        self.store.save_user(user)
        logger.debug(f"Updated preferences for {user.id}: {sorted(changes)}")
        return user

    def set_operation_enabled(self, user_id: str, operation: Operation, enabled: bool) -> User:
        return self.update_preferences(user_id, enabled_operations={operation.value: enabled})

    def set_number_range(self, user_id: str, operation: Operation, low: int, high: int) -> User:
        return self.update_preferences(
            user_id, number_ranges={operation.value: {"min": low, "max": high}}
        )

    def delete_user(self, user_id: str) -> bool:
        was_current = self.store.get_current_user_id() == user_id
        if not self.store.delete_user(user_id):
            return False
        if was_current:
            remaining = self.store.list_users()
            self.store.set_current_user_id(remaining[0].id if remaining else None)
        logger.info(f"Deleted user {user_id}")
        return True

    def incorrect_problems(self, user: User, limit: int = 10) -> list[Problem]:
        """Most recently missed problems (wrong or timed out), newest first."""
        missed = [p for p in user.statistics.problem_history if p.is_correct is False]
        missed.reverse()
        return missed[:limit]

    def recent_sessions(self, user: User, limit: int = 10) -> list[Session]:
        return self.store.list_sessions(user.id)[:limit]
