"""
Persistent store contract and the JSON backup format.

Backup document:
    {
        "version": "1.0.0",
        "users": [<User.to_dict()>, ...],
        "sessions": [<Session.to_dict()>, ...],
        "currentUserId": "<id>" | null
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from mentalsum.core.errors import StorageError
from mentalsum.core.models import Session, User

BACKUP_VERSION = "1.0.0"


# =============================================================================
# Protocol Definitions
# =============================================================================


@runtime_checkable
class ProfileStore(Protocol):
    """Everything the session controller and profile service persist."""

    def load_user(self, user_id: str) -> User | None:
        ...

    def save_user(self, user: User) -> None:
        ...

    def list_users(self) -> list[User]:
        ...

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and all of their sessions."""
        ...

    def save_session(self, session: Session) -> None:
        ...

    def save_session_result(self, session: Session, user: User) -> None:
        """Write a completed session and the user's merged statistics together."""
        ...

    def load_session(self, session_id: str) -> Session | None:
        ...

    def list_sessions(self, user_id: str) -> list[Session]:
        """Sessions of one user, newest first."""
        ...

    def get_current_user_id(self) -> str | None:
        ...

    def set_current_user_id(self, user_id: str | None) -> None:
        ...

    def export_data(self) -> dict[str, Any]:
        ...

    def import_data(self, data: dict[str, Any]) -> None:
        ...


# =============================================================================
# Backup documents
# =============================================================================


@dataclass
class Backup:
    users: list[User] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    current_user_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": BACKUP_VERSION,
            "users": [u.to_dict() for u in self.users],
            "sessions": [s.to_dict() for s in self.sessions],
            "currentUserId": self.current_user_id,
        }


def parse_backup(data: Any) -> Backup:
    """
    Validate and decode a backup document.

    Raises:
        StorageError: The document is not a valid backup
    """
    if not isinstance(data, dict):
        raise StorageError("Backup must be a JSON object")
    if not isinstance(data.get("users"), list) or not isinstance(data.get("sessions", []), list):
        raise StorageError("Backup must contain 'users' and 'sessions' lists")

    try:
        users = [User.from_dict(u) for u in data["users"]]
        sessions = [Session.from_dict(s) for s in data.get("sessions", [])]
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Invalid backup record: {e}") from e

    user_ids = {u.id for u in users}
    current = data.get("currentUserId")
    if current not in user_ids:
        current = users[0].id if users else None
    sessions = [s for s in sessions if s.user_id in user_ids]
    return Backup(users=users, sessions=sessions, current_user_id=current)
