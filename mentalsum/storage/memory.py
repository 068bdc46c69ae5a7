"""In-memory ProfileStore used by tests and throwaway runs."""

from __future__ import annotations

import copy
from typing import Any

from mentalsum.core.errors import StorageError
from mentalsum.core.models import Session, User
from mentalsum.storage.base import Backup, parse_backup


class InMemoryStore:
    """
    Dict-backed store. Objects are deep-copied in and out so callers never
    share state with the store.

    Set ``fail_writes`` to make every write raise StorageError.
    """

    def __init__(self, fail_writes: bool = False):
        self.fail_writes = fail_writes
        self.users: dict[str, User] = {}
        self.sessions: dict[str, Session] = {}
        self.current_user_id: str | None = None
        self.write_count = 0

    def _check_write(self) -> None:
        if self.fail_writes:
            raise StorageError("Write failed: store is read-only")
        self.write_count += 1

    # Users

    def load_user(self, user_id: str) -> User | None:
        user = self.users.get(user_id)
        return copy.deepcopy(user) if user else None

    def save_user(self, user: User) -> None:
        self._check_write()
        self.users[user.id] = copy.deepcopy(user)

    def list_users(self) -> list[User]:
        users = sorted(self.users.values(), key=lambda u: u.created_at)
        return [copy.deepcopy(u) for u in users]

    def delete_user(self, user_id: str) -> bool:
        self._check_write()
        if user_id not in self.users:
            return False
        del self.users[user_id]
        self.sessions = {sid: s for sid, s in self.sessions.items() if s.user_id != user_id}
        if self.current_user_id == user_id:
            self.current_user_id = None
        return True

    # Sessions

    def save_session(self, session: Session) -> None:
        self._check_write()
        self.sessions[session.id] = copy.deepcopy(session)

    def save_session_result(self, session: Session, user: User) -> None:
        self._check_write()
        self.sessions[session.id] = copy.deepcopy(session)
        self.users[user.id] = copy.deepcopy(user)

    def load_session(self, session_id: str) -> Session | None:
        session = self.sessions.get(session_id)
        return copy.deepcopy(session) if session else None

    def list_sessions(self, user_id: str) -> list[Session]:
        sessions = [s for s in self.sessions.values() if s.user_id == user_id]
        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return [copy.deepcopy(s) for s in sessions]

    # App state

    def get_current_user_id(self) -> str | None:
        return self.current_user_id

    def set_current_user_id(self, user_id: str | None) -> None:
        self._check_write()
        self.current_user_id = user_id

    # Backup

    def export_data(self) -> dict[str, Any]:
        return Backup(
            users=list(self.users.values()),
            sessions=list(self.sessions.values()),
            current_user_id=self.current_user_id,
        ).to_dict()

    def import_data(self, data: dict[str, Any]) -> None:
        backup = parse_backup(data)
        self._check_write()
        self.users = {u.id: u for u in backup.users}
        self.sessions = {s.id: s for s in backup.sessions}
        self.current_user_id = backup.current_user_id
