"""
SQLAlchemy-backed ProfileStore.

Every public call runs in its own transaction. Driver and ORM failures
surface as StorageError so callers only handle one error type.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as OrmSession

from mentalsum.core.errors import StorageError
from mentalsum.core.models import Session, User
from mentalsum.storage.base import Backup, parse_backup
from mentalsum.storage.database import Database
from mentalsum.storage.models import AppStateRecord, SessionRecord, UserRecord

CURRENT_USER_KEY = "current_user_id"


def _user_record(user: User) -> UserRecord:
    data = user.to_dict()
    return UserRecord(
        id=user.id,
        name=user.name,
        created_at=user.created_at,
        preferences=data["preferences"],
        statistics=data["statistics"],
    )


def _user_from_record(record: UserRecord) -> User:
    return User.from_dict(
        {
            "id": record.id,
            "name": record.name,
            "created_at": record.created_at,
            "preferences": record.preferences,
            "statistics": record.statistics,
        }
    )


def _session_record(session: Session) -> SessionRecord:
    return SessionRecord(
        id=session.id,
        user_id=session.user_id,
        start_time=session.start_time,
        completed=session.completed,
        total_correct=session.total_correct,
        session_length=session.session_length,
        payload=session.to_dict(),
    )


class SqlStore:
    """ProfileStore over any SQLAlchemy database URL."""

    def __init__(self, database: Database | str, create_tables: bool = True):
        self.db = Database(database) if isinstance(database, str) else database
        if create_tables:
            self.db.init_db()

    @classmethod
    def from_settings(cls, settings) -> SqlStore:
        storage = settings.get_storage_config()
        return cls(Database(storage["database_url"], echo=storage["echo"]))

    @contextmanager
    def _transaction(self, action: str) -> Generator[OrmSession, None, None]:
        try:
            with self.db.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store {action} failed: {e}")
            raise StorageError(f"Could not {action}: {e}") from e

    # =========================================================================
    # Users
    # =========================================================================

    def load_user(self, user_id: str) -> User | None:
        with self._transaction("load user") as session:
            record = session.get(UserRecord, user_id)
            return _user_from_record(record) if record else None

    def save_user(self, user: User) -> None:
        with self._transaction("save user") as session:
            session.merge(_user_record(user))

    def list_users(self) -> list[User]:
        with self._transaction("list users") as session:
            records = session.scalars(select(UserRecord).order_by(UserRecord.created_at)).all()
            return [_user_from_record(r) for r in records]

    def delete_user(self, user_id: str) -> bool:
        with self._transaction("delete user") as session:
            record = session.get(UserRecord, user_id)
            if record is None:
                return False
            session.execute(delete(SessionRecord).where(SessionRecord.user_id == user_id))
            session.delete(record)
            state = session.get(AppStateRecord, CURRENT_USER_KEY)
            if state is not None and state.value == user_id:
                state.value = None
        logger.info(f"Deleted user {user_id} and their sessions")
        return True

    # =========================================================================
    # Sessions
    # =========================================================================

    def save_session(self, session: Session) -> None:
        with self._transaction("save session") as orm:
            orm.merge(_session_record(session))

    def save_session_result(self, session: Session, user: User) -> None:
        with self._transaction("save session result") as orm:
            orm.merge(_user_record(user))
            orm.merge(_session_record(session))

    def load_session(self, session_id: str) -> Session | None:
        with self._transaction("load session") as orm:
            record = orm.get(SessionRecord, session_id)
            return Session.from_dict(record.payload) if record else None

    def list_sessions(self, user_id: str) -> list[Session]:
        with self._transaction("list sessions") as orm:
            records = orm.scalars(
                select(SessionRecord)
                .where(SessionRecord.user_id == user_id)
                .order_by(SessionRecord.start_time.desc())
            ).all()
            return [Session.from_dict(r.payload) for r in records]

    # =========================================================================
    # App state
    # =========================================================================

    def get_current_user_id(self) -> str | None:
        with self._transaction("read app state") as session:
            state = session.get(AppStateRecord, CURRENT_USER_KEY)
            return state.value if state else None

    def set_current_user_id(self, user_id: str | None) -> None:
        with self._transaction("write app state") as session:
            session.merge(AppStateRecord(key=CURRENT_USER_KEY, value=user_id))

    # =========================================================================
    # Backup
    # =========================================================================

    def export_data(self) -> dict[str, Any]:
        with self._transaction("export data") as session:
            users = [_user_from_record(r) for r in session.scalars(select(UserRecord)).all()]
            sessions = [
                Session.from_dict(r.payload)
                for r in session.scalars(select(SessionRecord).order_by(SessionRecord.start_time)).all()
            ]
            state = session.get(AppStateRecord, CURRENT_USER_KEY)
            current = state.value if state else None
        return Backup(users=users, sessions=sessions, current_user_id=current).to_dict()

    def import_data(self, data: dict[str, Any]) -> None:
        """Replace the whole store with a validated backup document."""
        backup = parse_backup(data)
        with self._transaction("import data") as session:
            session.execute(delete(SessionRecord))
            session.execute(delete(UserRecord))
            session.execute(delete(AppStateRecord))
            session.add_all(_user_record(u) for u in backup.users)
            session.flush()
            session.add_all(_session_record(s) for s in backup.sessions)
            session.add(AppStateRecord(key=CURRENT_USER_KEY, value=backup.current_user_id))
        logger.info(f"Imported {len(backup.users)} users and {len(backup.sessions)} sessions")
