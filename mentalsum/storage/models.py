"""
SQLAlchemy models for the persistent store.

Users and sessions are stored as JSON documents next to the few columns
needed for lookups and ordering:
- users: one row per learner, preferences and statistics as JSON
- practice_sessions: completed sessions with their problems as JSON
- app_state: key/value rows (currently only the current user id)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    statistics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<UserRecord id={self.id} name={self.name}>"


class SessionRecord(Base):
    __tablename__ = "practice_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    total_correct: Mapped[int] = mapped_column(Integer, default=0)
    session_length: Mapped[int] = mapped_column(Integer, default=0)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    __table_args__ = (Index("idx_sessions_user_start", "user_id", "start_time"),)

    def __repr__(self) -> str:
        return f"<SessionRecord id={self.id} user={self.user_id} completed={self.completed}>"


class AppStateRecord(Base):
    __tablename__ = "app_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text)
