"""
Domain models: problems, sessions, users and their statistics.

Plain dataclasses with to_dict/from_dict so the persistence layer can
store them as JSON documents. Datetimes are serialised as ISO strings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from mentalsum.core.errors import ProblemAlreadyAnsweredError
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.types import (
    Difficulty,
    Operation,
    PerformanceProfile,
    StrategyId,
    initialize_strategy_performance,
    normalize_performance,
    performance_to_dict,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | datetime | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# Problem
# =============================================================================


@dataclass
class Problem:
    """
    A single generated arithmetic problem.

    user_answer, is_correct and completed_at stay unset until the learner
    answers or the problem times out, then they are written exactly once.
    """

    operation_type: Operation
    operands: tuple[int, int]
    correct_answer: int
    intended_strategy: StrategyId
    difficulty: Difficulty
    id: str = field(default_factory=new_id)
    time_spent: int = 0
    attempted_at: datetime = field(default_factory=datetime.now)
    user_answer: int | None = None
    is_correct: bool | None = None
    completed_at: datetime | None = None
    timed_out: bool = False

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def expression(self) -> str:
        left, right = self.operands
        return f"{left} {self.operation_type.symbol} {right}"

    def record_outcome(
        self,
        user_answer: int | None,
        is_correct: bool,
        time_spent: int,
        completed_at: datetime | None = None,
        timed_out: bool = False,
    ) -> None:
        """Stamp the learner's outcome. Raises if the problem was already completed."""
        if self.completed_at is not None:
            raise ProblemAlreadyAnsweredError(f"Problem {self.id} already has an outcome")
        self.user_answer = user_answer
        self.is_correct = is_correct
        self.time_spent = time_spent
        self.timed_out = timed_out
        self.completed_at = completed_at or datetime.now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "operation_type": self.operation_type.value,
            "operands": list(self.operands),
            "correct_answer": self.correct_answer,
            "intended_strategy": self.intended_strategy.value,
            "difficulty": self.difficulty.value,
            "time_spent": self.time_spent,
            "attempted_at": _iso(self.attempted_at),
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "completed_at": _iso(self.completed_at),
            "timed_out": self.timed_out,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Problem:
        left, right = data["operands"]
        return cls(
            id=data["id"],
            operation_type=Operation(data["operation_type"]),
            operands=(int(left), int(right)),
            correct_answer=int(data["correct_answer"]),
            intended_strategy=StrategyId(data["intended_strategy"]),
            difficulty=Difficulty(data["difficulty"]),
            time_spent=int(data.get("time_spent", 0)),
            attempted_at=_parse_dt(data.get("attempted_at")) or datetime.now(),
            user_answer=data.get("user_answer"),
            is_correct=data.get("is_correct"),
            completed_at=_parse_dt(data.get("completed_at")),
            timed_out=bool(data.get("timed_out", False)),
        )


# =============================================================================
# Session
# =============================================================================


@dataclass
class Session:
    """One timed run of a fixed number of problems for one learner."""

    user_id: str
    problems: list[Problem]
    id: str = field(default_factory=new_id)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime | None = None
    completed: bool = False
    total_correct: int = 0
    total_wrong: int = 0
    average_time: float = 0.0
    session_length: int | None = None
    focused_strategy: StrategyId | None = None

    def __post_init__(self) -> None:
        # Planned length until the session ends, then the completed count
        if self.session_length is None:
            self.session_length = len(self.problems)

    @property
    def completed_problems(self) -> list[Problem]:
        return [p for p in self.problems if p.completed_at is not None]

    @property
    def accuracy(self) -> float:
        answered = self.total_correct + self.total_wrong
        return self.total_correct / answered if answered else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "start_time": _iso(self.start_time),
            "end_time": _iso(self.end_time),
            "problems": [p.to_dict() for p in self.problems],
            "completed": self.completed,
            "total_correct": self.total_correct,
            "total_wrong": self.total_wrong,
            "average_time": self.average_time,
            "session_length": self.session_length,
            "focused_strategy": self.focused_strategy.value if self.focused_strategy else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        focused = data.get("focused_strategy")
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            start_time=_parse_dt(data.get("start_time")) or datetime.now(),
            end_time=_parse_dt(data.get("end_time")),
            problems=[Problem.from_dict(p) for p in data.get("problems", [])],
            completed=bool(data.get("completed", False)),
            total_correct=int(data.get("total_correct", 0)),
            total_wrong=int(data.get("total_wrong", 0)),
            average_time=float(data.get("average_time", 0.0)),
            session_length=_optional_int(data.get("session_length")),
            focused_strategy=StrategyId(focused) if focused else None,
        )


# =============================================================================
# User statistics
# =============================================================================


@dataclass
class OperationStats:
    attempted: int = 0
    correct: int = 0
    average_time: float = 0.0
    fastest_time: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "correct": self.correct,
            "average_time": self.average_time,
            "fastest_time": self.fastest_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationStats:
        return cls(
            attempted=int(data.get("attempted", 0)),
            correct=int(data.get("correct", 0)),
            average_time=float(data.get("average_time", 0.0)),
            fastest_time=int(data.get("fastest_time", 0)),
        )


def _default_operation_stats() -> dict[Operation, OperationStats]:
    return {op: OperationStats() for op in Operation}


@dataclass
class UserStatistics:
    """Lifetime statistics for one user."""

    total_problems: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    total_sessions: int = 0
    average_time_per_problem: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    last_session_date: datetime | None = None
    operation_stats: dict[Operation, OperationStats] = field(default_factory=_default_operation_stats)
    strategy_performance: PerformanceProfile = field(default_factory=initialize_strategy_performance)
    problem_history: list[Problem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_problems": self.total_problems,
            "correct_answers": self.correct_answers,
            "wrong_answers": self.wrong_answers,
            "total_sessions": self.total_sessions,
            "average_time_per_problem": self.average_time_per_problem,
            "current_streak": self.current_streak,
            "best_streak": self.best_streak,
            "last_session_date": _iso(self.last_session_date),
            "operation_stats": {op.value: s.to_dict() for op, s in self.operation_stats.items()},
            "strategy_performance": performance_to_dict(self.strategy_performance),
            "problem_history": [p.to_dict() for p in self.problem_history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserStatistics:
        data = data or {}
        operation_stats = _default_operation_stats()
        for key, value in (data.get("operation_stats") or {}).items():
            operation_stats[Operation(key)] = OperationStats.from_dict(value)
        return cls(
            total_problems=int(data.get("total_problems", 0)),
            correct_answers=int(data.get("correct_answers", 0)),
            wrong_answers=int(data.get("wrong_answers", 0)),
            total_sessions=int(data.get("total_sessions", 0)),
            average_time_per_problem=float(data.get("average_time_per_problem", 0.0)),
            current_streak=int(data.get("current_streak", 0)),
            best_streak=int(data.get("best_streak", 0)),
            last_session_date=_parse_dt(data.get("last_session_date")),
            operation_stats=operation_stats,
            strategy_performance=normalize_performance(data.get("strategy_performance")),
            problem_history=[Problem.from_dict(p) for p in data.get("problem_history") or []],
        )


@dataclass
class User:
    name: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    statistics: UserStatistics = field(default_factory=UserStatistics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": _iso(self.created_at),
            "preferences": self.preferences.to_dict(),
            "statistics": self.statistics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=_parse_dt(data.get("created_at")) or datetime.now(),
            preferences=UserPreferences.from_dict(data.get("preferences")),
            statistics=UserStatistics.from_dict(data.get("statistics")),
        )
