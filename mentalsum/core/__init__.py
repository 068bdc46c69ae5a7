"""
Core domain for MentalSum.

- types: operations, difficulty levels, strategy ids, per-strategy metrics
- preferences: validated user preferences
- models: problems, sessions, users and statistics
- strategies: the static strategy catalog
- thresholds: mastery / weakness thresholds and adaptive weights
"""

from mentalsum.core.errors import (
    InvalidAnswerError,
    MentalSumError,
    ProblemAlreadyAnsweredError,
    SessionStateError,
    StorageError,
    UserNotFoundError,
)
from mentalsum.core.models import OperationStats, Problem, Session, User, UserStatistics
from mentalsum.core.preferences import NumberRange, UserPreferences
from mentalsum.core.strategies import STRATEGY_CATALOG, StrategyInfo, get_strategy
from mentalsum.core.types import (
    ALL_STRATEGY_IDS,
    Difficulty,
    Operation,
    PerformanceProfile,
    StrategyId,
    StrategyMetrics,
    initialize_strategy_performance,
)

__all__ = [
    # Errors
    "MentalSumError",
    "StorageError",
    "SessionStateError",
    "ProblemAlreadyAnsweredError",
    "InvalidAnswerError",
    "UserNotFoundError",
    # Types
    "ALL_STRATEGY_IDS",
    "Difficulty",
    "Operation",
    "PerformanceProfile",
    "StrategyId",
    "StrategyMetrics",
    "initialize_strategy_performance",
    # Models
    "NumberRange",
    "UserPreferences",
    "OperationStats",
    "Problem",
    "Session",
    "User",
    "UserStatistics",
    # Catalog
    "STRATEGY_CATALOG",
    "StrategyInfo",
    "get_strategy",
]
