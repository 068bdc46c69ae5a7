"""
Core enumerations and per-strategy performance metrics.

A PerformanceProfile maps every StrategyId to a StrategyMetrics record.
All 15 keys are always present; missing keys (older stored profiles)
are filled with zeroed metrics on load.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class Operation(str, Enum):
    """Arithmetic operation a strategy belongs to."""

    ADDITION = "addition"
    SUBTRACTION = "subtraction"
    MULTIPLICATION = "multiplication"
    DIVISION = "division"

    @property
    def symbol(self) -> str:
        return _OPERATION_SYMBOLS[self]


_OPERATION_SYMBOLS = {
    Operation.ADDITION: "+",
    Operation.SUBTRACTION: "-",
    Operation.MULTIPLICATION: "×",
    Operation.DIVISION: "÷",
}


class Difficulty(str, Enum):
    """Difficulty level; compresses the usable part of a number range."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class StrategyId(str, Enum):
    """The fifteen mental-arithmetic strategies."""

    ADDITION_BRIDGING_TO_10S = "AdditionBridgingTo10s"
    ADDITION_DOUBLES = "AdditionDoubles"
    ADDITION_BREAKING_APART = "AdditionBreakingApart"
    ADDITION_LEFT_TO_RIGHT = "AdditionLeftToRight"
    SUBTRACTION_BRIDGING_DOWN = "SubtractionBridgingDown"
    SUBTRACTION_ADDING_UP = "SubtractionAddingUp"
    SUBTRACTION_COMPENSATION = "SubtractionCompensation"
    MULTIPLICATION_DOUBLING = "MultiplicationDoubling"
    MULTIPLICATION_BREAKING_APART = "MultiplicationBreakingApart"
    MULTIPLICATION_NEAR_SQUARES = "MultiplicationNearSquares"
    MULTIPLICATION_TIMES_5 = "MultiplicationTimes5"
    MULTIPLICATION_TIMES_9 = "MultiplicationTimes9"
    DIVISION_FACTOR_RECOGNITION = "DivisionFactorRecognition"
    DIVISION_MULTIPLICATION_INVERSE = "DivisionMultiplicationInverse"
    DIVISION_ESTIMATION_ADJUSTMENT = "DivisionEstimationAdjustment"

    @classmethod
    def parse(cls, value: str | StrategyId) -> StrategyId | None:
        """Return the matching id, or None if ``value`` is not a known strategy."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


ALL_STRATEGY_IDS: tuple[StrategyId, ...] = tuple(StrategyId)


@dataclass
class StrategyMetrics:
    """Attempt counters for one strategy. total_attempts == correct + incorrect."""

    correct: int = 0
    incorrect: int = 0
    total_attempts: int = 0

    @property
    def accuracy(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.correct / self.total_attempts

    def record(self, is_correct: bool) -> None:
        self.total_attempts += 1
        if is_correct:
            self.correct += 1
        else:
            self.incorrect += 1

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StrategyMetrics:
        correct = max(0, int(data.get("correct", 0)))
        incorrect = max(0, int(data.get("incorrect", 0)))
        return cls(correct=correct, incorrect=incorrect, total_attempts=correct + incorrect)


PerformanceProfile = dict[StrategyId, StrategyMetrics]


def initialize_strategy_performance() -> PerformanceProfile:
    """Build a profile with zeroed metrics for every strategy."""
    return {strategy_id: StrategyMetrics() for strategy_id in ALL_STRATEGY_IDS}


def normalize_performance(raw: dict[Any, Any] | None) -> PerformanceProfile:
    """
    Coerce stored performance data into a complete PerformanceProfile.

    Unknown keys are dropped and missing strategies get zeroed metrics.
    """
    profile = initialize_strategy_performance()
    for key, value in (raw or {}).items():
        strategy_id = StrategyId.parse(key)
        if strategy_id is None:
            continue
        if isinstance(value, StrategyMetrics):
            profile[strategy_id] = StrategyMetrics(
                value.correct, value.incorrect, value.correct + value.incorrect
            )
        else:
            profile[strategy_id] = StrategyMetrics.from_dict(value)
    return profile


def performance_to_dict(profile: PerformanceProfile) -> dict[str, dict[str, int]]:
    return {strategy_id.value: metrics.to_dict() for strategy_id, metrics in profile.items()}
