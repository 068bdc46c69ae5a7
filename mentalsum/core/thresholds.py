"""
Performance Thresholds.

Single source for the accuracy and attempt thresholds used by strategy
weighting, progress displays and session ratings.

Mastery threshold: 90% accuracy over at least 10 attempts.
Weakness threshold: below 70% accuracy over at least 3 attempts.
"""

from __future__ import annotations

from typing import Literal

from mentalsum.core.types import PerformanceProfile, StrategyId, StrategyMetrics

# Mastery
MASTERY_ACCURACY = 0.90
MASTERY_MIN_ATTEMPTS = 10

# Good / weak
GOOD_ACCURACY = 0.70
WEAKNESS_ACCURACY = 0.70
WEAKNESS_MIN_ATTEMPTS = 3

# Session star rating
THREE_STAR_ACCURACY = 0.90
TWO_STAR_ACCURACY = 0.70

# Adaptive weights
UNTRIED_WEIGHT = 1.0
MASTERED_WEIGHT = 0.01
MIN_TRIED_WEIGHT = 0.05
LOW_ATTEMPT_BOOST = 0.2
ATTEMPT_THRESHOLD = 5

PerformanceCategory = Literal["untried", "weak", "good", "mastered"]


def is_untried(total_attempts: int) -> bool:
    return total_attempts == 0


def is_mastered(correct: int, total_attempts: int) -> bool:
    if total_attempts < MASTERY_MIN_ATTEMPTS:
        return False
    return correct / total_attempts >= MASTERY_ACCURACY


def is_weak(correct: int, total_attempts: int) -> bool:
    if total_attempts < WEAKNESS_MIN_ATTEMPTS:
        return False
    return correct / total_attempts < WEAKNESS_ACCURACY


def performance_category(metrics: StrategyMetrics) -> PerformanceCategory:
    """Classify a strategy's metrics for progress displays."""
    if is_untried(metrics.total_attempts):
        return "untried"
    if is_mastered(metrics.correct, metrics.total_attempts):
        return "mastered"
    if is_weak(metrics.correct, metrics.total_attempts):
        return "weak"
    return "good"


def session_stars(accuracy: float) -> int:
    """Star rating (1-3) for a session accuracy given as a 0-1 fraction."""
    if accuracy >= THREE_STAR_ACCURACY:
        return 3
    if accuracy >= TWO_STAR_ACCURACY:
        return 2
    return 1


def accuracy_color(accuracy: float) -> str:
    """Rich colour for an accuracy given as a 0-1 fraction."""
    if accuracy >= MASTERY_ACCURACY:
        return "green"
    if accuracy >= GOOD_ACCURACY:
        return "yellow"
    return "red"


def _filter(profile: PerformanceProfile, category: PerformanceCategory) -> list[StrategyId]:
    return [sid for sid, metrics in profile.items() if performance_category(metrics) == category]


def weak_strategies(profile: PerformanceProfile) -> list[StrategyId]:
    return _filter(profile, "weak")


def mastered_strategies(profile: PerformanceProfile) -> list[StrategyId]:
    return _filter(profile, "mastered")


def untried_strategies(profile: PerformanceProfile) -> list[StrategyId]:
    return _filter(profile, "untried")
