"""
Weight Calculator for adaptive strategy selection.

Turns a PerformanceProfile snapshot into a selection weight per
candidate strategy:

- Untried: 1.0 (maximal exposure)
- Mastered (>= 90% over >= 10 attempts): 0.01 (kept in rare rotation)
- Otherwise: error rate (1 - accuracy), boosted by 0.2 per missing attempt
  below 5, with a floor of 0.05
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from mentalsum.core import thresholds
from mentalsum.core.types import PerformanceProfile, StrategyId, StrategyMetrics


@dataclass(frozen=True)
class WeightedStrategy:
    strategy_id: StrategyId
    weight: float


class WeightCalculator:
    """
    Computes roulette-wheel weights from historical accuracy.

    Pure: holds only its thresholds, never the profile.
    """

    def __init__(
        self,
        untried_weight: float = thresholds.UNTRIED_WEIGHT,
        mastered_weight: float = thresholds.MASTERED_WEIGHT,
        min_tried_weight: float = thresholds.MIN_TRIED_WEIGHT,
        low_attempt_boost: float = thresholds.LOW_ATTEMPT_BOOST,
        attempt_threshold: int = thresholds.ATTEMPT_THRESHOLD,
        mastery_accuracy: float = thresholds.MASTERY_ACCURACY,
        mastery_min_attempts: int = thresholds.MASTERY_MIN_ATTEMPTS,
    ):
        self.untried_weight = untried_weight
        self.mastered_weight = mastered_weight
        self.min_tried_weight = min_tried_weight
        self.low_attempt_boost = low_attempt_boost
        self.attempt_threshold = attempt_threshold
        self.mastery_accuracy = mastery_accuracy
        self.mastery_min_attempts = mastery_min_attempts

    def weight_for(self, metrics: StrategyMetrics | None) -> float:
        """
        Weight for a single strategy's metrics.

        Args:
            metrics: Historical metrics, or None if the strategy has no record

        Returns:
            Non-negative selection weight
        """
        if metrics is None or metrics.total_attempts == 0:
            return max(0.0, self.untried_weight)

        accuracy = metrics.correct / metrics.total_attempts

        if accuracy >= self.mastery_accuracy and metrics.total_attempts >= self.mastery_min_attempts:
            weight = self.mastered_weight
        else:
            weight = 1.0 - accuracy
            if metrics.total_attempts < self.attempt_threshold:
                weight += self.low_attempt_boost * (self.attempt_threshold - metrics.total_attempts)
            weight = max(weight, self.min_tried_weight)

        return max(0.0, weight)

    def calculate(
        self,
        candidates: Iterable[StrategyId],
        profile: PerformanceProfile,
    ) -> list[WeightedStrategy]:
        """Weights for each candidate, in candidate order."""
        return [
            WeightedStrategy(strategy_id, self.weight_for(profile.get(strategy_id)))
            for strategy_id in candidates
        ]
