"""
Problem Engine: the public entry point for adaptive problem generation.

Flow per problem:
1. Candidate strategies = strategies of every enabled operation
2. WeightCalculator turns the performance snapshot into weights
3. StrategySelector draws one strategy
4. ProblemGenerator builds operands for it

A focused strategy bypasses steps 1-3 (targeted remedial practice).
"""

from __future__ import annotations

import random

from loguru import logger

from mentalsum.core.models import Problem
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.strategies import strategies_for
from mentalsum.core.types import PerformanceProfile, StrategyId
from mentalsum.engine.generator import ProblemGenerator
from mentalsum.engine.selector import StrategySelector
from mentalsum.engine.weights import WeightCalculator


def candidate_strategies(preferences: UserPreferences) -> list[StrategyId]:
    """Strategies whose operation is enabled, in catalog order."""
    candidates: list[StrategyId] = []
    for operation in preferences.enabled_operations.enabled():
        candidates.extend(strategies_for(operation))
    return candidates


class ProblemEngine:
    """
    Chooses and generates practice problems.

    All randomness flows from one injected ``random.Random`` so a seeded
    engine reproduces the same strategy draws and operands.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        weight_calculator: WeightCalculator | None = None,
    ):
        self.rng = rng or random.Random()
        self.weights = weight_calculator or WeightCalculator()
        self.selector = StrategySelector(self.rng)
        self.generator = ProblemGenerator(self.rng)

    @classmethod
    def seeded(cls, seed: int | None) -> ProblemEngine:
        return cls(rng=random.Random(seed))

    def select_strategy(
        self,
        preferences: UserPreferences,
        performance: PerformanceProfile,
    ) -> StrategyId | None:
        candidates = candidate_strategies(preferences)
        if not candidates:
            logger.warning("No candidate strategies available: every operation is disabled")
            return None
        weighted = self.weights.calculate(candidates, performance)
        return self.selector.select(weighted)

    def generate_problem(
        self,
        preferences: UserPreferences,
        performance: PerformanceProfile,
        focused_strategy_id: StrategyId | str | None = None,
    ) -> Problem | None:
        """
        Generate the next problem for a learner.

        Args:
            preferences: Enabled operations, difficulty and number ranges
            performance: PerformanceProfile snapshot used for weighting
            focused_strategy_id: Practise only this strategy, skipping selection

        Returns:
            A Problem, or None when no operation is enabled
        """
        difficulty = preferences.difficulty_level

        if focused_strategy_id:
            logger.debug(f"Generating focused problem for strategy {focused_strategy_id}")
            return self.generator.generate(focused_strategy_id, difficulty, preferences.number_ranges)

        strategy_id = self.select_strategy(preferences, performance)
        if strategy_id is None:
            return None
        return self.generator.generate(strategy_id, difficulty, preferences.number_ranges)

    def generate_batch(
        self,
        preferences: UserPreferences,
        performance: PerformanceProfile,
        count: int,
        focused_strategy_id: StrategyId | str | None = None,
    ) -> list[Problem]:
        """
        Generate ``count`` problems from one performance snapshot.

        Weights are computed once for the whole batch, so answers given
        later in a session never change which strategies appear in it.
        """
        if focused_strategy_id:
            return [
                self.generator.generate(
                    focused_strategy_id, preferences.difficulty_level, preferences.number_ranges
                )
                for _ in range(count)
            ]

        candidates = candidate_strategies(preferences)
        if not candidates:
            logger.warning("No candidate strategies available: every operation is disabled")
            return []

        weighted = self.weights.calculate(candidates, performance)
        problems = []
        for _ in range(count):
            strategy_id = self.selector.select(weighted)
            problems.append(
                self.generator.generate(
                    strategy_id, preferences.difficulty_level, preferences.number_ranges
                )
            )
        return problems
