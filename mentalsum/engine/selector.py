"""Roulette-wheel strategy selection."""

from __future__ import annotations

import random
from collections.abc import Sequence

from loguru import logger

from mentalsum.core.types import StrategyId
from mentalsum.engine.weights import WeightedStrategy


class StrategySelector:
    """
    Weighted random draw over candidate strategies.

    The random source is injected so draws can be reproduced from a seed.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select(self, weighted: Sequence[WeightedStrategy]) -> StrategyId | None:
        """
        Pick one strategy with probability proportional to its weight.

        Returns None only for an empty candidate list. If every weight is
        zero the pick falls back to uniform.
        """
        if not weighted:
            return None

        total_weight = sum(ws.weight for ws in weighted)
        if total_weight <= 0:
            logger.debug("All candidate weights are zero, picking uniformly")
            return self.rng.choice(list(weighted)).strategy_id

        draw = self.rng.random() * total_weight
        cumulative = 0.0
        for ws in weighted:
            cumulative += ws.weight
            if draw < cumulative:
                return ws.strategy_id

        # Float rounding can leave draw == total; the last non-empty slice owns it
        for ws in reversed(weighted):
            if ws.weight > 0:
                return ws.strategy_id
        return weighted[-1].strategy_id
