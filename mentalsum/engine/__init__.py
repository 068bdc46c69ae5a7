"""
Adaptive problem engine.

- weights: accuracy-driven selection weights
- selector: roulette-wheel strategy draw
- generator: per-strategy constrained operand generation
- problem_engine: public entry point tying the three together
"""

from mentalsum.engine.generator import ProblemGenerator, difficulty_band
from mentalsum.engine.problem_engine import ProblemEngine, candidate_strategies
from mentalsum.engine.selector import StrategySelector
from mentalsum.engine.weights import WeightCalculator, WeightedStrategy

__all__ = [
    "ProblemEngine",
    "ProblemGenerator",
    "StrategySelector",
    "WeightCalculator",
    "WeightedStrategy",
    "candidate_strategies",
    "difficulty_band",
]
