"""
Unit tests for ProblemGenerator.

Every strategy is sampled 1000 times per difficulty and checked for:
- the answer matching the operands under the strategy's operation
- non-negative results and non-zero divisors
- the structural pattern the strategy teaches
"""

import random

import pytest

from mentalsum.core.preferences import NumberRange, NumberRanges
from mentalsum.core.strategies import operation_for, strategies_for
from mentalsum.core.types import ALL_STRATEGY_IDS, Difficulty, Operation, StrategyId
from mentalsum.engine.generator import ProblemGenerator, difficulty_band

SAMPLES = 1000

S = StrategyId


def _is_composite_product(n: int) -> bool:
    return any(n % f == 0 and n // f >= 2 for f in range(2, n))


STRUCTURE = {
    S.ADDITION_BRIDGING_TO_10S: lambda a, b, ans: a % 10 in (1, 2, 3, 7, 8, 9),
    S.ADDITION_DOUBLES: lambda a, b, ans: 0 < abs(a - b) <= 2,
    S.ADDITION_BREAKING_APART: lambda a, b, ans: 10 <= b <= 99 and b % 10 >= 2,
    S.ADDITION_LEFT_TO_RIGHT: lambda a, b, ans: a >= 10 and b >= 10,
    S.SUBTRACTION_BRIDGING_DOWN: lambda a, b, ans: a % 10 < b % 10 and b // 10 < a // 10,
    S.SUBTRACTION_ADDING_UP: lambda a, b, ans: 3 <= a - b,
    S.SUBTRACTION_COMPENSATION: lambda a, b, ans: b % 10 in (8, 9),
    S.MULTIPLICATION_DOUBLING: lambda a, b, ans: b in (2, 4, 8),
    S.MULTIPLICATION_BREAKING_APART: lambda a, b, ans: 10 <= a <= 99 and a % 10 >= 2 and 2 <= b <= 9,
    S.MULTIPLICATION_NEAR_SQUARES: lambda a, b, ans: b - a in (2, 4, 6),
    S.MULTIPLICATION_TIMES_5: lambda a, b, ans: 5 in (a, b),
    S.MULTIPLICATION_TIMES_9: lambda a, b, ans: 9 in (a, b),
    S.DIVISION_FACTOR_RECOGNITION: lambda a, b, ans: _is_composite_product(b),
    S.DIVISION_MULTIPLICATION_INVERSE: lambda a, b, ans: 2 <= b <= 12,
    S.DIVISION_ESTIMATION_ADJUSTMENT: lambda a, b, ans: 11 <= b <= 19,
}


def _arithmetic_holds(problem) -> bool:
    a, b = problem.operands
    op = problem.operation_type
    if op == Operation.ADDITION:
        return problem.correct_answer == a + b
    if op == Operation.SUBTRACTION:
        return a >= b and problem.correct_answer == a - b
    if op == Operation.MULTIPLICATION:
        return problem.correct_answer == a * b
    if b == 0:
        return False
    if problem.intended_strategy == S.DIVISION_ESTIMATION_ADJUSTMENT:
        return a // b == problem.correct_answer
    return a % b == 0 and a // b == problem.correct_answer


@pytest.fixture
def generator():
    return ProblemGenerator(random.Random(31337))


@pytest.fixture
def ranges():
    return NumberRanges()


class TestDifficultyBand:
    """Tests for the difficulty sub-range."""

    def test_beginner_uses_full_range(self):
        assert difficulty_band(NumberRange(min=1, max=99), Difficulty.BEGINNER) == (1, 99)

    def test_intermediate_uses_middle_band(self):
        assert difficulty_band(NumberRange(min=1, max=99), Difficulty.INTERMEDIATE) == (33, 67)

    def test_advanced_uses_upper_band(self):
        assert difficulty_band(NumberRange(min=1, max=99), Difficulty.ADVANCED) == (66, 99)

    def test_degenerate_range(self):
        assert difficulty_band(NumberRange(min=7, max=7), Difficulty.ADVANCED) == (7, 7)

    def test_inverted_range_is_swapped(self):
        assert NumberRange(min=50, max=10).normalized() == (10, 50)
        assert difficulty_band(NumberRange(min=50, max=10), Difficulty.BEGINNER) == (10, 50)


class TestStrategyRules:
    """Sampling tests for all fifteen rules."""

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    @pytest.mark.parametrize("strategy_id", ALL_STRATEGY_IDS, ids=lambda s: s.value)
    def test_samples_satisfy_invariants(self, generator, ranges, strategy_id, difficulty):
        check = STRUCTURE[strategy_id]
        for _ in range(SAMPLES):
            problem = generator.generate(strategy_id, difficulty, ranges)
            a, b = problem.operands

            assert problem.intended_strategy == strategy_id
            assert problem.operation_type == operation_for(strategy_id)
            assert problem.difficulty == difficulty
            assert _arithmetic_holds(problem), f"{strategy_id.value}: {a}, {b} -> {problem.correct_answer}"
            assert problem.correct_answer >= 0
            assert a >= 0 and b >= 0
            assert check(a, b, problem.correct_answer), f"{strategy_id.value}: {a}, {b}"

    def test_adding_up_gap_grows_with_difficulty(self, generator, ranges):
        caps = {Difficulty.BEGINNER: 19, Difficulty.INTERMEDIATE: 39, Difficulty.ADVANCED: 99}
        for difficulty, cap in caps.items():
            for _ in range(200):
                problem = generator.generate(S.SUBTRACTION_ADDING_UP, difficulty, ranges)
                assert 3 <= problem.correct_answer <= cap

    def test_estimation_divisor_caps(self, generator, ranges):
        caps = {Difficulty.BEGINNER: 13, Difficulty.INTERMEDIATE: 16, Difficulty.ADVANCED: 19}
        for difficulty, cap in caps.items():
            divisors = {
                generator.generate(S.DIVISION_ESTIMATION_ADJUSTMENT, difficulty, ranges).operands[1]
                for _ in range(300)
            }
            assert max(divisors) <= cap

    def test_estimation_usually_has_remainder(self, generator, ranges):
        problems = [
            generator.generate(S.DIVISION_ESTIMATION_ADJUSTMENT, Difficulty.BEGINNER, ranges)
            for _ in range(200)
        ]
        assert any(p.operands[0] % p.operands[1] for p in problems)

    def test_doubles_never_equal(self, generator, ranges):
        for _ in range(500):
            a, b = generator.generate(S.ADDITION_DOUBLES, Difficulty.BEGINNER, ranges).operands
            assert a != b

    def test_times_tables_draw_other_operand_from_range(self, generator):
        ranges = NumberRanges(multiplication=NumberRange(min=3, max=7))
        for _ in range(200):
            other, fixed = generator.generate(S.MULTIPLICATION_TIMES_9, Difficulty.BEGINNER, ranges).operands
            assert fixed == 9
            assert 3 <= other <= 7

    def test_tiny_ranges_still_valid(self, generator):
        ranges = NumberRanges(
            addition=NumberRange(min=1, max=3),
            subtraction=NumberRange(min=1, max=3),
            multiplication=NumberRange(min=1, max=2),
            division=NumberRange(min=1, max=4),
        )
        for strategy_id in ALL_STRATEGY_IDS:
            for _ in range(100):
                problem = generator.generate(strategy_id, Difficulty.ADVANCED, ranges)
                assert _arithmetic_holds(problem)
                assert problem.correct_answer >= 0

    def test_same_seed_same_problems(self, ranges):
        first = ProblemGenerator(random.Random(5))
        second = ProblemGenerator(random.Random(5))
        for strategy_id in ALL_STRATEGY_IDS:
            p1 = first.generate(strategy_id, Difficulty.INTERMEDIATE, ranges)
            p2 = second.generate(strategy_id, Difficulty.INTERMEDIATE, ranges)
            assert p1.operands == p2.operands


class TestUnknownStrategy:
    """Unrecognised ids fall back to a generic problem instead of failing."""

    @pytest.mark.parametrize(
        "raw_id,operation",
        [
            ("SubtractionMagic", Operation.SUBTRACTION),
            ("DivisionByGuessing", Operation.DIVISION),
            ("MultiplicationSquares", Operation.MULTIPLICATION),
            ("Nonsense", Operation.ADDITION),
        ],
    )
    def test_generic_fallback(self, generator, ranges, raw_id, operation):
        for _ in range(200):
            problem = generator.generate(raw_id, Difficulty.BEGINNER, ranges)
            assert problem.operation_type == operation
            assert problem.intended_strategy == strategies_for(operation)[0]
            assert _arithmetic_holds(problem)

    def test_generic_division_has_nonzero_divisor(self, generator):
        for _ in range(200):
            dividend, divisor, quotient = generator.generic(Operation.DIVISION, 0, 3)
            assert divisor >= 1
            assert dividend == divisor * quotient
