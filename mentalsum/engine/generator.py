"""
Problem Generator for strategy-targeted practice.

Each strategy has its own generation rule that builds operands whose
structure exercises that strategy (a last digit near ten, factors either
side of a middle number, a composite divisor, ...). Every rule returns
(left, right, answer) with the answer computed from the operands.

Guarantees by construction:
- subtraction: left >= right
- division: right > 0 and left % right == 0, except estimation/adjustment
  where answer == left // right
"""

from __future__ import annotations

import random
from collections.abc import Callable

from loguru import logger

from mentalsum.core.models import Problem
from mentalsum.core.preferences import NumberRange, NumberRanges
from mentalsum.core.strategies import operation_for, strategies_for
from mentalsum.core.types import Difficulty, Operation, StrategyId

Operands = tuple[int, int, int]

# Smallest usable operand per operation
_OPERAND_FLOOR = {
    Operation.ADDITION: 0,
    Operation.SUBTRACTION: 0,
    Operation.MULTIPLICATION: 1,
    Operation.DIVISION: 1,
}

# Tens digit cap for "two-digit with non-trivial ones" operands when the
# configured range has no two-digit numbers
_TENS_CAP = {Difficulty.BEGINNER: 2, Difficulty.INTERMEDIATE: 5, Difficulty.ADVANCED: 9}

_GAP_CAP = {Difficulty.BEGINNER: 19, Difficulty.INTERMEDIATE: 39, Difficulty.ADVANCED: 99}

# (factor cap, quotient cap) for factor recognition
_FACTOR_CAPS = {
    Difficulty.BEGINNER: (3, 6),
    Difficulty.INTERMEDIATE: (4, 10),
    Difficulty.ADVANCED: (6, 12),
}
_TABLE_CAP = {Difficulty.BEGINNER: 6, Difficulty.INTERMEDIATE: 9, Difficulty.ADVANCED: 12}
_ESTIMATION_DIVISORS = {
    Difficulty.BEGINNER: (11, 13),
    Difficulty.INTERMEDIATE: (11, 16),
    Difficulty.ADVANCED: (11, 19),
}

_FACTOR_RETRIES = 20


def difficulty_band(number_range: NumberRange, difficulty: Difficulty) -> tuple[int, int]:
    """
    Usable sub-range of ``number_range`` for a difficulty level.

    Beginner uses the whole range, intermediate the middle third band,
    advanced the upper third.
    """
    low, high = number_range.normalized()
    span = high - low
    if difficulty == Difficulty.INTERMEDIATE:
        low, high = low + span // 3, high - span // 3
    elif difficulty == Difficulty.ADVANCED:
        low = low + (2 * span) // 3
    return low, max(low, high)


class ProblemGenerator:
    """Synthesises a concrete Problem for a strategy, difficulty and number ranges."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self._rules: dict[StrategyId, Callable[[int, int, Difficulty], Operands]] = {
            strategy_id: getattr(self, method) for strategy_id, method in _RULES.items()
        }

    # =========================================================================
    # Public API
    # =========================================================================

    def generate(
        self,
        strategy_id: StrategyId | str,
        difficulty: Difficulty,
        number_ranges: NumberRanges,
    ) -> Problem:
        """
        Generate a problem that exercises ``strategy_id``.

        Unrecognised ids do not raise: a plain problem is generated for the
        operation named by the id's prefix (addition if none matches) and
        attributed to that operation's first strategy.
        """
        parsed = StrategyId.parse(strategy_id)
        if parsed is None:
            operation = _infer_operation(str(strategy_id))
            logger.warning(
                f"Problem generation not implemented for strategy {strategy_id!r}, "
                f"using generic {operation.value} problem"
            )
            attributed = strategies_for(operation)[0]
            low, high = self._band(operation, number_ranges, difficulty)
            left, right, answer = self.generic(operation, low, high)
            return self._build(operation, attributed, difficulty, left, right, answer)

        operation = operation_for(parsed)
        low, high = self._band(operation, number_ranges, difficulty)
        left, right, answer = self._rules[parsed](low, high, difficulty)
        logger.debug(f"Generated {parsed.value} ({difficulty.value}): {left}, {right} -> {answer}")
        return self._build(operation, parsed, difficulty, left, right, answer)

    def generic(self, operation: Operation, low: int, high: int) -> Operands:
        """Plain two-operand problem with the same non-negative / non-zero-divisor guarantees."""
        a = self._int(low, high)
        b = self._int(low, high)
        if operation == Operation.SUBTRACTION:
            if a < b:
                a, b = b, a
            return a, b, a - b
        if operation == Operation.DIVISION:
            b = max(1, b)
            return a * b, b, a
        if operation == Operation.MULTIPLICATION:
            return a, b, a * b
        return a, b, a + b

    # =========================================================================
    # Helpers
    # =========================================================================

    def _band(
        self, operation: Operation, number_ranges: NumberRanges, difficulty: Difficulty
    ) -> tuple[int, int]:
        low, high = difficulty_band(number_ranges.for_operation(operation), difficulty)
        low = max(low, _OPERAND_FLOOR[operation])
        return low, max(low, high)

    def _int(self, low: int, high: int) -> int:
        if low > high:
            low, high = high, low
        return self.rng.randint(low, high)

    def _two_digit_with_ones(self, low: int, high: int, difficulty: Difficulty) -> int:
        """Two-digit number whose ones digit is 2-9, taken from the band when it has room."""
        lo, hi = max(low, 12), min(high, 99)
        if lo <= hi:
            value = self._int(lo, hi)
            if value % 10 < 2:
                value = value - value % 10 + self.rng.randint(2, 9)
            return value
        return self.rng.randint(1, _TENS_CAP[difficulty]) * 10 + self.rng.randint(2, 9)

    @staticmethod
    def _build(
        operation: Operation,
        strategy_id: StrategyId,
        difficulty: Difficulty,
        left: int,
        right: int,
        answer: int,
    ) -> Problem:
        return Problem(
            operation_type=operation,
            operands=(left, right),
            correct_answer=answer,
            intended_strategy=strategy_id,
            difficulty=difficulty,
        )

    # =========================================================================
    # Addition
    # =========================================================================

    def _addition_bridging_to_10s(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        near = self._int(low, high)
        proximity = self.rng.randint(1, 3)
        tens = (near // 10) * 10
        # X7-X9 sits just below a ten, X1-X3 just above
        if self.rng.random() < 0.5:
            near = tens + (10 - proximity)
        else:
            near = tens + proximity
        other = self._int(low, high)
        return near, other, near + other

    def _addition_doubles(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        base = self._int(low, high)
        delta = self.rng.randint(1, 2)
        if self.rng.random() < 0.5 and base - delta >= 0:
            other = base - delta
        else:
            other = base + delta
        return base, other, base + other

    def _addition_breaking_apart(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        other = self._int(low, high)
        split = self._two_digit_with_ones(low, high, difficulty)
        return other, split, other + split

    def _addition_left_to_right(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        lo = max(low, 10)
        hi = high if high >= lo + 9 else lo + 89
        left, right = self._int(lo, hi), self._int(lo, hi)
        return left, right, left + right

    # =========================================================================
    # Subtraction
    # =========================================================================

    def _subtraction_bridging_down(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        tens = max(1, self._int(max(low, 11), max(high, 11)) // 10)
        minuend_ones = self.rng.randint(0, 8)
        minuend = tens * 10 + minuend_ones
        # Larger ones digit forces the subtraction through the ten below
        subtrahend = self.rng.randint(0, tens - 1) * 10 + self.rng.randint(minuend_ones + 1, 9)
        return minuend, subtrahend, minuend - subtrahend

    def _subtraction_adding_up(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        subtrahend = self._int(low, high)
        minuend = subtrahend + self.rng.randint(3, _GAP_CAP[difficulty])
        return minuend, subtrahend, minuend - subtrahend

    def _subtraction_compensation(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        base = self._int(max(low, 8), max(high, 8))
        subtrahend = (base // 10) * 10 + self.rng.randint(8, 9)
        minuend = subtrahend + self._int(max(low, 1), max(high, 1))
        return minuend, subtrahend, minuend - subtrahend

    # =========================================================================
    # Multiplication
    # =========================================================================

    def _multiplication_doubling(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        other = self._int(low, high)
        factor = self.rng.choice((2, 4, 8))
        return other, factor, other * factor

    def _multiplication_breaking_apart(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        split = self._two_digit_with_ones(low, high, difficulty)
        lo, hi = max(low, 2), min(high, 9)
        digit = self._int(lo, hi) if lo <= hi else self.rng.randint(2, 9)
        return split, digit, split * digit

    def _multiplication_near_squares(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        offset = self.rng.randint(1, 3)
        base = self._int(max(low, offset + 1), max(high, offset + 1))
        left, right = base - offset, base + offset
        return left, right, left * right

    def _multiplication_times_5(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        other = self._int(low, high)
        return other, 5, other * 5

    def _multiplication_times_9(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        other = self._int(low, high)
        return other, 9, other * 9

    # =========================================================================
    # Division (dividend built from divisor × quotient)
    # =========================================================================

    def _division_factor_recognition(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        factor_cap, quotient_cap = _FACTOR_CAPS[difficulty]
        for _ in range(_FACTOR_RETRIES):
            divisor = self.rng.randint(2, factor_cap) * self.rng.randint(2, factor_cap)
            quotient = self.rng.randint(2, quotient_cap)
            dividend = divisor * quotient
            if low <= dividend <= high:
                break
        return dividend, divisor, quotient

    def _division_multiplication_inverse(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        divisor = self.rng.randint(2, _TABLE_CAP[difficulty])
        quotient = max(2, self._int(low, high) // divisor)
        return divisor * quotient, divisor, quotient

    def _division_estimation_adjustment(self, low: int, high: int, difficulty: Difficulty) -> Operands:
        divisor = self.rng.randint(*_ESTIMATION_DIVISORS[difficulty])
        quotient = max(2, self._int(low, high) // divisor)
        remainder = self.rng.randint(0, divisor - 1)
        # Answer is the whole-number part of the quotient
        return divisor * quotient + remainder, divisor, quotient


_RULES: dict[StrategyId, str] = {
    StrategyId.ADDITION_BRIDGING_TO_10S: "_addition_bridging_to_10s",
    StrategyId.ADDITION_DOUBLES: "_addition_doubles",
    StrategyId.ADDITION_BREAKING_APART: "_addition_breaking_apart",
    StrategyId.ADDITION_LEFT_TO_RIGHT: "_addition_left_to_right",
    StrategyId.SUBTRACTION_BRIDGING_DOWN: "_subtraction_bridging_down",
    StrategyId.SUBTRACTION_ADDING_UP: "_subtraction_adding_up",
    StrategyId.SUBTRACTION_COMPENSATION: "_subtraction_compensation",
    StrategyId.MULTIPLICATION_DOUBLING: "_multiplication_doubling",
    StrategyId.MULTIPLICATION_BREAKING_APART: "_multiplication_breaking_apart",
    StrategyId.MULTIPLICATION_NEAR_SQUARES: "_multiplication_near_squares",
    StrategyId.MULTIPLICATION_TIMES_5: "_multiplication_times_5",
    StrategyId.MULTIPLICATION_TIMES_9: "_multiplication_times_9",
    StrategyId.DIVISION_FACTOR_RECOGNITION: "_division_factor_recognition",
    StrategyId.DIVISION_MULTIPLICATION_INVERSE: "_division_multiplication_inverse",
    StrategyId.DIVISION_ESTIMATION_ADJUSTMENT: "_division_estimation_adjustment",
}

_unmapped = set(StrategyId) - set(_RULES)
if _unmapped:
    raise RuntimeError(f"No generation rule for: {sorted(s.value for s in _unmapped)}")


def _infer_operation(raw_id: str) -> Operation:
    lowered = raw_id.lower()
    for operation in Operation:
        if lowered.startswith(operation.value):
            return operation
    return Operation.ADDITION
