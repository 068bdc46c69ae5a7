"""
Strategy Catalog.

Static table of the fifteen mental-arithmetic strategies: which
operation each belongs to, how its generator scales with difficulty,
and the teaching text shown to learners.

Scaling rules:
- range_band: operands drawn from the difficulty band of the number range
- fixed_operand: one operand is fixed (5, 9, or a power of two)
- factor_table: divisor drawn from a difficulty-capped table, dividend built from it
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from mentalsum.core.models import Problem
from mentalsum.core.types import ALL_STRATEGY_IDS, Operation, StrategyId

ScalingRule = Literal["range_band", "fixed_operand", "factor_table"]


@dataclass(frozen=True)
class StrategyInfo:
    """Catalog entry for one strategy."""

    strategy_id: StrategyId
    name: str
    operation: Operation
    scaling: ScalingRule
    description: str
    example: str
    steps: tuple[str, ...]


_S = StrategyId

STRATEGY_CATALOG: dict[StrategyId, StrategyInfo] = {
    _S.ADDITION_BRIDGING_TO_10S: StrategyInfo(
        _S.ADDITION_BRIDGING_TO_10S,
        "Bridging to 10s",
        Operation.ADDITION,
        "range_band",
        "Adjust one number to make a multiple of 10, then compensate.",
        "88 + 9: think 88 + 10 = 98, then 98 - 1 = 97.",
        (
            "Round one number to the nearest 10.",
            "Add the rounded number.",
            "Adjust the result by the amount rounded.",
        ),
    ),
    _S.ADDITION_DOUBLES: StrategyInfo(
        _S.ADDITION_DOUBLES,
        "Doubles / Near Doubles",
        Operation.ADDITION,
        "range_band",
        "Use knowledge of doubles for numbers that are close together.",
        "47 + 48: think 47 + 47 = 94, then 94 + 1 = 95.",
        (
            "Identify numbers that are doubles or near doubles.",
            "Calculate the double.",
            "Adjust for the difference.",
        ),
    ),
    _S.ADDITION_BREAKING_APART: StrategyInfo(
        _S.ADDITION_BREAKING_APART,
        "Breaking Apart (Decomposition)",
        Operation.ADDITION,
        "range_band",
        "Break one number into tens and ones and add them separately.",
        "67 + 28: think 67 + 20 = 87, then 87 + 8 = 95.",
        (
            "Break one number into tens and ones.",
            "Add the tens to the other number.",
            "Add the ones.",
        ),
    ),
    _S.ADDITION_LEFT_TO_RIGHT: StrategyInfo(
        _S.ADDITION_LEFT_TO_RIGHT,
        "Left-to-Right Addition",
        Operation.ADDITION,
        "range_band",
        "Add place values from left to right: hundreds, then tens, then ones.",
        "45 + 37: think 40 + 30 = 70, 5 + 7 = 12, so 70 + 12 = 82.",
        (
            "Add the highest place values first.",
            "Add the next place values.",
            "Combine the partial sums.",
        ),
    ),
    _S.SUBTRACTION_BRIDGING_DOWN: StrategyInfo(
        _S.SUBTRACTION_BRIDGING_DOWN,
        "Bridging Down (via 10s)",
        Operation.SUBTRACTION,
        "range_band",
        "Subtract in parts, going down to the nearest multiple of 10 first.",
        "83 - 7: think 83 - 3 = 80, then 80 - 4 = 76.",
        (
            "Subtract to reach the nearest lower multiple of 10.",
            "Subtract the remaining amount from that multiple of 10.",
        ),
    ),
    _S.SUBTRACTION_ADDING_UP: StrategyInfo(
        _S.SUBTRACTION_ADDING_UP,
        "Adding Up (Counting On)",
        Operation.SUBTRACTION,
        "range_band",
        "Find the difference by counting up from the smaller number to the larger.",
        "62 - 38: 38 + 2 = 40, 40 + 20 = 60, 60 + 2 = 62, so 2 + 20 + 2 = 24.",
        (
            "Start with the smaller number.",
            "Count up in friendly steps until you reach the larger number.",
            "Sum the amounts you counted up.",
        ),
    ),
    _S.SUBTRACTION_COMPENSATION: StrategyInfo(
        _S.SUBTRACTION_COMPENSATION,
        "Compensation (Subtraction)",
        Operation.SUBTRACTION,
        "range_band",
        "Round the number being subtracted, then compensate.",
        "74 - 29: think 74 - 30 = 44, then 44 + 1 = 45.",
        (
            "Round the subtrahend to the nearest 10.",
            "Perform the subtraction.",
            "Add back what you rounded up by.",
        ),
    ),
    _S.MULTIPLICATION_DOUBLING: StrategyInfo(
        _S.MULTIPLICATION_DOUBLING,
        "Doubling",
        Operation.MULTIPLICATION,
        "fixed_operand",
        "Use repeated doubling for multiplications by 2, 4 or 8.",
        "15 × 4: think 15 × 2 = 30, then 30 × 2 = 60.",
        (
            "Break the multiplier into factors of 2.",
            "Repeatedly double the other number.",
        ),
    ),
    _S.MULTIPLICATION_BREAKING_APART: StrategyInfo(
        _S.MULTIPLICATION_BREAKING_APART,
        "Breaking Apart (Distributive)",
        Operation.MULTIPLICATION,
        "range_band",
        "Break one number into parts, multiply each part, then add the results.",
        "23 × 7: think (20 × 7) + (3 × 7) = 140 + 21 = 161.",
        (
            "Break one number into tens and ones.",
            "Multiply each part by the other number.",
            "Add the products.",
        ),
    ),
    _S.MULTIPLICATION_NEAR_SQUARES: StrategyInfo(
        _S.MULTIPLICATION_NEAR_SQUARES,
        "Near Squares (Difference of Squares)",
        Operation.MULTIPLICATION,
        "range_band",
        "Use (a - b)(a + b) = a² - b² for numbers either side of a middle number.",
        "19 × 21: think 20² - 1² = 400 - 1 = 399.",
        (
            "Find the middle number both factors are equally far from.",
            "Square the middle number.",
            "Square the distance.",
            "Subtract the second square from the first.",
        ),
    ),
    _S.MULTIPLICATION_TIMES_5: StrategyInfo(
        _S.MULTIPLICATION_TIMES_5,
        "Times 5",
        Operation.MULTIPLICATION,
        "fixed_operand",
        "Multiply by 10, then halve the result.",
        "46 × 5: think 46 × 10 = 460, then 460 ÷ 2 = 230.",
        (
            "Multiply the number by 10.",
            "Divide the result by 2.",
        ),
    ),
    _S.MULTIPLICATION_TIMES_9: StrategyInfo(
        _S.MULTIPLICATION_TIMES_9,
        "Times 9",
        Operation.MULTIPLICATION,
        "fixed_operand",
        "Multiply by 10, then subtract the original number.",
        "37 × 9: think 37 × 10 = 370, then 370 - 37 = 333.",
        (
            "Multiply the number by 10.",
            "Subtract the original number from this product.",
        ),
    ),
    _S.DIVISION_FACTOR_RECOGNITION: StrategyInfo(
        _S.DIVISION_FACTOR_RECOGNITION,
        "Factor Recognition",
        Operation.DIVISION,
        "factor_table",
        "Break the divisor into factors and divide by one factor at a time.",
        "144 ÷ 12: think 144 ÷ 2 = 72, then 72 ÷ 6 = 12.",
        (
            "Break the divisor into smaller factors.",
            "Divide by one factor at a time.",
        ),
    ),
    _S.DIVISION_MULTIPLICATION_INVERSE: StrategyInfo(
        _S.DIVISION_MULTIPLICATION_INVERSE,
        "Multiplication Inverse",
        Operation.DIVISION,
        "factor_table",
        "Rephrase division as 'what number multiplied by the divisor gives the dividend?'",
        "91 ÷ 7: think 'what × 7 = 91?' The answer is 13.",
        (
            "Turn the division into a missing-factor multiplication.",
            "Use multiplication facts to find the missing factor.",
        ),
    ),
    _S.DIVISION_ESTIMATION_ADJUSTMENT: StrategyInfo(
        _S.DIVISION_ESTIMATION_ADJUSTMENT,
        "Estimation & Adjustment",
        Operation.DIVISION,
        "factor_table",
        "Estimate the quotient, then adjust it up or down. Answer with the whole-number part.",
        "156 ÷ 13: estimate 10 (130), 26 left, 13 × 2 = 26, so 10 + 2 = 12.",
        (
            "Make an initial estimate for the quotient.",
            "Multiply the estimate by the divisor.",
            "Compare with the dividend and adjust the estimate.",
            "Repeat if necessary.",
        ),
    ),
}

_missing = set(ALL_STRATEGY_IDS) - set(STRATEGY_CATALOG)
if _missing:
    raise RuntimeError(f"Strategy catalog is missing entries: {sorted(s.value for s in _missing)}")


def get_strategy(strategy_id: StrategyId) -> StrategyInfo:
    return STRATEGY_CATALOG[strategy_id]


def operation_for(strategy_id: StrategyId) -> Operation:
    return STRATEGY_CATALOG[strategy_id].operation


def strategies_for(operation: Operation) -> list[StrategyId]:
    """Strategy ids for one operation, in catalog order."""
    return [sid for sid in ALL_STRATEGY_IDS if STRATEGY_CATALOG[sid].operation == operation]


def concise_hint(problem: Problem) -> str:
    """Short, problem-specific hint for the problem's intended strategy."""
    info = STRATEGY_CATALOG.get(problem.intended_strategy)
    if info is None:
        return "Try to break the problem down into simpler steps."

    left, right = problem.operands
    sid = problem.intended_strategy
    if sid == _S.ADDITION_BRIDGING_TO_10S:
        return f"Make one number a round ten: can {left} become {round(left / 10) * 10}?"
    if sid == _S.ADDITION_DOUBLES:
        smaller = min(left, right)
        return f"Is this a near double? Start from {smaller} + {smaller}."
    if sid == _S.MULTIPLICATION_TIMES_9:
        other = left if right == 9 else right
        return f"For × 9: {other} × 10 = {other * 10}, then subtract {other}."
    if sid == _S.MULTIPLICATION_TIMES_5:
        other = left if right == 5 else right
        return f"For × 5: {other} × 10 = {other * 10}, then halve it."
    return info.description
