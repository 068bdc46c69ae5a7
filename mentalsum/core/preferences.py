"""
User preference models.

Preferences are user-editable, so they are validated with pydantic.
An inverted number range is silently corrected rather than rejected.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from mentalsum.core.types import Difficulty, Operation


class NumberRange(BaseModel):
    """Inclusive operand bounds for one operation."""

    min: int = 1
    max: int = 99

    @model_validator(mode="before")
    @classmethod
    def _swap_inverted(cls, data: Any) -> Any:
        if isinstance(data, dict):
            low, high = data.get("min"), data.get("max")
            if low is not None and high is not None and int(low) > int(high):
                data = {**data, "min": high, "max": low}
        return data

    def normalized(self) -> tuple[int, int]:
        """Return (min, max) with min <= max, even if fields were mutated after validation."""
        if self.min > self.max:
            return self.max, self.min
        return self.min, self.max


class EnabledOperations(BaseModel):
    addition: bool = True
    subtraction: bool = True
    multiplication: bool = True
    division: bool = True

    def is_enabled(self, operation: Operation) -> bool:
        return bool(getattr(self, operation.value))

    def enabled(self) -> list[Operation]:
        return [op for op in Operation if self.is_enabled(op)]


class NumberRanges(BaseModel):
    addition: NumberRange = Field(default_factory=lambda: NumberRange(min=1, max=99))
    subtraction: NumberRange = Field(default_factory=lambda: NumberRange(min=1, max=99))
    multiplication: NumberRange = Field(default_factory=lambda: NumberRange(min=1, max=12))
    division: NumberRange = Field(default_factory=lambda: NumberRange(min=1, max=144))

    def for_operation(self, operation: Operation) -> NumberRange:
        return getattr(self, operation.value)


class UserPreferences(BaseModel):
    """Practice preferences stored with each user profile."""

    enabled_operations: EnabledOperations = Field(default_factory=EnabledOperations)
    difficulty_level: Difficulty = Difficulty.BEGINNER
    session_length: int = Field(default=10, ge=1, description="Problems per session")
    time_limit: int = Field(default=30, ge=1, description="Seconds per problem")
    show_strategies: bool = Field(default=True, description="Show strategy hints while practising")
    number_ranges: NumberRanges = Field(default_factory=NumberRanges)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> UserPreferences:
        return cls.model_validate(data or {})
