"""Exception hierarchy for MentalSum."""

from __future__ import annotations


class MentalSumError(Exception):
    """Base class for all MentalSum errors."""


class StorageError(MentalSumError):
    """A persistent store read or write failed."""


class SessionStateError(MentalSumError):
    """An operation is not valid for the current session state."""


class ProblemAlreadyAnsweredError(SessionStateError):
    """A problem's outcome was written more than once."""


class InvalidAnswerError(MentalSumError, ValueError):
    """The learner's input could not be parsed as a number."""


class UserNotFoundError(MentalSumError):
    """No user exists with the requested id."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id
