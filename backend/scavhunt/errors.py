from __future__ import annotations


class HuntError(Exception):
    """
    Base class for every domain failure surfaced by the game engine.

    Incorrect answers are NOT errors; they come back as a normal
    `correct=False` result. Anything raised from here is a failure the
    caller has to display or decide to retry.
    """
    status_code: int = 400
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(HuntError):
    """Hunt, team, clue, clue-set or progress record is missing."""
    status_code = 404


class InvalidState(HuntError):
    """Hunt not active, no current clue, ineligible target, wrong clue-set."""
    status_code = 409


class ValidationFailed(HuntError):
    """Missing required media/answer or bad authoring input."""
    status_code = 422


class StoreFailure(HuntError):
    status_code = 503
    retryable = True

    @classmethod
    def wrap(cls, context: str, exc: Exception) -> "StoreFailure":
        return cls(f"{context}: {exc}")


class ProgressConflict(StoreFailure):
    """Another write to the same team's progress landed first."""
    status_code = 409
