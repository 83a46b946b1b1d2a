"""
Fatebound Breach - Engine Errors

All engine failures are detected synchronously before any state is produced.
They subclass ValueError so callers that treat bad input generically keep
working.
"""


class EngineError(ValueError):
    """Base class for all engine errors."""


class InvalidSeed(EngineError):
    """Session seed is not 32 bytes (or not valid hex)."""


class InvalidTurn(EngineError):
    """Turn number is below 1."""


class InvalidAssignment(EngineError):
    """Assignments do not cover the hand exactly once, or reference a bad target."""


class UnknownEnemyTarget(InvalidAssignment):
    """Target selector references an enemy that does not exist or is dead."""

    def __init__(self, enemy_id: str) -> None:
        self.enemy_id = enemy_id
        super().__init__(f"Unknown enemy target: {enemy_id!r} is not a live enemy.")


class CommitmentMismatch(EngineError):
    """Two independently computed state hashes disagree for the same inputs."""

    def __init__(self, expected: str, actual: str, turn: int | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.turn = turn
        where = f" at turn {turn}" if turn is not None else ""
        super().__init__(
            f"Commitment mismatch{where}: expected {expected}, computed {actual}."
        )


class SessionStateError(EngineError):
    """Operation is not valid in the session's current lifecycle state."""
