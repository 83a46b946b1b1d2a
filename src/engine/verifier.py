"""
Fatebound Breach - Turn Verifier

The verifying side of the commitment protocol. It is a thin adapter over the
same engine: given the seed, the prior state and the player's assignments it
re-derives the hand from the seed (never trusting a supplied hand), resolves
the turn, and compares its own StateHash with the claimed one.

Any disagreement raises CommitmentMismatch, which is fatal to the session.
"""

from dataclasses import dataclass, field, replace
from typing import Sequence

from src.engine.base import Assignment, Enemy, GameState, GameStatus, Grid, Player
from src.engine.combat import CombatResolver, TurnOutcome
from src.engine.commitment import StateCommitment
from src.engine.errors import SessionStateError
from src.engine.game import new_game, play_turn
from src.engine.hand import HandDeriver
from src.engine.validators import validate_seed

# Statuses a turn may legitimately be played from
PLAYABLE_STATUSES = frozenset({GameStatus.ACTIVE, GameStatus.AWAITING_HAND})


@dataclass(frozen=True)
class Replay:
    """
    Everything needed to reconstruct a game session.

    Attributes:
        session_seed: The 32-byte session seed
        player: Starting player
        enemies: Starting enemies (with turn-1 intents)
        turn_assignments: Assignments for each turn, in order
        claimed_hashes: Optional StateHash claimed after each turn
        grid: Board dimensions
    """
    session_seed: bytes | str
    player: Player
    enemies: tuple[Enemy, ...]
    turn_assignments: tuple[tuple[Assignment, ...], ...]
    claimed_hashes: tuple[str, ...] = field(default_factory=tuple)
    grid: Grid = field(default_factory=Grid)


class TurnVerifier:
    """
    Stateless verification of claimed state hashes.

    All methods are class methods operating on immutable data.
    """

    @classmethod
    def verify_turn(
        cls,
        session_seed: bytes | str,
        prior_state: GameState,
        assignments: Sequence[Assignment],
        claimed_hash: str,
    ) -> TurnOutcome:
        """
        Independently resolve a turn and check the claimed hash.

        Args:
            session_seed: The session seed known to the verifier
            prior_state: State at the start of the turn (hand is ignored)
            assignments: The player's assignments
            claimed_hash: StateHash the client claims after resolution

        Returns:
            The verifier's own TurnOutcome

        Raises:
            CommitmentMismatch: If the recomputed hash differs
            InvalidAssignment: If the assignments do not fit the derived hand
            SessionStateError: If the prior state is resolved or abandoned
        """
        if prior_state.status not in PLAYABLE_STATUSES:
            raise SessionStateError(
                f"Cannot verify a turn from a {prior_state.status.value} state."
            )
        base = replace(
            prior_state,
            session_seed=validate_seed(session_seed),
            status=GameStatus.AWAITING_HAND,
        )
        outcome = CombatResolver.resolve_turn(HandDeriver.deal(base), assignments)
        StateCommitment.verify(
            claimed_hash,
            StateCommitment.commit_state(outcome.state),
            turn=prior_state.turn_counter,
        )
        return outcome

    @classmethod
    def replay(cls, record: Replay) -> tuple[str, ...]:
        """
        Re-run a whole session and return the StateHash after each turn.

        When claimed hashes are present, each is checked as soon as its turn
        is resolved.

        Raises:
            CommitmentMismatch: At the first claimed hash that differs
            InvalidAssignment: If a turn's assignments are invalid, or turns
                continue after the game resolved
        """
        state = new_game(record.session_seed, record.player, record.enemies, record.grid)
        hashes: list[str] = []

        for turn_index, assignments in enumerate(record.turn_assignments):
            turn = state.turn_counter
            outcome = play_turn(state, assignments)
            digest = StateCommitment.commit_state(outcome.state)
            if turn_index < len(record.claimed_hashes):
                StateCommitment.verify(record.claimed_hashes[turn_index], digest, turn=turn)
            hashes.append(digest)
            state = outcome.state

        return tuple(hashes)
