"""
Fatebound Breach - Game Session

The only mutable holder of game state. The engine's pure functions produce
new snapshots; GameSession swaps its reference and dispatches events to
listeners (the presentation layer, a verifier bridge, ...).

LIFECYCLE:
    AWAITING_SEED → ACTIVE(turn 1) → ACTIVE(turn n+1) ... → RESOLVED
    Any non-terminal state → ABANDONED (caller gave up)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from src.database.checkpoint import CheckpointManager
from src.database.game_session import GameSessionManager
from src.engine import (
    Assignment,
    CommitmentMismatch,
    Enemy,
    GameState,
    GameStatus,
    Grid,
    Player,
    Replay,
    SessionStateError,
    StateCommitment,
    TurnOutcome,
    TurnResult,
    TurnVerifier,
    new_game,
    play_turn,
)
from src.realtime.events import EventPayload, GameEvent

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]


@dataclass(frozen=True)
class TurnRecord:
    """
    Commitment for one resolved turn.

    Attributes:
        turn: Turn that was resolved
        state_hash: StateHash after resolution
        result: Outcome of the turn
        score: Score after resolution
    """
    turn: int
    state_hash: str
    result: TurnResult
    score: int


class GameSession:
    """
    A single game session.

    Args:
        session_id: Identifier (a new UUID when omitted)
        verify: Cross-check every turn with an independent TurnVerifier run
        sessions: Optional persistence for the session record
        checkpoints: Optional persistence for per-turn commitments
    """

    def __init__(
        self,
        session_id: str | None = None,
        *,
        verify: bool = False,
        sessions: GameSessionManager | None = None,
        checkpoints: CheckpointManager | None = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.verify = verify
        self._sessions = sessions
        self._checkpoints = checkpoints
        self._status = GameStatus.AWAITING_SEED
        self._state: GameState | None = None
        self._initial: GameState | None = None
        self._history: list[TurnRecord] = []
        self._turn_assignments: list[tuple[Assignment, ...]] = []
        self._listeners: list[Listener] = []

    # -- Accessors -------------------------------------------------------

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def state(self) -> GameState | None:
        return self._state

    @property
    def history(self) -> tuple[TurnRecord, ...]:
        return tuple(self._history)

    @property
    def state_hash(self) -> str | None:
        """StateHash of the current snapshot."""
        if self._state is None:
            return None
        return StateCommitment.commit_state(self._state)

    @property
    def result(self) -> TurnResult | None:
        """Terminal result, once resolved."""
        if self._status != GameStatus.RESOLVED or not self._history:
            return None
        return self._history[-1].result

    # -- Listeners -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: GameEvent, **data) -> None:
        turn = self._state.turn_counter if self._state else None
        payload = EventPayload(event=event, session_id=self.session_id, turn=turn, data=data)
        for listener in list(self._listeners):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener failed on %s for session %s", event.name, self.session_id)

    # -- Transitions -----------------------------------------------------

    def start(
        self,
        seed: bytes | str,
        player: Player,
        enemies: Iterable[Enemy],
        grid: Grid | None = None,
    ) -> GameState:
        """
        Accept the oracle seed and deal turn 1.

        Raises:
            SessionStateError: If the session already has a seed
            InvalidSeed: If the seed is not 32 bytes
        """
        if self._status != GameStatus.AWAITING_SEED:
            raise SessionStateError(
                f"Session {self.session_id} is {self._status.value}, cannot start."
            )

        state = new_game(seed, player, enemies, grid)
        if self._sessions is not None:
            self._sessions.set_seed(self.session_id, "0x" + state.session_seed.hex())

        self._initial = state
        self._state = state
        self._status = GameStatus.ACTIVE
        logger.info("Session %s started with %d enemies", self.session_id, len(state.enemies))

        self._emit(GameEvent.SEED_RECEIVED, seed="0x" + state.session_seed.hex())
        self._emit(GameEvent.HAND_DEALT, hand_size=len(state.hand), anomaly=state.anomaly.value)
        return state

    def submit(self, assignments: Sequence[Assignment]) -> TurnOutcome:
        """
        Resolve the current turn.

        Raises:
            SessionStateError: If the session is not active
            InvalidAssignment: If the assignments are invalid (state unchanged)
            CommitmentMismatch: If verification is on and the verifier disagrees;
                the session is abandoned
        """
        if self._status != GameStatus.ACTIVE or self._state is None:
            raise SessionStateError(
                f"Session {self.session_id} is {self._status.value}, cannot resolve a turn."
            )

        prior = self._state
        assignments = tuple(assignments)
        outcome = play_turn(prior, assignments)
        state_hash = StateCommitment.commit_state(outcome.state)

        if self.verify:
            self._cross_check(prior, assignments, state_hash)

        record = TurnRecord(
            turn=prior.turn_counter,
            state_hash=state_hash,
            result=outcome.result,
            score=outcome.state.score,
        )
        self._persist(record, outcome.state.turn_counter)

        self._state = outcome.state
        self._history.append(record)
        self._turn_assignments.append(assignments)
        if outcome.is_terminal:
            self._status = GameStatus.RESOLVED

        logger.debug(
            "Session %s turn %d resolved: %s score=%d hash=%s",
            self.session_id, record.turn, record.result.value, record.score, state_hash,
        )

        self._emit(
            GameEvent.TURN_RESOLVED,
            result=outcome.result.value,
            state_hash=state_hash,
            points=outcome.points,
        )
        if outcome.result == TurnResult.VICTORY:
            self._emit(GameEvent.GAME_WON, score=outcome.state.score)
        elif outcome.result == TurnResult.DEFEAT:
            self._emit(GameEvent.GAME_LOST, score=outcome.state.score)
        else:
            self._emit(
                GameEvent.HAND_DEALT,
                hand_size=len(outcome.state.hand),
                anomaly=outcome.state.anomaly.value,
            )
        return outcome

    def abandon(self) -> None:
        """Give up on the session. Terminal sessions are left untouched."""
        if self._status in (GameStatus.RESOLVED, GameStatus.ABANDONED):
            return
        self._status = GameStatus.ABANDONED
        if self._sessions is not None:
            self._sessions.mark_abandoned(self.session_id)
        logger.info("Session %s abandoned", self.session_id)
        self._emit(GameEvent.SESSION_ABANDONED)

    def to_replay(self) -> Replay:
        """Everything a verifier needs to re-run this session."""
        if self._initial is None:
            raise SessionStateError(f"Session {self.session_id} has not started.")
        return Replay(
            session_seed=self._initial.session_seed,
            player=self._initial.player,
            enemies=self._initial.enemies,
            turn_assignments=tuple(self._turn_assignments),
            claimed_hashes=tuple(r.state_hash for r in self._history),
            grid=self._initial.grid,
        )

    # -- Internals -------------------------------------------------------

    def _cross_check(
        self, prior: GameState, assignments: tuple[Assignment, ...], state_hash: str
    ) -> None:
        try:
            TurnVerifier.verify_turn(prior.session_seed, prior, assignments, state_hash)
        except CommitmentMismatch as exc:
            logger.error("Session %s: %s", self.session_id, exc)
            self._emit(
                GameEvent.COMMITMENT_MISMATCH,
                expected=exc.expected,
                actual=exc.actual,
            )
            self.abandon()
            raise

    def _persist(self, record: TurnRecord, next_turn: int) -> None:
        if self._checkpoints is not None:
            self._checkpoints.record(
                self.session_id,
                turn=record.turn,
                state_hash=record.state_hash,
                result=record.result.value,
                score=record.score,
            )
        if self._sessions is not None:
            self._sessions.record_turn(
                self.session_id,
                current_turn=next_turn,
                state_hash=record.state_hash,
                score=record.score,
                result=record.result.value,
            )
