"""
Fatebound Breach - Game Flow

Composes the engine components into the per-turn loop:

    new_game → [assign] → play_turn → [assign] → play_turn → ... → RESOLVED

Between turns the enemy intents for the next turn are planned and the next
hand is dealt, so the state handed back for planning is always inspectable.
"""

from dataclasses import replace
from typing import Iterable, Sequence

from src.engine.base import (
    Assignment,
    Enemy,
    GameState,
    GameStatus,
    Grid,
    Player,
    TurnResult,
)
from src.engine.combat import CombatResolver, TurnOutcome
from src.engine.errors import SessionStateError
from src.engine.hand import HandDeriver
from src.engine.intents import plan_intents
from src.engine.validators import validate_seed


def new_game(
    session_seed: bytes | str,
    player: Player,
    enemies: Iterable[Enemy],
    grid: Grid | None = None,
) -> GameState:
    """
    Create the turn-1 state and deal its hand.

    Enemy intents for turn 1 are taken as supplied.

    Raises:
        InvalidSeed: If the seed is not 32 bytes
        ValueError: If enemy identifiers are not unique
    """
    enemies = tuple(enemies)
    ids = [e.id for e in enemies]
    if len(ids) != len(set(ids)):
        raise ValueError(f"Enemy identifiers must be unique, got {ids}.")

    state = GameState(
        session_seed=validate_seed(session_seed),
        player=player,
        enemies=enemies,
        turn_counter=1,
        grid=grid or Grid(),
        status=GameStatus.AWAITING_HAND,
    )
    return HandDeriver.deal(state)


def next_turn(state: GameState) -> GameState:
    """
    Plan intents and deal the hand for state.turn_counter.

    Raises:
        SessionStateError: If the state is not waiting for a hand
    """
    if state.status != GameStatus.AWAITING_HAND:
        raise SessionStateError(
            f"Cannot deal a hand while the game is {state.status.value}."
        )
    planned = replace(state, enemies=plan_intents(state.enemies, state.turn_counter))
    return HandDeriver.deal(planned)


def play_turn(state: GameState, assignments: Sequence[Assignment]) -> TurnOutcome:
    """
    Resolve a turn and, if the game continues, deal the next one.

    The returned outcome's state is ACTIVE (next hand dealt) on CONTINUE and
    RESOLVED otherwise. Its commitment is the same either way.
    """
    outcome = CombatResolver.resolve_turn(state, assignments)
    if outcome.result != TurnResult.CONTINUE:
        return outcome
    return replace(outcome, state=next_turn(outcome.state))
