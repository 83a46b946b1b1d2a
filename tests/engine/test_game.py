"""
Fatebound Breach - Game Flow Tests

Tests for new_game / next_turn / play_turn and enemy intent planning.
"""

from dataclasses import replace

import pytest

from src.engine.base import (
    Assignment,
    Enemy,
    EnemyIntent,
    GameStatus,
    Grid,
    Target,
    TurnResult,
)
from src.engine.errors import InvalidSeed, SessionStateError
from src.engine.game import new_game, next_turn, play_turn
from src.engine.hand import HandDeriver
from src.engine.intents import intent_for, plan_intents


def discard_all(state) -> list[Assignment]:
    return [Assignment(i, Target.discard()) for i in range(len(state.hand))]


class TestNewGame:
    def test_deals_turn_one(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)

        assert state.status == GameStatus.ACTIVE
        assert state.turn_counter == 1
        assert state.score == 0
        assert len(state.hand) == 6
        assert state.hand == HandDeriver.derive_from_seed(seed, 1).packets
        assert state.grid == Grid()

    def test_keeps_supplied_intents(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)
        assert [e.intent for e in state.enemies] == [e.intent for e in tough_enemies]

    def test_hex_seed(self, seed, seed_hex, player, tough_enemies):
        assert new_game(seed_hex, player, tough_enemies) == new_game(seed, player, tough_enemies)

    def test_duplicate_enemy_ids(self, seed, player):
        enemies = [Enemy(id="x", hp=1, max_hp=1), Enemy(id="x", hp=2, max_hp=2)]
        with pytest.raises(ValueError, match="unique"):
            new_game(seed, player, enemies)

    def test_bad_seed(self, player, tough_enemies):
        with pytest.raises(InvalidSeed):
            new_game(b"\x00" * 16, player, tough_enemies)


class TestNextTurn:
    def test_requires_awaiting_hand(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)
        with pytest.raises(SessionStateError):
            next_turn(state)

    def test_plans_intents_and_deals(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)
        waiting = replace(state, status=GameStatus.AWAITING_HAND, hand=(), turn_counter=2)

        dealt = next_turn(waiting)

        assert dealt.status == GameStatus.ACTIVE
        assert len(dealt.hand) == 7
        assert [e.intent for e in dealt.enemies] == [
            EnemyIntent.IDLE,       # (2 + 0) % 3 == 2
            EnemyIntent.ATTACK,     # (2 + 1) % 3 == 0
        ]


class TestPlayTurn:
    """Tests for play_turn()."""

    def test_continue_deals_next_hand(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)
        outcome = play_turn(state, discard_all(state))

        assert outcome.result == TurnResult.CONTINUE
        assert outcome.state.status == GameStatus.ACTIVE
        assert outcome.state.turn_counter == 2
        assert outcome.state.hand == HandDeriver.derive_from_seed(seed, 2).packets

    def test_several_turns(self, seed, player, tough_enemies):
        state = new_game(seed, player, tough_enemies)
        for expected_turn, size in ((2, 7), (3, 5), (4, 6)):
            state = play_turn(state, discard_all(state)).state
            assert state.turn_counter == expected_turn
            assert len(state.hand) == size

    def test_terminal_state_is_not_dealt(self, make_state):
        fragile = Enemy(id="e", hp=1, max_hp=1, intent=EnemyIntent.IDLE)
        state = make_state(enemies=[fragile])
        outcome = play_turn(state, [Assignment(0, Target.enemy("e"))])

        assert outcome.result == TurnResult.VICTORY
        assert outcome.state.status == GameStatus.RESOLVED
        assert outcome.state.hand == ()


class TestIntents:
    """Tests for the cyclic intent pattern."""

    @pytest.mark.parametrize("turn,position,intent", [
        (3, 0, EnemyIntent.ATTACK),
        (1, 0, EnemyIntent.ATTACK),
        (2, 0, EnemyIntent.IDLE),
        (1, 1, EnemyIntent.IDLE),
        (2, 1, EnemyIntent.ATTACK),
    ])
    def test_drone_pattern(self, turn, position, intent):
        drone = Enemy(id="d", hp=5, max_hp=5)
        assert intent_for(drone, position, turn) == intent

    def test_sentinel_defends(self):
        sentinel = Enemy(id="s", hp=5, max_hp=5, kind="sentinel")
        assert intent_for(sentinel, 0, 1) == EnemyIntent.DEFEND

    def test_plan_intents_preserves_everything_else(self):
        enemies = (Enemy(id="a", hp=3, max_hp=5, intended_damage=4),)
        planned = plan_intents(enemies, 2)
        assert planned[0].intent == EnemyIntent.IDLE
        assert replace(planned[0], intent=enemies[0].intent) == enemies[0]
