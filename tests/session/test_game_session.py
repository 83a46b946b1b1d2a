"""
Fatebound Breach - Game Session Tests

Tests for the mutable session holder: lifecycle, events, verification and
persistence hooks.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.engine.base import (
    Assignment,
    Enemy,
    EnemyIntent,
    GameStatus,
    Player,
    Target,
    TurnResult,
)
from src.engine.commitment import StateCommitment
from src.engine.errors import CommitmentMismatch, InvalidAssignment, SessionStateError
from src.engine.verifier import TurnVerifier
from src.realtime.events import GameEvent
from src.session.game_session import GameSession


def discard_all(state) -> list[Assignment]:
    return [Assignment(i, Target.discard()) for i in range(len(state.hand))]


def strike(state, enemy_id: str) -> list[Assignment]:
    """Send every damage packet at one enemy and discard the rest."""
    return [
        Assignment(p.index, Target.enemy(enemy_id) if p.is_damage else Target.discard())
        for p in state.hand
    ]


@pytest.fixture
def events():
    return []


@pytest.fixture
def session(events):
    game = GameSession("session-1")
    game.subscribe(events.append)
    return game


@pytest.fixture
def started(session, seed, player, tough_enemies):
    session.start(seed, player, tough_enemies)
    return session


class TestStart:
    """Tests for GameSession.start()."""

    def test_initial_status(self):
        game = GameSession()
        assert game.status == GameStatus.AWAITING_SEED
        assert game.state is None
        assert game.state_hash is None
        assert game.session_id

    def test_start_deals_turn_one(self, session, seed, player, tough_enemies, events):
        state = session.start(seed, player, tough_enemies)

        assert session.status == GameStatus.ACTIVE
        assert state.turn_counter == 1
        assert len(state.hand) == 6
        assert [e.event for e in events] == [GameEvent.SEED_RECEIVED, GameEvent.HAND_DEALT]
        assert events[0].data["seed"] == "0x" + seed.hex()

    def test_start_twice(self, started, seed, player, tough_enemies):
        with pytest.raises(SessionStateError):
            started.start(seed, player, tough_enemies)

    def test_submit_before_start(self, session):
        with pytest.raises(SessionStateError):
            session.submit([])


class TestSubmit:
    """Tests for GameSession.submit()."""

    def test_continue(self, started, events):
        events.clear()
        prior = started.state

        outcome = started.submit(discard_all(prior))

        assert outcome.result == TurnResult.CONTINUE
        assert started.status == GameStatus.ACTIVE
        assert started.state.turn_counter == 2
        assert len(started.history) == 1
        assert started.history[0].turn == 1
        assert started.history[0].state_hash == started.state_hash
        assert [e.event for e in events] == [GameEvent.TURN_RESOLVED, GameEvent.HAND_DEALT]
        assert events[0].data["state_hash"] == started.state_hash

    def test_invalid_assignment_leaves_state(self, started):
        prior = started.state
        with pytest.raises(InvalidAssignment):
            started.submit(discard_all(prior)[:-1])
        assert started.state is prior
        assert started.history == ()

    def test_victory(self, session, seed, player, events):
        fragile = (Enemy(id="e", hp=1, max_hp=1, intent=EnemyIntent.IDLE),)
        session.start(seed, player, fragile)

        for _ in range(10):
            session.submit(strike(session.state, "e"))
            if session.status != GameStatus.ACTIVE:
                break

        assert session.status == GameStatus.RESOLVED
        assert session.result == TurnResult.VICTORY
        assert events[-1].event == GameEvent.GAME_WON
        with pytest.raises(SessionStateError):
            session.submit([])

    def test_defeat(self, session, seed, events):
        brute = (Enemy(id="brute", hp=1000, max_hp=1000, intended_damage=500),)
        session.start(seed, Player(hp=10, max_hp=10), brute)

        session.submit(discard_all(session.state))

        assert session.result == TurnResult.DEFEAT
        assert events[-1].event == GameEvent.GAME_LOST

    def test_listener_errors_are_contained(self, started):
        def explode(payload):
            raise RuntimeError("listener failed")

        started.subscribe(explode)
        started.submit(discard_all(started.state))
        assert started.state.turn_counter == 2

    def test_unsubscribe(self, session, seed, player, tough_enemies, events):
        other = []
        remove = session.subscribe(other.append)
        remove()
        session.start(seed, player, tough_enemies)
        assert other == []
        assert events


class TestVerification:
    """Cross-checking every turn with the verifier."""

    def test_verified_session_plays(self, seed, player, tough_enemies):
        game = GameSession(verify=True)
        game.start(seed, player, tough_enemies)
        with patch.object(TurnVerifier, "verify_turn", wraps=TurnVerifier.verify_turn) as spy:
            game.submit(discard_all(game.state))
        spy.assert_called_once()
        assert game.status == GameStatus.ACTIVE

    def test_mismatch_abandons(self, seed, player, tough_enemies):
        received = []
        game = GameSession(verify=True)
        game.subscribe(received.append)
        game.start(seed, player, tough_enemies)
        prior = game.state

        mismatch = CommitmentMismatch("0xaa", "0xbb", 1)
        with patch.object(TurnVerifier, "verify_turn", side_effect=mismatch):
            with pytest.raises(CommitmentMismatch):
                game.submit(discard_all(prior))

        assert game.status == GameStatus.ABANDONED
        assert game.state is prior
        assert [p.event for p in received[-2:]] == [
            GameEvent.COMMITMENT_MISMATCH,
            GameEvent.SESSION_ABANDONED,
        ]
        assert received[-2].data == {"expected": "0xaa", "actual": "0xbb"}

    def test_mismatch_persists_abandonment(self, seed, player, tough_enemies):
        sessions = MagicMock()
        checkpoints = MagicMock()
        game = GameSession("session-9", verify=True, sessions=sessions, checkpoints=checkpoints)
        game.start(seed, player, tough_enemies)

        mismatch = CommitmentMismatch("0xaa", "0xbb", 1)
        with patch.object(TurnVerifier, "verify_turn", side_effect=mismatch):
            with pytest.raises(CommitmentMismatch):
                game.submit(discard_all(game.state))

        sessions.mark_abandoned.assert_called_once_with("session-9")
        sessions.record_turn.assert_not_called()
        checkpoints.record.assert_not_called()


class TestAbandon:
    def test_abandon(self, started, events):
        started.abandon()
        assert started.status == GameStatus.ABANDONED
        assert events[-1].event == GameEvent.SESSION_ABANDONED

    def test_abandon_is_idempotent(self, started, events):
        started.abandon()
        count = len(events)
        started.abandon()
        assert len(events) == count

    def test_abandon_before_seed(self, session):
        session.abandon()
        assert session.status == GameStatus.ABANDONED


class TestReplay:
    def test_replay_reproduces_history(self, started):
        for _ in range(3):
            started.submit(discard_all(started.state))

        replay = started.to_replay()

        assert TurnVerifier.replay(replay) == tuple(r.state_hash for r in started.history)

    def test_replay_before_start(self, session):
        with pytest.raises(SessionStateError):
            session.to_replay()


class TestPersistence:
    """Session and checkpoint managers are called at each transition."""

    def test_writes_through(self, seed, player, tough_enemies):
        sessions = MagicMock()
        checkpoints = MagicMock()
        game = GameSession("session-9", sessions=sessions, checkpoints=checkpoints)

        game.start(seed, player, tough_enemies)
        sessions.set_seed.assert_called_once_with("session-9", "0x" + seed.hex())

        game.submit(discard_all(game.state))
        state_hash = StateCommitment.commit_state(game.state)

        checkpoints.record.assert_called_once_with(
            "session-9", turn=1, state_hash=state_hash, result="CONTINUE",
            score=game.state.score,
        )
        sessions.record_turn.assert_called_once_with(
            "session-9", current_turn=2, state_hash=state_hash,
            score=game.state.score, result="CONTINUE",
        )

        game.abandon()
        sessions.mark_abandoned.assert_called_once_with("session-9")
