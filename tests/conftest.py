"""
Fatebound Breach - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

from typing import Callable, Sequence

import pytest

from src.engine.base import (
    Enemy,
    EnemyIntent,
    GameState,
    GameStatus,
    Packet,
    PacketKind,
    Player,
    Rarity,
    TurnAnomaly,
)
from src.engine.hand import HandDeriver


# =============================================================================
# SEEDS
# =============================================================================

TEST_SEED_HEX = "0x8f2a1b3c4d5e6f708192a3b4c5d6e7f80011223344556677889900aabbccddee"

# Representative source bytes for each kind / rarity
TYPE_BYTES: dict[PacketKind, int] = {
    PacketKind.MISS: 0,
    PacketKind.ATTACK: 100,
    PacketKind.DEFEND: 175,
    PacketKind.CRIT: 220,
    PacketKind.HEAL: 250,
}

RARITY_BYTES: dict[Rarity, int] = {
    Rarity.COMMON: 0,
    Rarity.RARE: 210,
    Rarity.LEGENDARY: 250,
}


@pytest.fixture
def seed_hex() -> str:
    """Fixed 32-byte session seed as a hex string."""
    return TEST_SEED_HEX


@pytest.fixture
def seed() -> bytes:
    """Fixed 32-byte session seed as raw bytes."""
    return bytes.fromhex(TEST_SEED_HEX[2:])


# =============================================================================
# ACTORS
# =============================================================================

@pytest.fixture
def player() -> Player:
    """Full-health player with no shield."""
    return Player(hp=100, max_hp=100, shield=0)


@pytest.fixture
def drone() -> Enemy:
    """Standard enemy that attacks for 5."""
    return Enemy(id="enemy-0", name="Drone", hp=20, max_hp=20, intended_damage=5)


@pytest.fixture
def idle_drone() -> Enemy:
    """Enemy that does nothing this turn."""
    return Enemy(
        id="enemy-0", name="Drone", hp=20, max_hp=20,
        intended_damage=5, intent=EnemyIntent.IDLE,
    )


@pytest.fixture
def cache() -> Enemy:
    """Gold cache: 1 hp, only a CRIT breaks it."""
    return Enemy(
        id="cache-gold", name="Gold Cache", kind="CACHE_GOLD",
        hp=1, max_hp=1, intent=EnemyIntent.IDLE, is_immune_except_crit=True,
    )


@pytest.fixture
def tough_enemies() -> tuple[Enemy, ...]:
    """Enemies that survive several turns and never hurt the player."""
    return (
        Enemy(id="enemy-0", hp=1000, max_hp=1000, intended_damage=0),
        Enemy(id="enemy-1", hp=1000, max_hp=1000, intended_damage=0, kind="sentinel"),
    )


# =============================================================================
# BUILDERS
# =============================================================================

@pytest.fixture
def make_packet() -> Callable[..., Packet]:
    """Factory for packets of a given kind and rarity."""

    def _make(kind: PacketKind, index: int = 0, rarity: Rarity = Rarity.COMMON) -> Packet:
        return HandDeriver.make_packet(index, TYPE_BYTES[kind], RARITY_BYTES[rarity])

    return _make


@pytest.fixture
def make_state(seed, player, make_packet) -> Callable[..., GameState]:
    """
    Factory for an ACTIVE state with an explicit hand.

    Hand entries may be a PacketKind or a (PacketKind, Rarity) pair.
    """

    def _make(
        hand: Sequence = (PacketKind.ATTACK,),
        enemies: Sequence[Enemy] = (),
        player: Player = player,
        anomaly: TurnAnomaly = TurnAnomaly.STABLE,
        jackpot: bool = False,
        score: int = 0,
        turn: int = 1,
    ) -> GameState:
        packets = []
        for i, entry in enumerate(hand):
            kind, rarity = entry if isinstance(entry, tuple) else (entry, Rarity.COMMON)
            packets.append(make_packet(kind, i, rarity))
        return GameState(
            session_seed=seed,
            player=player,
            enemies=tuple(enemies),
            turn_counter=turn,
            score=score,
            status=GameStatus.ACTIVE,
            hand=tuple(packets),
            anomaly=anomaly,
            jackpot=jackpot,
        )

    return _make
