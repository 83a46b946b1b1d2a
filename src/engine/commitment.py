"""
Fatebound Breach - State Commitment

Canonicalizes and hashes the part of a game state two parties must agree on:

    {player.hp, player.shield, enemies[].id + hp sorted by id, turn, score}

The canonical form is compact JSON with sorted keys, UTF-8 encoded, hashed
with Keccak-256 and rendered as a 0x-prefixed hex string. Enemy order in the
input never affects the digest. Hand, anomaly, intents and seed are excluded.
"""

import json
from typing import Iterable

from src.engine.base import Enemy, GameState, Player
from src.engine.errors import CommitmentMismatch
from src.engine.seed import keccak256


class StateCommitment:
    """
    Stateless commitment over game state.

    All methods are class methods operating on immutable data.
    """

    @classmethod
    def canonicalize(
        cls,
        player: Player,
        enemies: Iterable[Enemy],
        turn: int,
        score: int,
    ) -> bytes:
        """Serialize the committed fields into their canonical byte form."""
        document = {
            "player": {"hp": player.hp, "shield": player.shield},
            "enemies": [
                {"id": e.id, "hp": e.hp}
                for e in sorted(enemies, key=lambda e: e.id)
            ],
            "turn": turn,
            "score": score,
        }
        return json.dumps(
            document,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=True,
        ).encode("utf-8")

    @classmethod
    def commit(
        cls,
        player: Player,
        enemies: Iterable[Enemy],
        turn: int,
        score: int,
    ) -> str:
        """
        Hash the committed fields.

        Returns:
            0x-prefixed, lower-case hex digest (66 characters)
        """
        return "0x" + keccak256(cls.canonicalize(player, enemies, turn, score)).hex()

    @classmethod
    def commit_state(cls, state: GameState) -> str:
        """Hash a GameState snapshot."""
        return cls.commit(state.player, state.enemies, state.turn_counter, state.score)

    @classmethod
    def verify(cls, expected: str, actual: str, turn: int | None = None) -> str:
        """
        Compare two digests.

        Comparison ignores hex case and the 0x prefix.

        Returns:
            The agreed digest

        Raises:
            CommitmentMismatch: If the digests differ
        """
        if _normalize_digest(expected) != _normalize_digest(actual):
            raise CommitmentMismatch(expected, actual, turn)
        return actual


def _normalize_digest(digest: str) -> str:
    digest = digest.strip().lower()
    return digest[2:] if digest.startswith("0x") else digest


def commit(player: Player, enemies: Iterable[Enemy], turn: int, score: int) -> str:
    """Module-level shortcut for StateCommitment.commit."""
    return StateCommitment.commit(player, enemies, turn, score)
