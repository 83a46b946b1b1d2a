"""
Fatebound Breach - Input Validation Utilities

Provides validation functions for game engine inputs. All validators
either return validated data or raise a descriptive EngineError.
"""

import re
from typing import Sequence

from src.engine.base import Assignment, Packet, TargetKind
from src.engine.errors import (
    InvalidAssignment,
    InvalidSeed,
    InvalidTurn,
    UnknownEnemyTarget,
)

SEED_LENGTH = 32

_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]*$")


def hex_to_bytes(value: str) -> bytes:
    """
    Convert a hex string (with or without 0x prefix) to bytes.

    Odd-length strings are left-padded with a single zero.

    Raises:
        InvalidSeed: If the string contains non-hex characters
    """
    clean = value[2:] if value.startswith(("0x", "0X")) else value
    if not _HEX_PATTERN.match(clean):
        raise InvalidSeed(f"Invalid hex string: {value}")
    if len(clean) % 2:
        clean = "0" + clean
    return bytes.fromhex(clean)


def byte_to_hex(byte: int) -> str:
    """Format a byte as '0xNN' (upper-case)."""
    if not (0 <= byte <= 255):
        raise ValueError(f"Invalid byte value: {byte}. Must be 0-255.")
    return f"0x{byte:02X}"


def validate_seed(seed: bytes | bytearray | str) -> bytes:
    """
    Validate and normalize a session seed.

    Args:
        seed: Raw bytes or a hex string

    Returns:
        The seed as 32 raw bytes

    Raises:
        InvalidSeed: If the seed is not exactly 32 bytes
    """
    if isinstance(seed, str):
        raw = hex_to_bytes(seed)
    elif isinstance(seed, (bytes, bytearray)):
        raw = bytes(seed)
    else:
        raise InvalidSeed(f"Seed must be bytes or a hex string, got {type(seed).__name__}.")

    if len(raw) != SEED_LENGTH:
        raise InvalidSeed(f"Seed must be {SEED_LENGTH} bytes, got {len(raw)}.")

    return raw


def validate_turn(turn: int) -> int:
    """
    Validate a turn number.

    Raises:
        InvalidTurn: If turn is not an integer >= 1
    """
    if not isinstance(turn, int) or isinstance(turn, bool):
        raise InvalidTurn(f"Turn must be an integer, got {type(turn).__name__}.")
    if turn < 1:
        raise InvalidTurn(f"Invalid turn number: {turn}. Must be >= 1.")
    return turn


def validate_assignments(
    hand: Sequence[Packet],
    assignments: Sequence[Assignment],
    live_enemy_ids: frozenset[str] | set[str],
) -> tuple[Assignment, ...]:
    """
    Validate that assignments cover the hand exactly once.

    Rules:
    - Every packet index must exist in the hand
    - Each packet can only be assigned once
    - Every hand packet must be assigned
    - Targets must be DISCARD, SELF, or a live enemy

    Args:
        hand: Packets in the current hand
        assignments: Proposed assignments
        live_enemy_ids: Identifiers of enemies that can be targeted

    Returns:
        Assignments reordered into hand order

    Raises:
        InvalidAssignment: On bad index, duplicate, or incomplete coverage
        UnknownEnemyTarget: If an enemy target is missing or dead
    """
    by_index: dict[int, Assignment] = {}

    for assignment in assignments:
        idx = assignment.packet_index
        if not isinstance(idx, int) or isinstance(idx, bool):
            raise InvalidAssignment(
                f"Packet index must be an integer, got {type(idx).__name__}."
            )
        if not (0 <= idx < len(hand)):
            raise InvalidAssignment(
                f"Invalid packet index {idx}. Hand has {len(hand)} packets."
            )
        if idx in by_index:
            raise InvalidAssignment(f"Packet already assigned: packet-{idx}")

        target = assignment.target
        if target.kind == TargetKind.ENEMY and target.enemy_id not in live_enemy_ids:
            raise UnknownEnemyTarget(str(target.enemy_id))

        by_index[idx] = assignment

    if len(by_index) != len(hand):
        missing = sorted(set(range(len(hand))) - set(by_index))
        raise InvalidAssignment(
            f"Not all packets assigned. Expected {len(hand)}, got {len(by_index)} "
            f"(missing {', '.join(f'packet-{i}' for i in missing)})."
        )

    return tuple(by_index[i] for i in range(len(hand)))
