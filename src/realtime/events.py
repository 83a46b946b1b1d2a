"""
Fatebound Breach - Realtime Event Definitions

Event types and payloads for game session state changes.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class GameEvent(Enum):
    """Events that can occur during a game session."""

    SEED_REQUESTED = auto()
    SEED_RECEIVED = auto()
    HAND_DEALT = auto()
    TURN_RESOLVED = auto()
    GAME_WON = auto()
    GAME_LOST = auto()
    COMMITMENT_MISMATCH = auto()
    SESSION_ABANDONED = auto()
    STATE_UPDATED = auto()


@dataclass
class EventPayload:
    """Wrapper for realtime event data."""

    event: GameEvent
    session_id: str
    turn: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


# Map terminal session results to game events
_RESULT_EVENT_MAP: dict[str, GameEvent] = {
    "VICTORY": GameEvent.GAME_WON,
    "DEFEAT": GameEvent.GAME_LOST,
}


def classify_session_change(
    change_type: str, record: dict[str, Any], old_record: dict[str, Any]
) -> GameEvent | None:
    """Determine the game event from a game_sessions table change."""
    if change_type == "INSERT":
        return GameEvent.SEED_REQUESTED
    if change_type != "UPDATE":
        return None

    if record.get("seed") and not old_record.get("seed"):
        return GameEvent.SEED_RECEIVED

    new_status = record.get("status")
    if new_status != old_record.get("status"):
        if new_status == "abandoned":
            return GameEvent.SESSION_ABANDONED
        if new_status == "resolved":
            return _RESULT_EVENT_MAP.get(record.get("result") or "", GameEvent.STATE_UPDATED)

    if record.get("current_turn") != old_record.get("current_turn"):
        return GameEvent.TURN_RESOLVED
    if record.get("state_hash") != old_record.get("state_hash"):
        return GameEvent.STATE_UPDATED

    return None


def classify_checkpoint_change(
    change_type: str, record: dict[str, Any], old_record: dict[str, Any]
) -> GameEvent | None:
    """Determine the game event from a turn_checkpoints table change."""
    if change_type == "INSERT":
        return GameEvent.TURN_RESOLVED
    if change_type == "UPDATE" and record.get("state_hash") != old_record.get("state_hash"):
        # Checkpoints are append-only; a rewritten hash is a divergence
        return GameEvent.COMMITMENT_MISMATCH
    return None
