"""
Fatebound Breach - Game Session Manager

CRUD operations for the `game_sessions` table.
"""

from supabase import Client

from src.database.models import (
    STATUS_ABANDONED,
    STATUS_ACTIVE,
    STATUS_AWAITING_SEED,
    STATUS_RESOLVED,
    GameSessionRecord,
)


class GameSessionManager:
    """Manages game session records in Supabase."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("game_sessions")

    def create(self, operator: str) -> GameSessionRecord:
        """Open a session that is waiting for its seed."""
        data = (
            self.table
            .insert({"operator": operator})
            .execute()
        )
        return GameSessionRecord.model_validate(data.data[0])

    def get(self, session_id: str) -> GameSessionRecord | None:
        """Look up a session by its UUID."""
        data = (
            self.table
            .select("*")
            .eq("id", session_id)
            .execute()
        )
        if data.data:
            return GameSessionRecord.model_validate(data.data[0])
        return None

    def get_active_for_operator(self, operator: str) -> GameSessionRecord | None:
        """Most recent session for an operator that has not finished."""
        data = (
            self.table
            .select("*")
            .eq("operator", operator)
            .in_("status", [STATUS_AWAITING_SEED, STATUS_ACTIVE])
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if data.data:
            return GameSessionRecord.model_validate(data.data[0])
        return None

    def set_seed(self, session_id: str, seed: str) -> GameSessionRecord:
        """Record the oracle seed and activate the session."""
        data = (
            self.table
            .update({"seed": seed, "status": STATUS_ACTIVE})
            .eq("id", session_id)
            .execute()
        )
        return GameSessionRecord.model_validate(data.data[0])

    def record_turn(
        self,
        session_id: str,
        *,
        current_turn: int,
        state_hash: str,
        score: int,
        result: str | None = None,
    ) -> GameSessionRecord:
        """Store the latest commitment. A terminal result resolves the session."""
        updates: dict = {
            "current_turn": current_turn,
            "state_hash": state_hash,
            "score": score,
        }
        if result is not None and result != "CONTINUE":
            updates["result"] = result
            updates["status"] = STATUS_RESOLVED

        data = (
            self.table
            .update(updates)
            .eq("id", session_id)
            .execute()
        )
        return GameSessionRecord.model_validate(data.data[0])

    def mark_abandoned(self, session_id: str) -> GameSessionRecord:
        """Mark a session as abandoned (seed timeout or player quit)."""
        data = (
            self.table
            .update({"status": STATUS_ABANDONED})
            .eq("id", session_id)
            .execute()
        )
        return GameSessionRecord.model_validate(data.data[0])

    def delete(self, session_id: str) -> None:
        """Delete a session (cascades to checkpoints)."""
        self.table.delete().eq("id", session_id).execute()
