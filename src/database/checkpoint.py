"""
Fatebound Breach - Checkpoint Manager

CRUD operations for the `turn_checkpoints` table. One row per resolved turn;
the verifier boundary reads these to compare StateHashes.
"""

from supabase import Client

from src.database.models import TurnCheckpoint


class CheckpointManager:
    """Manages per-turn state commitments in Supabase."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("turn_checkpoints")

    def record(
        self,
        session_id: str,
        turn: int,
        state_hash: str,
        result: str,
        score: int,
    ) -> TurnCheckpoint:
        """Insert the commitment for a resolved turn."""
        data = (
            self.table
            .insert({
                "session_id": session_id,
                "turn": turn,
                "state_hash": state_hash,
                "result": result,
                "score": score,
            })
            .execute()
        )
        return TurnCheckpoint.model_validate(data.data[0])

    def get(self, session_id: str, turn: int) -> TurnCheckpoint | None:
        """Get the checkpoint for one turn."""
        data = (
            self.table
            .select("*")
            .eq("session_id", session_id)
            .eq("turn", turn)
            .execute()
        )
        if data.data:
            return TurnCheckpoint.model_validate(data.data[0])
        return None

    def list_by_session(self, session_id: str) -> list[TurnCheckpoint]:
        """All checkpoints for a session, ordered by turn."""
        data = (
            self.table
            .select("*")
            .eq("session_id", session_id)
            .order("turn")
            .execute()
        )
        return [TurnCheckpoint.model_validate(row) for row in data.data]

    def claimed_hashes(self, session_id: str) -> tuple[str, ...]:
        """State hashes in turn order, ready for a replay check."""
        return tuple(cp.state_hash for cp in self.list_by_session(session_id))
