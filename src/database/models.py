"""
Fatebound Breach - Database Models

Pydantic models that mirror the Supabase table schemas.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

# Session status values stored in `game_sessions.status`
STATUS_AWAITING_SEED = "awaiting_seed"
STATUS_ACTIVE = "active"
STATUS_RESOLVED = "resolved"
STATUS_ABANDONED = "abandoned"

SESSION_STATUSES = (
    STATUS_AWAITING_SEED,
    STATUS_ACTIVE,
    STATUS_RESOLVED,
    STATUS_ABANDONED,
)


class GameSessionRecord(BaseModel):
    """Mirrors the `game_sessions` table."""

    id: UUID
    operator: str = Field(max_length=64)
    seed: str | None = Field(default=None, pattern=r"^0x[0-9a-fA-F]{64}$")
    status: str = STATUS_AWAITING_SEED
    current_turn: int = Field(default=1, ge=1)
    state_hash: str | None = None
    score: int = Field(default=0, ge=0)
    result: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def has_seed(self) -> bool:
        return self.seed is not None


class TurnCheckpoint(BaseModel):
    """Mirrors the `turn_checkpoints` table."""

    session_id: UUID
    turn: int = Field(ge=1)
    state_hash: str = Field(pattern=r"^0x[0-9a-f]{64}$")
    result: str
    score: int = Field(default=0, ge=0)
    created_at: datetime

    model_config = {"from_attributes": True}
