"""
Fatebound Breach Database Layer.

Supabase integration for game sessions and per-turn checkpoints.
"""

from src.database.checkpoint import CheckpointManager
from src.database.client import create_supabase_client, get_supabase_client
from src.database.game_session import GameSessionManager
from src.database.models import GameSessionRecord, TurnCheckpoint

__all__ = [
    "create_supabase_client",
    "get_supabase_client",
    "CheckpointManager",
    "GameSessionManager",
    "GameSessionRecord",
    "TurnCheckpoint",
]
