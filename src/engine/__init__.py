"""
Fatebound Breach Game Engine.

Pure Python game logic with zero UI/database dependencies.
Handles seed expansion, hand derivation, combat, anomalies, scoring
and state commitments.
"""

from src.engine.anomaly import AnomalyEffect, AnomalyEngine
from src.engine.base import (
    Assignment,
    Enemy,
    EnemyIntent,
    GameState,
    GameStatus,
    Grid,
    Hand,
    Packet,
    PacketKind,
    Player,
    Rarity,
    Target,
    TargetKind,
    TurnAnomaly,
    TurnResult,
)
from src.engine.combat import CombatResolver, TurnOutcome, resolve_turn
from src.engine.commitment import StateCommitment, commit
from src.engine.errors import (
    CommitmentMismatch,
    EngineError,
    InvalidAssignment,
    InvalidSeed,
    InvalidTurn,
    SessionStateError,
    UnknownEnemyTarget,
)
from src.engine.game import new_game, next_turn, play_turn
from src.engine.hand import HandDeriver
from src.engine.scoring import ScoreAccumulator, ScoreEvent, ScoreEventKind
from src.engine.seed import SeedExpander, derive_turn_seed
from src.engine.verifier import Replay, TurnVerifier

__all__ = [
    # Data Classes
    "Assignment",
    "Enemy",
    "GameState",
    "Grid",
    "Hand",
    "Packet",
    "Player",
    "Replay",
    "ScoreEvent",
    "Target",
    "TurnOutcome",
    "AnomalyEffect",
    # Enums
    "EnemyIntent",
    "GameStatus",
    "PacketKind",
    "Rarity",
    "ScoreEventKind",
    "TargetKind",
    "TurnAnomaly",
    "TurnResult",
    # Engines
    "AnomalyEngine",
    "CombatResolver",
    "HandDeriver",
    "ScoreAccumulator",
    "SeedExpander",
    "StateCommitment",
    "TurnVerifier",
    # Functions
    "commit",
    "derive_turn_seed",
    "new_game",
    "next_turn",
    "play_turn",
    "resolve_turn",
    # Errors
    "CommitmentMismatch",
    "EngineError",
    "InvalidAssignment",
    "InvalidSeed",
    "InvalidTurn",
    "SessionStateError",
    "UnknownEnemyTarget",
]
