"""
Fatebound Breach Session Layer.

Mutable session holder that drives the pure engine and dispatches events.
"""

from src.session.game_session import GameSession, TurnRecord

__all__ = ["GameSession", "TurnRecord"]
