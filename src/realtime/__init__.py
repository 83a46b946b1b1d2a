"""
Fatebound Breach Real-time Sync.

Session subscriptions, seed arrival and checkpoint notifications.
"""

from src.realtime.events import EventPayload, GameEvent
from src.realtime.subscriptions import ChannelManager
from src.realtime.sync_manager import (
    SeedRequestInFlight,
    SeedTimeout,
    SessionSyncManager,
    subscribe_to_session,
    unsubscribe_from_session,
)

__all__ = [
    "ChannelManager",
    "EventPayload",
    "GameEvent",
    "SeedRequestInFlight",
    "SeedTimeout",
    "SessionSyncManager",
    "subscribe_to_session",
    "unsubscribe_from_session",
]
