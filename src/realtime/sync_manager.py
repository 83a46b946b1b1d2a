"""
Fatebound Breach - Realtime Sync Manager

High-level manager that ties together channel subscriptions with session
state reconciliation. Provides the bounded seed wait the engine depends on
and a polling fallback when WebSocket connections fail.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from supabase import Client

from src.config.settings import Settings, get_settings
from src.database.checkpoint import CheckpointManager
from src.database.game_session import GameSessionManager
from src.database.models import GameSessionRecord
from src.realtime.events import EventPayload, classify_session_change
from src.realtime.subscriptions import ChannelManager

logger = logging.getLogger(__name__)


class SeedTimeout(TimeoutError):
    """The seed oracle did not deliver within the configured window."""

    def __init__(self, session_id: str, timeout: float) -> None:
        self.session_id = session_id
        self.timeout = timeout
        super().__init__(f"Seed for session {session_id} not received within {timeout:g}s.")


class SeedRequestInFlight(RuntimeError):
    """A seed wait is already active for this session."""


class SessionSyncManager:
    """Coordinates realtime subscriptions, seed arrival and reconciliation.

    Wraps ChannelManager with higher-level session logic: bounded seed
    waits, snapshot fetching, polling fallback, and clean teardown.
    """

    def __init__(self, client: Client, settings: Settings | None = None) -> None:
        self._client = client
        self._settings = settings or get_settings()
        self._channel_mgr = ChannelManager(client)
        self._session_mgr = GameSessionManager(client)
        self._checkpoint_mgr = CheckpointManager(client)
        self._poll_threads: dict[str, threading.Event] = {}
        self._seed_waiters: set[str] = set()
        self._waiters_lock = threading.Lock()

    def subscribe(
        self,
        session_id: str,
        on_event: Callable[[EventPayload], None],
        *,
        use_polling_fallback: bool = True,
        poll_interval: float | None = None,
    ) -> None:
        """Subscribe to live updates for a session.

        Attempts WebSocket subscription first. If it fails and
        use_polling_fallback is True, starts a polling thread instead.

        Args:
            session_id: UUID of the session to watch.
            on_event: Callback receiving EventPayload for each change.
            use_polling_fallback: Fall back to polling on WS failure.
            poll_interval: Seconds between polls (fallback only).
        """
        try:
            self._channel_mgr.subscribe(session_id, on_event)
            logger.info("Realtime subscription active for session %s", session_id)
        except Exception:
            logger.exception("WebSocket subscription failed for session %s", session_id)
            if use_polling_fallback:
                logger.info("Falling back to polling for session %s", session_id)
                self._start_polling(
                    session_id,
                    lambda payload: self._channel_mgr.route(payload, on_event),
                    poll_interval or self._settings.seed_poll_interval,
                )
            else:
                raise

    def unsubscribe(self, session_id: str) -> None:
        """Unsubscribe from a session (both WS and polling)."""
        self._channel_mgr.unsubscribe(session_id)
        self._stop_polling(session_id)

    def get_snapshot(self, session_id: str) -> dict[str, Any]:
        """Fetch the current session record and its checkpoints.

        Returns:
            Dict with 'session' and 'checkpoints' keys.
        """
        return {
            "session": self._session_mgr.get(session_id),
            "checkpoints": self._checkpoint_mgr.list_by_session(session_id),
        }

    # -- Seed arrival ----------------------------------------------------

    def wait_for_seed(self, session_id: str, timeout: float | None = None) -> str:
        """Block until the oracle seed for a session arrives.

        Wakes early when the channel layer signals a seed arrival, and
        otherwise polls the session record. On timeout an existing session
        row is marked abandoned.

        Args:
            session_id: UUID of the session.
            timeout: Seconds to wait (defaults to settings.seed_timeout_seconds).

        Returns:
            The seed as a 0x-prefixed hex string.

        Raises:
            SeedRequestInFlight: If another wait is active for this session.
            SeedTimeout: If no seed arrives in time.
        """
        timeout = self._settings.seed_timeout_seconds if timeout is None else timeout
        with self._waiters_lock:
            if session_id in self._seed_waiters:
                raise SeedRequestInFlight(f"Seed wait already active for session {session_id}")
            self._seed_waiters.add(session_id)
        try:
            arrived = self._channel_mgr.seed_signal(session_id)
            deadline = time.monotonic() + timeout
            last_seen: GameSessionRecord | None = None
            while True:
                record = self._session_mgr.get(session_id)
                last_seen = record or last_seen
                if record is not None and record.seed:
                    logger.info("Seed received for session %s", session_id)
                    return record.seed

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                arrived.wait(min(self._settings.seed_poll_interval, remaining))
                arrived.clear()

            logger.warning("Seed timeout for session %s after %.1fs", session_id, timeout)
            if last_seen is not None:
                self._session_mgr.mark_abandoned(session_id)
            else:
                logger.warning("Session %s has no row to abandon", session_id)
            raise SeedTimeout(session_id, timeout)
        finally:
            self._channel_mgr.release_seed_signal(session_id)
            with self._waiters_lock:
                self._seed_waiters.discard(session_id)

    @property
    def pending_seed_requests(self) -> list[str]:
        """Session IDs currently waiting for a seed."""
        with self._waiters_lock:
            return sorted(self._seed_waiters)

    def shutdown(self) -> None:
        """Clean up all subscriptions and background threads."""
        for session_id in list(self._poll_threads.keys()):
            self._stop_polling(session_id)
        self._channel_mgr.shutdown()

    # -- Polling fallback ------------------------------------------------

    def _start_polling(
        self,
        session_id: str,
        on_event: Callable[[EventPayload], None],
        interval: float,
    ) -> None:
        """Start a background polling thread for a session."""
        if session_id in self._poll_threads:
            return

        stop_event = threading.Event()
        self._poll_threads[session_id] = stop_event

        thread = threading.Thread(
            target=self._poll_loop,
            args=(session_id, on_event, interval, stop_event),
            daemon=True,
            name=f"poll-{session_id[:8]}",
        )
        thread.start()

    def _stop_polling(self, session_id: str) -> None:
        """Signal a polling thread to stop."""
        stop_event = self._poll_threads.pop(session_id, None)
        if stop_event:
            stop_event.set()

    def _poll_loop(
        self,
        session_id: str,
        on_event: Callable[[EventPayload], None],
        interval: float,
        stop_event: threading.Event,
    ) -> None:
        """Poll the database for changes and emit events."""
        last: GameSessionRecord | None = None

        while not stop_event.is_set():
            try:
                current = self._session_mgr.get(session_id)
                if current and last:
                    self._diff_and_emit(session_id, current, last, on_event)
                last = current or last
            except Exception:
                logger.exception("Polling error for session %s", session_id)

            stop_event.wait(interval)

    def _diff_and_emit(
        self,
        session_id: str,
        current: GameSessionRecord,
        previous: GameSessionRecord,
        on_event: Callable[[EventPayload], None],
    ) -> None:
        """Compare current record to the previous one and emit the change."""
        record = current.model_dump(mode="json")
        event = classify_session_change("UPDATE", record, previous.model_dump(mode="json"))
        if event is None:
            return
        on_event(EventPayload(
            event=event,
            session_id=session_id,
            turn=current.current_turn,
            data={"session": record},
        ))


# -- Module-level convenience functions ----------------------------------

_manager_instance: SessionSyncManager | None = None
_manager_lock = threading.Lock()


def _get_manager(client: Client) -> SessionSyncManager:
    """Get or create the singleton SessionSyncManager."""
    global _manager_instance
    with _manager_lock:
        if _manager_instance is None:
            _manager_instance = SessionSyncManager(client)
        return _manager_instance


def subscribe_to_session(
    client: Client,
    session_id: str,
    on_event: Callable[[EventPayload], None],
) -> SessionSyncManager:
    """Subscribe to realtime updates for a session.

    Returns:
        The SessionSyncManager instance (for seed waits, snapshots, etc.)
    """
    manager = _get_manager(client)
    manager.subscribe(session_id, on_event)
    return manager


def unsubscribe_from_session(client: Client, session_id: str) -> None:
    """Unsubscribe from realtime updates for a session."""
    _get_manager(client).unsubscribe(session_id)
