"""
Fatebound Breach - Channel Subscription Management

Watches one game session over Supabase Realtime: its game_sessions row (seed
arrival, status changes) and its turn_checkpoints rows. Row changes are
classified into GameEvents and routed to the subscriber. A seed arrival also
sets the session's seed signal, which bounded seed waits block on.

The Realtime client in supabase 2.x is async-only, so channels live on an
asyncio loop running in a daemon thread and callbacks fire from that thread.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Coroutine

from supabase import Client

from src.realtime.events import (
    EventPayload,
    GameEvent,
    classify_checkpoint_change,
    classify_session_change,
)

logger = logging.getLogger(__name__)

Listener = Callable[[EventPayload], None]


@dataclass(frozen=True)
class WatchedTable:
    """
    A table watched per session.

    Attributes:
        name: Table name in the public schema
        session_column: Column holding the session id
        classify: Maps (change_type, record, old_record) to a GameEvent
    """
    name: str
    session_column: str
    classify: Callable[[str, dict, dict], GameEvent | None]

    def channel_name(self, session_id: str) -> str:
        return f"session:{session_id}:{self.name}"

    def row_filter(self, session_id: str) -> str:
        return f"{self.session_column}=eq.{session_id}"


WATCHED_TABLES: tuple[WatchedTable, ...] = (
    WatchedTable("game_sessions", "id", classify_session_change),
    WatchedTable("turn_checkpoints", "session_id", classify_checkpoint_change),
)

_TABLES_BY_NAME = {table.name: table for table in WATCHED_TABLES}


class ChannelManager:
    """Per-session Realtime channels plus seed-arrival signals.

    Args:
        client: Supabase client whose realtime connection is used
        subscribe_timeout: Seconds to wait for channel setup or teardown
    """

    def __init__(self, client: Client, subscribe_timeout: float = 10.0) -> None:
        self._client = client
        self._subscribe_timeout = subscribe_timeout
        self._channels: dict[str, list[Any]] = {}
        self._seed_signals: dict[str, threading.Event] = {}
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    # -- Seed signals ----------------------------------------------------

    def seed_signal(self, session_id: str) -> threading.Event:
        """Event that is set when a seed arrival is seen for the session."""
        with self._lock:
            return self._seed_signals.setdefault(session_id, threading.Event())

    def release_seed_signal(self, session_id: str) -> None:
        with self._lock:
            self._seed_signals.pop(session_id, None)

    def route(self, payload: EventPayload, on_event: Listener) -> None:
        """Deliver an event, waking any seed wait on that session first."""
        if payload.event == GameEvent.SEED_RECEIVED:
            with self._lock:
                signal = self._seed_signals.get(payload.session_id)
            if signal is not None:
                signal.set()
        on_event(payload)

    # -- Channels --------------------------------------------------------

    def subscribe(self, session_id: str, on_event: Listener) -> None:
        """Open one filtered channel per watched table for a session.

        Raises:
            Exception: Whatever the Realtime client raised; nothing is kept
        """
        with self._lock:
            if session_id in self._channels:
                logger.debug("Session %s already has realtime channels", session_id)
                return
            self._channels[session_id] = []

        try:
            channels = self._run(self._open(session_id, on_event))
        except Exception:
            with self._lock:
                self._channels.pop(session_id, None)
            raise

        with self._lock:
            self._channels[session_id] = channels
        logger.info("Watching session %s on %d channels", session_id, len(channels))

    def unsubscribe(self, session_id: str) -> None:
        """Close a session's channels. Unknown sessions are ignored."""
        with self._lock:
            channels = self._channels.pop(session_id, None)
        if not channels:
            return

        try:
            self._run(self._close(channels))
        except Exception:
            logger.exception("Closing channels for session %s failed", session_id)
        logger.info("Stopped watching session %s", session_id)

    def shutdown(self) -> None:
        """Close every channel and stop the realtime loop."""
        for session_id in list(self._channels):
            self.unsubscribe(session_id)

        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
        if not thread.is_alive():
            loop.close()

    # -- Internals -------------------------------------------------------

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Run a coroutine on the realtime loop, starting it on first use."""
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._loop.run_forever, daemon=True, name="realtime-loop"
                )
                self._thread.start()
            loop = self._loop
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        return future.result(timeout=self._subscribe_timeout)

    async def _open(self, session_id: str, on_event: Listener) -> list[Any]:
        channels = []
        for table in WATCHED_TABLES:
            channel = self._client.realtime.channel(table.channel_name(session_id))
            channel.on_postgres_changes(
                event="*",
                schema="public",
                table=table.name,
                filter=table.row_filter(session_id),
                callback=lambda payload, name=table.name: self._handle_change(
                    payload, name, session_id, on_event
                ),
            )
            await channel.subscribe(
                callback=lambda status, err, name=table.name: self._log_status(
                    session_id, name, status, err
                )
            )
            channels.append(channel)
        return channels

    async def _close(self, channels: list[Any]) -> None:
        # remove_channel unsubscribes before dropping the channel
        for channel in channels:
            try:
                await self._client.realtime.remove_channel(channel)
            except Exception:
                logger.exception("Removing realtime channel failed")

    def _handle_change(
        self,
        payload: dict[str, Any],
        table: str,
        session_id: str,
        on_event: Listener,
    ) -> None:
        """Classify a postgres_changes payload and route the event.

        Runs on the realtime thread, so failures are logged, not raised.
        """
        try:
            watched = _TABLES_BY_NAME.get(table)
            if watched is None:
                return

            data = payload.get("data", payload)
            change_type = data.get("type", data.get("eventType", ""))
            record = data.get("record") or {}
            old_record = data.get("old_record") or {}

            event = watched.classify(change_type, record, old_record)
            if event is None:
                return

            turn = record.get("turn", record.get("current_turn"))
            self.route(
                EventPayload(
                    event=event,
                    session_id=session_id,
                    turn=int(turn) if turn is not None else None,
                    data={
                        "table": table,
                        "change_type": change_type,
                        "record": record,
                        "old_record": old_record,
                    },
                ),
                on_event,
            )
        except Exception:
            logger.exception("Handling %s change for session %s failed", table, session_id)

    @staticmethod
    def _log_status(session_id: str, table: str, status: Any, error: Exception | None) -> None:
        if error is not None:
            logger.error("Channel %s/%s: %s (%s)", session_id, table, status, error)
        else:
            logger.debug("Channel %s/%s: %s", session_id, table, status)
