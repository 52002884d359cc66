"""
In-memory store of query assistant sessions.

Each entry carries its own lock so two inputs for the same session are
processed one after the other, while different sessions proceed in
parallel. Expired sessions are only ever removed, never modified, so a
step racing with the sweep finishes on its own copy and the next input
sees "not found".
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional

from dynamics_assistant.conversation.state_machine import AssistantStateMachine
from dynamics_assistant.schemas.session_schema import QuerySession

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    session: QuerySession
    machine: AssistantStateMachine = field(default_factory=AssistantStateMachine)
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionStore:
    """Session id -> SessionEntry mapping guarded by a store-level lock."""

    def __init__(self) -> None:
        self._entries: dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._entries

    def add(self, session: QuerySession) -> SessionEntry:
        entry = SessionEntry(session=session)
        with self._lock:
            self._entries[session.id] = entry
        return entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        with self._lock:
            return self._entries.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._entries.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep_expired(self, now: datetime, ttl: timedelta) -> list[str]:
        """Delete sessions idle for longer than ``ttl``; return their ids."""
        with self._lock:
            expired = [
                sid for sid, entry in self._entries.items()
                if now - entry.session.last_activity > ttl
            ]
            for sid in expired:
                del self._entries[sid]
        if expired:
            logger.info("Removed %d expired assistant session(s)", len(expired))
        return expired


class SessionSweeper:
    """Daemon thread calling ``sweep`` every ``interval_sec`` seconds."""

    def __init__(self, sweep: Callable[[], object], interval_sec: float) -> None:
        self._sweep = sweep
        self._interval = interval_sec
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="assistant-session-sweeper", daemon=True,
        )
        self._thread.start()
        logger.debug("Session sweeper started (interval=%ss)", self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.debug("Session sweeper stopped")

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                self._sweep()
            except Exception:
                # Keep the thread alive; the next tick retries
                logger.exception("Session sweep failed")
