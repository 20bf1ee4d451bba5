# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Hevy MCP Contributors

"""In-memory session registry.

A session is one logical client that may reconnect several times. Sessions
outlive the streams that serve them and are reclaimed only by inactivity,
either when a lookup finds them expired or when the periodic sweep runs.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from hevy_mcp.core.logging import audit_logger

from .security import generate_session_id

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    LIVE = "live"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


@dataclass
class Session:
    """Bookkeeping for one logical client."""

    id: str
    created_at: float
    last_activity: float
    origin_address: str | None = None

    def is_expired(self, now: float, timeout: float) -> bool:
        return now - self.last_activity > timeout


class SessionRegistry:
    """Thread-safe map of session id to Session.

    One coarse lock guards the map; no method awaits while holding it.

    Args:
        session_timeout: Inactivity timeout in seconds.
        clock: Time source returning epoch seconds (injectable for tests).
    """

    def __init__(self, session_timeout: float, clock: Callable[[], float] = time.time) -> None:
        self.session_timeout = session_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}

    def get_or_create(self, session_id: str | None = None, origin: str | None = None) -> Session:
        """Return the live session for ``session_id`` or create one.

        A live session is returned untouched. A missing or expired id is
        (re)created under the same id; no id generates a fresh one.
        """
        expired = False
        with self._lock:
            now = self._clock()
            if session_id is not None:
                existing = self._sessions.get(session_id)
                if existing is not None:
                    if not existing.is_expired(now, self.session_timeout):
                        return existing
                    expired = True
            else:
                session_id = generate_session_id()
                while session_id in self._sessions:
                    session_id = generate_session_id()

            session = Session(id=session_id, created_at=now, last_activity=now, origin_address=origin)
            self._sessions[session_id] = session

        if expired:
            audit_logger.session_expired(session_id, reason="timeout")
        audit_logger.session_created(session_id, ip=origin)
        return session

    def touch(self, session_id: str) -> bool:
        """Bump ``last_activity``. Returns False when the session is absent."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.last_activity = max(self._clock(), session.last_activity)
            return True

    def is_live(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            return session is not None and not session.is_expired(self._clock(), self.session_timeout)

    def validate(self, session_id: str) -> SessionState:
        """Classify a session id, removing it if it has expired."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return SessionState.UNKNOWN
            if session.is_expired(self._clock(), self.session_timeout):
                del self._sessions[session_id]
                state = SessionState.EXPIRED
            else:
                return SessionState.LIVE

        audit_logger.session_expired(session_id, reason="timeout")
        return state

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sweep_expired(self) -> list[str]:
        """Remove every expired session and return the removed ids."""
        with self._lock:
            now = self._clock()
            expired = [sid for sid, s in self._sessions.items() if s.is_expired(now, self.session_timeout)]
            for sid in expired:
                del self._sessions[sid]

        for sid in expired:
            audit_logger.session_expired(sid, reason="cleanup")
        if expired:
            logger.info(f"Swept {len(expired)} expired session(s)")
        return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions


class SessionSweeper:
    """Background task that periodically sweeps expired sessions.

    ``on_sweep`` callables run after each sweep (rate limiter pruning).
    """

    def __init__(
        self,
        registry: SessionRegistry,
        interval: float,
        on_sweep: Sequence[Callable[[], object]] = (),
    ) -> None:
        self.registry = registry
        self.interval = interval
        self.on_sweep = tuple(on_sweep)
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def sweep_once(self) -> list[str]:
        removed = self.registry.sweep_expired()
        for callback in self.on_sweep:
            callback()
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("Session sweep failed")
