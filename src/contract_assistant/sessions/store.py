"""
Session store interface and in-memory implementation.

Handlers only see the SessionStore capability interface:

    get / get_or_create / put / delete   state access
    lock(session_id)                     serialize read-modify-write per session
    sweep_expired(now)                   drop idle sessions
    stats()                              health information

The in-memory store keeps deep copies, so a handler mutating its SessionState
has no effect until it calls put().
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Protocol

import structlog

from contract_assistant.models.enums import ContractLanguage
from contract_assistant.models.session_models import SessionState
from contract_assistant.monitoring.metrics import sessions_active, sessions_swept_total

logger = structlog.get_logger(__name__)


class SessionStore(Protocol):
    """Capability interface implemented by every session backend."""

    async def get(self, session_id: str) -> Optional[SessionState]:
        ...

    async def get_or_create(self, session_id: str, language: ContractLanguage) -> SessionState:
        ...

    async def put(self, session: SessionState) -> None:
        ...

    async def delete(self, session_id: str) -> bool:
        ...

    async def sweep_expired(self, now: float) -> int:
        ...

    def lock(self, session_id: str) -> Any:
        """Async context manager holding the per-session lock."""
        ...

    async def stats(self) -> Dict[str, Any]:
        ...

    async def close(self) -> None:
        ...


class InMemorySessionStore:
    """
    Process-local session store.

    Suitable for a single worker; sessions are lost on restart.
    """

    def __init__(self, idle_timeout_seconds: float = 86400):
        self.idle_timeout_seconds = idle_timeout_seconds
        self._sessions: Dict[str, SessionState] = {}
        # Lock entries live only while a request holds or waits for them
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            users = self._lock_users.pop(session_id) - 1
            if users:
                self._lock_users[session_id] = users
            else:
                self._locks.pop(session_id, None)

    async def get(self, session_id: str) -> Optional[SessionState]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(time.time(), self.idle_timeout_seconds):
            self._remove(session_id)
            return None
        return session.model_copy(deep=True)

    async def get_or_create(self, session_id: str, language: ContractLanguage) -> SessionState:
        session = await self.get(session_id)
        if session is not None:
            return session
        logger.info("Creating session", session_id=session_id, language=ContractLanguage(language).value)
        return SessionState(session_id=session_id, language=language)

    async def put(self, session: SessionState) -> None:
        session.touch()
        self._sessions[session.session_id] = session.model_copy(deep=True)
        sessions_active.set(len(self._sessions))

    async def delete(self, session_id: str) -> bool:
        existed = session_id in self._sessions
        self._remove(session_id)
        return existed

    def _remove(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        sessions_active.set(len(self._sessions))

    async def sweep_expired(self, now: float) -> int:
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.is_expired(now, self.idle_timeout_seconds)
        ]
        for session_id in expired:
            self._remove(session_id)

        if expired:
            sessions_swept_total.inc(len(expired))
            logger.info("Session cleanup: removed idle sessions", removed=len(expired))
        return len(expired)

    async def stats(self) -> Dict[str, Any]:
        return {
            "backend": "memory",
            "active_sessions": len(self._sessions),
            "locked_sessions": len(self._locks),
            "oldest_activity": min(
                (session.last_activity for session in self._sessions.values()),
                default=None,
            ),
        }

    async def close(self) -> None:
        self._sessions.clear()
        sessions_active.set(0)
