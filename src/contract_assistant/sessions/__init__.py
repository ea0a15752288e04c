"""
Session storage for chat state.

Components:
- SessionStore: Capability interface used by handlers
- InMemorySessionStore: Single-process store with per-session asyncio locks
- RedisSessionStore: Shared store with TTL expiry and Redis locks
- SessionSweeper: Background cleanup of idle sessions
- session_id_from_request: Session identity from headers / client address
"""

from contract_assistant.sessions.identity import session_id_from_request
from contract_assistant.sessions.redis_store import RedisSessionStore
from contract_assistant.sessions.store import InMemorySessionStore, SessionStore
from contract_assistant.sessions.sweeper import SessionSweeper

__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionSweeper",
    "session_id_from_request",
]
