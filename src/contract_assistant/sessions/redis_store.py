"""
Redis-backed session store.

Sessions are stored as JSON under `session:{id}` with a TTL equal to the idle
timeout; every put() refreshes the TTL, so Redis expires idle sessions itself
and sweep_expired() has nothing to do. Per-session locks are Redis locks, so
several API workers can share one store.
"""

from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError
from redis.asyncio import ConnectionPool as AsyncConnectionPool
from redis.asyncio import Redis as AsyncRedis

from contract_assistant.config import Settings
from contract_assistant.models.enums import ContractLanguage
from contract_assistant.models.session_models import SessionState

logger = structlog.get_logger(__name__)

KEY_PREFIX = "session:"
LOCK_PREFIX = "lock:session:"


class RedisSessionStore:
    """
    SessionStore over redis.asyncio.

    Attributes:
        redis: Async Redis client (decode_responses=True)
        idle_timeout_seconds: TTL applied on every write
        lock_timeout_seconds: Auto-release time of a per-session lock
    """

    def __init__(
        self,
        redis: AsyncRedis,
        idle_timeout_seconds: int = 86400,
        lock_timeout_seconds: float = 300,
    ):
        self.redis = redis
        self.idle_timeout_seconds = idle_timeout_seconds
        self.lock_timeout_seconds = lock_timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisSessionStore":
        pool = AsyncConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        logger.info("Initialized Redis async connection pool")
        return cls(
            AsyncRedis(connection_pool=pool),
            idle_timeout_seconds=settings.SESSION_IDLE_TIMEOUT_SECONDS,
            # A chat request may hold the lock for its whole deadline
            lock_timeout_seconds=settings.CHAT_REQUEST_TIMEOUT_MS / 1000 + 5,
        )

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    def lock(self, session_id: str):
        return self.redis.lock(
            f"{LOCK_PREFIX}{session_id}",
            timeout=self.lock_timeout_seconds,
            blocking_timeout=self.lock_timeout_seconds,
        )

    async def get(self, session_id: str) -> Optional[SessionState]:
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        try:
            return SessionState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable session", session_id=session_id, error_count=e.error_count())
            await self.redis.delete(self._key(session_id))
            return None

    async def get_or_create(self, session_id: str, language: ContractLanguage) -> SessionState:
        session = await self.get(session_id)
        if session is not None:
            return session
        logger.info("Creating session", session_id=session_id, language=ContractLanguage(language).value)
        return SessionState(session_id=session_id, language=language)

    async def put(self, session: SessionState) -> None:
        session.touch()
        await self.redis.setex(
            self._key(session.session_id),
            self.idle_timeout_seconds,
            session.model_dump_json(),
        )

    async def delete(self, session_id: str) -> bool:
        return bool(await self.redis.delete(self._key(session_id)))

    async def sweep_expired(self, now: float) -> int:
        # Keys carry a TTL; Redis removes idle sessions on its own
        return 0

    async def stats(self) -> Dict[str, Any]:
        count = 0
        async for _ in self.redis.scan_iter(match=f"{KEY_PREFIX}*", count=500):
            count += 1
        return {"backend": "redis", "active_sessions": count, "oldest_activity": None}

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Closed Redis session store")
