"""
Lifecycle owner for the provider client.

The client is constructed lazily and rebuilt after a failure. Instead of a
module-level handle that gets reassigned, the provider is an explicit state
machine:

    UNINITIALIZED --ensure_ready()--> READY
    READY         --mark_failed()---> FAILED
    FAILED        --ensure_ready()--> READY   (construction retried)
    any           --ensure_ready() with a broken config--> FAILED (raises)

Calls borrow the client through lease(). mark_failed() only drops the client
the failing call actually used; a dropped client that still has calls in
flight is closed when the last of them returns.
"""

import asyncio
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, Optional

import structlog

from contract_assistant.config import Settings
from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.openai_client import OpenAIChatClient
from contract_assistant.monitoring.metrics import llm_client_state_transitions_total

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[], BaseLLMClient]


class ClientState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class LLMClientProvider:
    """
    Owns one BaseLLMClient and its construction state.

    Injected into the CompletionEngine; shared by all requests.
    """

    def __init__(self, factory: ClientFactory):
        self._factory = factory
        self._client: Optional[BaseLLMClient] = None
        self._state = ClientState.UNINITIALIZED
        self._last_error: Optional[BaseException] = None
        self._lock = asyncio.Lock()
        self._in_flight: dict[BaseLLMClient, int] = {}
        self._retired: set[BaseLLMClient] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClientProvider":
        """Provider building an OpenAIChatClient from application settings."""
        def factory() -> BaseLLMClient:
            return OpenAIChatClient(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.LLM_ATTEMPT_TIMEOUT_MS / 1000,
            )
        return cls(factory)

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def in_flight(self) -> int:
        return sum(self._in_flight.values())

    def _transition(self, state: ClientState) -> None:
        if state is not self._state:
            logger.info("LLM client state change", previous=self._state.value, state=state.value)
            llm_client_state_transitions_total.labels(state=state.value).inc()
        self._state = state

    async def ensure_ready(self) -> BaseLLMClient:
        """
        Return a ready client, constructing it if needed.

        Raises:
            Whatever the factory raises (typically LLMConfigurationError);
            the provider is left in FAILED.
        """
        if self._state is ClientState.READY and self._client is not None:
            return self._client

        async with self._lock:
            if self._state is ClientState.READY and self._client is not None:
                return self._client
            try:
                self._client = self._factory()
            except Exception as e:
                self._client = None
                self._last_error = e
                self._transition(ClientState.FAILED)
                logger.error("LLM client initialization failed", error=str(e), error_type=type(e).__name__)
                raise
            self._last_error = None
            self._transition(ClientState.READY)
            return self._client

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[BaseLLMClient]:
        """
        Borrow the ready client for one call.

        Usage:
            async with provider.lease() as client:
                response = await client.chat_completion(request)
        """
        client = await self.ensure_ready()
        self._in_flight[client] = self._in_flight.get(client, 0) + 1
        try:
            yield client
        finally:
            remaining = self._in_flight.pop(client) - 1
            if remaining:
                self._in_flight[client] = remaining
            elif client in self._retired:
                self._retired.discard(client)
                logger.debug("Closing retired LLM client after its last call")
                await client.close()

    async def mark_failed(self, client: Optional[BaseLLMClient], reason: BaseException | None = None) -> bool:
        """
        Drop `client` so the next ensure_ready() rebuilds it.

        Ignored when `client` is no longer the current one (another call
        already replaced it). Returns True when the client was dropped.
        """
        async with self._lock:
            if client is None or client is not self._client:
                return False
            self._client = None
            self._last_error = reason
            self._transition(ClientState.FAILED)
            in_flight = self._in_flight.get(client, 0)
            if in_flight:
                self._retired.add(client)

        if in_flight:
            logger.info("LLM client retired with calls in flight", in_flight=in_flight)
        else:
            await client.close()
        return True

    async def health_check(self) -> bool:
        """Provider availability; False when the client cannot be built."""
        try:
            async with self.lease() as client:
                return await client.health_check()
        except Exception:
            return False

    async def close(self) -> None:
        """Close the current and retired clients (shutdown). Leaves the provider UNINITIALIZED."""
        async with self._lock:
            clients = list(self._retired)
            if self._client is not None:
                clients.append(self._client)
            self._client = None
            self._retired.clear()
            self._transition(ClientState.UNINITIALIZED)
        for client in clients:
            await client.close()
