"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.lifecycle import LLMClientProvider
from contract_assistant.retry.policy import RetryPolicy


class ScriptedClient(BaseLLMClient):
    """Client answering from a script: each item is a response or an exception to raise."""

    def __init__(self, script):
        super().__init__("https://llm.test/v1", timeout=1.0)
        self.script = list(script)
        self.calls = []
        self.closed = False

    async def chat_completion(self, request):
        self.calls.append(request)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item(request)
        return item

    async def health_check(self) -> bool:
        return True

    async def close(self):
        self.closed = True


@pytest.fixture
def scripted_client():
    """Factory: scripted_client(response, LLMAPIError(...), ...)."""
    def _create(*script) -> ScriptedClient:
        return ScriptedClient(script)
    return _create


@pytest.fixture
def provider_for():
    """Factory building an LLMClientProvider around a given client."""
    def _create(client: BaseLLMClient) -> LLMClientProvider:
        return LLMClientProvider(lambda: client)
    return _create


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Policy with tiny delays; tests still inject a no-op sleep."""
    return RetryPolicy(max_attempts=3, base_delay_ms=10, jitter_fraction=0.2)


@pytest.fixture
def no_sleep():
    """AsyncMock standing in for asyncio.sleep (records requested delays)."""
    return AsyncMock(return_value=None)


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests (async)."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.setex = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.aclose = AsyncMock(return_value=None)
    mock.lock = MagicMock()
    return mock
