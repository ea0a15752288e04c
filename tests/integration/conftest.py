"""Integration test fixtures.

The full FastAPI application runs in-process through TestClient. The
completion provider is replaced by a scripted fake client and the session
store by a fresh in-memory store, via app.dependency_overrides.
"""

import pytest
from fastapi.testclient import TestClient

from contract_assistant.api.dependencies import (
    get_client_provider,
    get_retry_policy,
    get_session_store,
    get_settings,
    get_telemetry_hook,
)
from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.lifecycle import LLMClientProvider
from contract_assistant.main import app
from contract_assistant.models.llm_models import ChatCompletionResponse
from contract_assistant.retry.policy import RetryPolicy
from contract_assistant.sessions.store import InMemorySessionStore


class FakeProviderClient(BaseLLMClient):
    """Provider stand-in; `replies` items are strings, exceptions or async callables."""

    def __init__(self):
        super().__init__("https://llm.test/v1", timeout=1.0)
        self.replies = ["Hello! What should your contract do?"]
        self.requests = []
        self.healthy = True

    def script(self, *replies):
        self.replies = list(replies)

    async def chat_completion(self, request):
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = await reply(request)
        return ChatCompletionResponse(content=reply, model=request.model, finish_reason="stop")

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def fake_llm() -> FakeProviderClient:
    return FakeProviderClient()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(idle_timeout_seconds=3600)


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=2, base_delay_ms=1, jitter_fraction=0.0)


@pytest.fixture
def client(test_settings, fake_llm, session_store, retry_policy):
    """TestClient with provider, store, policy and settings overridden."""
    provider = LLMClientProvider(lambda: fake_llm)

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_client_provider] = lambda: provider
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_retry_policy] = lambda: retry_policy
    app.dependency_overrides[get_telemetry_hook] = lambda: None

    yield TestClient(app, raise_server_exceptions=False, headers={"X-Session-ID": "integration-session"})

    app.dependency_overrides.clear()
