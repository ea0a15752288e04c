"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from contract_assistant.config import Settings
from contract_assistant.models.enums import ChatPhase, ContractLanguage, MessageRole
from contract_assistant.models.llm_models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)
from contract_assistant.models.session_models import SessionState


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.MAX_RETRIES = 0
    """
    return Settings(
        # === Application ===
        APP_NAME="Smart Contract Assistant (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Provider ===
        OPENAI_API_KEY="sk-test-0123456789abcdef",
        OPENAI_BASE_URL="https://llm.test/v1",
        OPENAI_MODEL="gpt-4o-mini",

        # === Retry & Timeouts ===
        MAX_RETRIES=3,
        RETRY_BASE_DELAY_MS=10,
        RETRY_JITTER_FRACTION=0.2,
        RETRY_MAX_DELAY_MS=1000,
        LLM_ATTEMPT_TIMEOUT_MS=1000,
        CHAT_REQUEST_TIMEOUT_MS=5000,
        CODEGEN_TIMEOUT_MS=5000,

        # === Sessions ===
        SESSION_BACKEND="memory",
        SESSION_IDLE_TIMEOUT_SECONDS=3600,
        REDIS_URL="redis://localhost:6379/0",

        PROMETHEUS_ENABLED=False,  # Disable metrics in tests unless explicitly needed
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def token_spec_data(fixtures_dir: Path) -> Dict[str, Any]:
    """ERC-20 style contract specification (raw dict)."""
    with open(fixtures_dir / "token_spec.json") as f:
        return json.load(f)


@pytest.fixture
def minimal_spec() -> Dict[str, Any]:
    """Smallest specification the schema accepts."""
    return {"contractName": "SimpleStorage"}


@pytest.fixture
def sample_session() -> SessionState:
    """Session in the requirements phase with one exchanged turn."""
    return SessionState(
        session_id="test-session",
        language=ContractLanguage.SOLIDITY,
        phase=ChatPhase.REQUIREMENTS,
        conversation=[
            ChatMessage(role=MessageRole.USER, content="I need a token with a fixed supply"),
            ChatMessage(role=MessageRole.ASSISTANT, content="What should the total supply be?"),
        ],
    )


@pytest.fixture
def sample_completion_request() -> ChatCompletionRequest:
    return ChatCompletionRequest(
        messages=[
            ChatMessage(role=MessageRole.SYSTEM, content="You are a smart contract design assistant."),
            ChatMessage(role=MessageRole.USER, content="Hello"),
        ],
        model="gpt-4o-mini",
        phase="phase1",
    )


@pytest.fixture
def create_completion_response():
    """Factory fixture to create ChatCompletionResponse with custom content.

    Usage:
        def test_something(create_completion_response):
            response = create_completion_response("Assistant text")
    """
    def _create(content: str = "Assistant reply", model: str = "gpt-4o-mini") -> ChatCompletionResponse:
        return ChatCompletionResponse(
            content=content,
            model=model,
            finish_reason="stop",
            prompt_tokens=50,
            completion_tokens=20,
            total_tokens=70,
            latency_ms=120,
            provider_request_id="chatcmpl-test",
        )
    return _create
