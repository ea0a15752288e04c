"""Unit tests for OpenAIChatClient (httpx.MockTransport, no network)."""

import json

import httpx
import pytest

from contract_assistant.classification.classifier import classify
from contract_assistant.llm.exceptions import (
    LLMAPIError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMResponseFormatError,
    LLMTimeoutError,
)
from contract_assistant.llm.openai_client import OpenAIChatClient
from contract_assistant.models.enums import ErrorKind, MessageRole
from contract_assistant.models.llm_models import ChatCompletionRequest, ChatMessage


COMPLETION_BODY = {
    "id": "chatcmpl-123",
    "model": "gpt-4o-mini-2024-07-18",
    "choices": [{"message": {"role": "assistant", "content": "Hello!"}, "finish_reason": "stop"}],
    "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
}


def make_client(handler) -> OpenAIChatClient:
    return OpenAIChatClient(
        api_key="sk-test-0123456789abcdef",
        base_url="https://llm.test/v1",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def request_json_mode():
    return ChatCompletionRequest(
        messages=[ChatMessage(role=MessageRole.USER, content="Summarize")],
        model="gpt-4o-mini",
        temperature=0.3,
        max_tokens=1500,
        top_p=0.95,
        json_response=True,
        phase="summary",
    )


def test_missing_api_key_raises_configuration_error():
    with pytest.raises(LLMConfigurationError):
        OpenAIChatClient(api_key=None)

    with pytest.raises(LLMConfigurationError):
        OpenAIChatClient(api_key="")


def test_build_payload(request_json_mode):
    client = make_client(lambda request: httpx.Response(200, json=COMPLETION_BODY))
    payload = client.build_payload(request_json_mode)

    assert payload["model"] == "gpt-4o-mini"
    assert payload["messages"] == [{"role": "user", "content": "Summarize"}]
    assert payload["temperature"] == 0.3
    assert payload["max_tokens"] == 1500
    assert payload["top_p"] == 0.95
    assert payload["response_format"] == {"type": "json_object"}


def test_build_payload_without_optional_fields(sample_completion_request):
    client = make_client(lambda request: httpx.Response(200, json=COMPLETION_BODY))
    payload = client.build_payload(sample_completion_request)

    assert "top_p" not in payload
    assert "response_format" not in payload


@pytest.mark.asyncio
async def test_chat_completion_success(sample_completion_request):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=COMPLETION_BODY)

    client = make_client(handler)
    response = await client.chat_completion(sample_completion_request)
    await client.close()

    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test-0123456789abcdef"
    assert seen["body"]["messages"][0]["role"] == "system"
    assert response.content == "Hello!"
    assert response.model == "gpt-4o-mini-2024-07-18"
    assert response.finish_reason == "stop"
    assert response.total_tokens == 15
    assert response.provider_request_id == "chatcmpl-123"


@pytest.mark.asyncio
async def test_error_envelope_becomes_api_error(sample_completion_request):
    body = {"error": {"message": "Rate limit reached", "type": "requests", "code": "rate_limit_exceeded", "param": None}}
    client = make_client(lambda request: httpx.Response(429, json=body))

    with pytest.raises(LLMAPIError) as exc_info:
        await client.chat_completion(sample_completion_request)

    assert exc_info.value.status_code == 429
    assert exc_info.value.message == "Rate limit reached"
    assert exc_info.value.error_type == "requests"
    assert exc_info.value.code == "rate_limit_exceeded"


@pytest.mark.asyncio
async def test_non_json_error_body(sample_completion_request):
    client = make_client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))

    with pytest.raises(LLMAPIError) as exc_info:
        await client.chat_completion(sample_completion_request)

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Provider returned HTTP 502"


@pytest.mark.asyncio
async def test_undecodable_error_body_keeps_status(sample_completion_request):
    client = make_client(lambda request: httpx.Response(502, content=b"<html>Bad Gateway \xe9\xff</html>"))

    with pytest.raises(LLMAPIError) as exc_info:
        await client.chat_completion(sample_completion_request)

    assert exc_info.value.status_code == 502
    classified = classify(exc_info.value)
    assert classified.kind is ErrorKind.SERVER_ERROR
    assert classified.retryable is True


@pytest.mark.asyncio
async def test_undecodable_success_body(sample_completion_request):
    client = make_client(lambda request: httpx.Response(200, content=b"\xe9\xff\xfe"))

    with pytest.raises(LLMResponseFormatError):
        await client.chat_completion(sample_completion_request)


@pytest.mark.asyncio
async def test_transport_timeout(sample_completion_request):
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(LLMTimeoutError):
        await make_client(handler).chat_completion(sample_completion_request)


@pytest.mark.asyncio
async def test_connection_error(sample_completion_request):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LLMConnectionError) as exc_info:
        await make_client(handler).chat_completion(sample_completion_request)

    assert not isinstance(exc_info.value, LLMTimeoutError)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"choices": [{"message": {"role": "assistant", "content": ""}}]},
        {"unexpected": True},
    ],
)
async def test_unusable_success_body(sample_completion_request, body):
    client = make_client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(LLMResponseFormatError):
        await client.chat_completion(sample_completion_request)


@pytest.mark.asyncio
async def test_health_check():
    healthy = make_client(lambda request: httpx.Response(200, json={"data": []}))
    unhealthy = make_client(lambda request: httpx.Response(401, json={"error": {"message": "bad key"}}))

    assert await healthy.health_check() is True
    assert await unhealthy.health_check() is False


@pytest.mark.asyncio
async def test_close_is_idempotent(sample_completion_request):
    client = make_client(lambda request: httpx.Response(200, json=COMPLETION_BODY))
    await client.chat_completion(sample_completion_request)

    await client.close()
    await client.close()
