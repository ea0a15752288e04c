"""
OpenAI-compatible chat-completion client.

Communicates with the provider using httpx AsyncClient. Supports:
- POST /chat/completions with optional JSON response format
- GET /models as a lightweight availability probe
- Connection pooling via a persistent AsyncClient

The client performs exactly one HTTP request per call. Retries, attempt
timeouts and classification live in the completion engine.
"""

import time
from typing import Any, Dict, Optional
import httpx
import structlog

from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.exceptions import (
    LLMAPIError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMResponseFormatError,
    LLMTimeoutError,
)
from contract_assistant.models.llm_models import ChatCompletionRequest, ChatCompletionResponse


logger = structlog.get_logger(__name__)


class OpenAIChatClient(BaseLLMClient):
    """
    Chat-completion client for OpenAI and API-compatible providers.

    API Endpoints:
    - POST /chat/completions: Generate the assistant reply
    - GET /models: Availability / credential check
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 60.0,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize the client.

        Args:
            api_key: Provider API key (required)
            base_url: Provider API root
            timeout: Transport-level timeout in seconds
            connection_limits: httpx connection pool limits (default: 20 max connections)
            transport: Optional httpx transport (tests use httpx.MockTransport)

        Raises:
            LLMConfigurationError: If api_key is missing
        """
        if not api_key:
            raise LLMConfigurationError(
                "API key is missing. Set the OPENAI_API_KEY environment variable.",
                details={"setting": "OPENAI_API_KEY"},
            )
        super().__init__(base_url, timeout, **kwargs)

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
                keepalive_expiry=30.0
            )

        self._api_key = api_key
        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    def build_payload(self, request: ChatCompletionRequest) -> Dict[str, Any]:
        """Translate the internal request into the provider payload."""
        payload: Dict[str, Any] = {
            "model": request.model,
            "messages": [message.model_dump() for message in request.messages],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "frequency_penalty": 0.0,
            "presence_penalty": 0.0,
        }
        if request.top_p is not None:
            payload["top_p"] = request.top_p
        if request.json_response:
            payload["response_format"] = {"type": "json_object"}
        return payload

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        POST /chat/completions.

        Response (abridged):
        {
            "id": "chatcmpl-...",
            "model": "gpt-4o-mini",
            "choices": [{"message": {"role": "assistant", "content": "..."},
                         "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 50, "completion_tokens": 150, "total_tokens": 200}
        }
        """
        start_time = time.perf_counter()
        payload = self.build_payload(request)

        logger.info(
            "Sending chat completion request",
            phase=request.phase,
            model=request.model,
            messages=len(request.messages),
            json_response=request.json_response,
        )

        client = await self._get_client()
        try:
            response = await client.post("/chat/completions", json=payload)
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Provider request timeout after {self.timeout}s",
                details={"timeout": self.timeout, "error_type": type(e).__name__},
            ) from e
        except httpx.TransportError as e:
            raise LLMConnectionError(
                f"Network error: {str(e)}",
                details={"error_type": type(e).__name__},
            ) from e

        if response.is_error:
            raise self._api_error(response)

        try:
            data = response.json()
            choice = data["choices"][0]
            content = choice["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMResponseFormatError(
                "Malformed chat completion response",
                details={"parse_error": str(e)},
            ) from e

        if not content:
            raise LLMResponseFormatError(
                "Empty response from provider",
                details={"finish_reason": choice.get("finish_reason")},
            )

        usage = data.get("usage") or {}
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        logger.info(
            "Chat completion successful",
            model=data.get("model", request.model),
            latency_ms=latency_ms,
            content_length=len(content),
            total_tokens=usage.get("total_tokens"),
        )

        return ChatCompletionResponse(
            content=content,
            model=data.get("model", request.model),
            finish_reason=choice.get("finish_reason"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
            latency_ms=latency_ms,
            provider_request_id=data.get("id"),
            raw_metadata={"system_fingerprint": data.get("system_fingerprint")},
        )

    @staticmethod
    def _api_error(response: httpx.Response) -> LLMAPIError:
        """Build an LLMAPIError from the provider's error envelope."""
        error_body: Dict[str, Any] = {}
        try:
            body = response.json()
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                error_body = body["error"]
        except ValueError:
            # Not JSON, or not decodable text (gateway HTML pages)
            pass

        message = error_body.get("message") or f"Provider returned HTTP {response.status_code}"
        logger.warning(
            "Provider HTTP error",
            status_code=response.status_code,
            error_type=error_body.get("type"),
            error_code=error_body.get("code"),
        )
        return LLMAPIError(
            message,
            status_code=response.status_code,
            error_type=error_body.get("type"),
            code=error_body.get("code"),
            param=error_body.get("param"),
            details={"status": response.status_code},
        )

    async def health_check(self) -> bool:
        """
        Check provider availability via GET /models.

        Returns True if the provider answers 2xx, False otherwise.
        """
        try:
            client = await self._get_client()
            response = await client.get("/models", timeout=10.0)
            response.raise_for_status()
            logger.debug("Provider health check passed")
            return True
        except Exception as e:
            logger.warning("Provider health check failed", error=str(e), error_type=type(e).__name__)
            return False

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed provider client connection")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
