"""
Completion engine: the resilient wrapper around one chat completion.

Each attempt runs the raw call under the timeout guard. Failures are
normalized and classified; the backoff policy decides whether to sleep and
try again. The engine is bounded: at most `policy.max_attempts + 1` raw calls
per complete().

    attempt 0 ──ok──> return response
        │ fail
        ├─ classify ─> should_retry? ──no──> raise CompletionFailed(error)
        │                 │ yes
        └──── sleep(next_delay(i)) <─┘  i += 1, next attempt

Usage:
    engine = CompletionEngine(provider, RetryPolicy.from_settings(settings))
    response = await engine.complete(request)
"""

import asyncio
import random
from typing import Awaitable, Callable, Optional

import structlog

from contract_assistant.classification.classifier import ClassifiedError, classify
from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.lifecycle import LLMClientProvider
from contract_assistant.models.enums import ErrorKind
from contract_assistant.models.llm_models import ChatCompletionRequest, ChatCompletionResponse
from contract_assistant.monitoring.metrics import llm_completions_total
from contract_assistant.monitoring.telemetry import AttemptEvent, AttemptHook, emit
from contract_assistant.retry.exceptions import CompletionFailed
from contract_assistant.retry.metadata import AttemptFailure, AttemptResult, AttemptSuccess, CallContext
from contract_assistant.retry.policy import RetryPolicy, next_delay, should_retry
from contract_assistant.retry.timeout import run_with_timeout

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CompletionEngine:
    """
    Retry/timeout/classification wrapper around LLMClientProvider.

    Attributes:
        provider: Owner of the raw client (injected, shared)
        policy: Default retry policy
        attempt_timeout_ms: Default per-attempt deadline
        telemetry_hook: Optional on_attempt callable
    """

    def __init__(
        self,
        provider: LLMClientProvider,
        policy: RetryPolicy,
        attempt_timeout_ms: int = 60000,
        telemetry_hook: Optional[AttemptHook] = None,
        sleep: Sleep = asyncio.sleep,
        uniform: Callable[[float, float], float] = random.uniform,
    ):
        self.provider = provider
        self.policy = policy
        self.attempt_timeout_ms = attempt_timeout_ms
        self.telemetry_hook = telemetry_hook
        self._sleep = sleep
        self._uniform = uniform

    async def _raw_call(self, request: ChatCompletionRequest, used: list[BaseLLMClient]) -> ChatCompletionResponse:
        async with self.provider.lease() as client:
            used.append(client)
            return await client.chat_completion(request)

    async def _attempt(
        self, request: ChatCompletionRequest, timeout_ms: int
    ) -> tuple[AttemptResult, Optional[BaseLLMClient]]:
        """Run one raw call; returns the result and the client it used (None if none was ready)."""
        used: list[BaseLLMClient] = []
        try:
            response = await run_with_timeout(self._raw_call(request, used), timeout_ms, "llm_attempt")
        except Exception as e:
            return AttemptFailure(classify(e)), (used[0] if used else None)
        return AttemptSuccess(response), used[0]

    async def _on_failure(self, error: ClassifiedError, client: Optional[BaseLLMClient]) -> None:
        # Broken credentials or a dead connection: rebuild the client this call used
        if error.kind is ErrorKind.AUTH_ERROR or (
            error.kind is ErrorKind.SERVER_ERROR and error.http_status is None
        ):
            await self.provider.mark_failed(client, error.cause)

    async def complete(
        self,
        request: ChatCompletionRequest,
        policy: Optional[RetryPolicy] = None,
        timeout_ms: Optional[int] = None,
    ) -> ChatCompletionResponse:
        """
        Produce one completion, retrying transient failures.

        Args:
            request: Chat completion request
            policy: Override of the engine's default policy
            timeout_ms: Override of the per-attempt deadline

        Returns:
            The first successful ChatCompletionResponse

        Raises:
            CompletionFailed: Non-retryable failure, or retries exhausted
        """
        if policy is None:
            policy = self.policy
        if timeout_ms is None:
            timeout_ms = self.attempt_timeout_ms
        attempt_index = 0

        while True:
            context = CallContext.start(attempt_index, timeout_ms)
            result, client = await self._attempt(request, timeout_ms)
            elapsed_ms = context.elapsed_ms()

            if isinstance(result, AttemptSuccess):
                emit(self.telemetry_hook, AttemptEvent(
                    attempt_index=attempt_index,
                    outcome="success",
                    elapsed_ms=elapsed_ms,
                    phase=request.phase,
                ))
                llm_completions_total.labels(status="success").inc()
                return result.response

            error = result.error
            await self._on_failure(error, client)

            retry = should_retry(attempt_index, policy, error)
            delay_ms = next_delay(attempt_index, policy, self._uniform) if retry else None
            emit(self.telemetry_hook, AttemptEvent(
                attempt_index=attempt_index,
                outcome="failure",
                elapsed_ms=elapsed_ms,
                error=error,
                will_retry=retry,
                delay_ms=delay_ms,
                phase=request.phase,
            ))

            if not retry:
                llm_completions_total.labels(status="failed").inc()
                logger.info(
                    "Completion failed",
                    error_kind=error.kind.value,
                    attempts=attempt_index + 1,
                    retryable=error.retryable,
                )
                raise CompletionFailed(error, attempts=attempt_index + 1)

            await self._sleep(delay_ms / 1000)
            attempt_index += 1
