"""
Resilience layer around the outbound completion call.

Main Components:
    - RetryPolicy / next_delay / should_retry: exponential backoff with jitter
    - run_with_timeout: timeout guard for a single awaitable
    - CompletionEngine: retry loop with classification and telemetry
    - CompletionFailed: failure arm of CompletionEngine.complete()

Usage:
    >>> from contract_assistant.retry import CompletionEngine, RetryPolicy
    >>> engine = CompletionEngine(provider, RetryPolicy())
    >>> response = await engine.complete(request)
"""

from contract_assistant.retry.engine import CompletionEngine
from contract_assistant.retry.exceptions import CompletionFailed, OperationTimeoutError
from contract_assistant.retry.metadata import AttemptFailure, AttemptResult, AttemptSuccess, CallContext
from contract_assistant.retry.policy import RetryPolicy, next_delay, should_retry
from contract_assistant.retry.timeout import run_with_timeout

__all__ = [
    "CompletionEngine",
    "CompletionFailed",
    "OperationTimeoutError",
    "AttemptFailure",
    "AttemptResult",
    "AttemptSuccess",
    "CallContext",
    "RetryPolicy",
    "next_delay",
    "should_retry",
    "run_with_timeout",
]
