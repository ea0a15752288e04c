"""
Completion telemetry hooks.

The completion engine reports every attempt and every retry decision as an
AttemptEvent to a single `on_attempt` callable. Hooks are fire-and-forget:
the engine calls them through `emit()`, which logs and swallows any hook
failure so telemetry can never change control flow.

Usage:
    hook = compose_hooks(LoggingAttemptHook(), PrometheusAttemptHook())
    engine = CompletionEngine(provider, policy, telemetry_hook=hook)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from contract_assistant.monitoring.metrics import (
    llm_attempt_latency_seconds,
    llm_attempts_total,
    llm_retries_total,
)
from contract_assistant.redaction.redactor import redact_text, truncate

if TYPE_CHECKING:
    from contract_assistant.classification.classifier import ClassifiedError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AttemptEvent:
    """
    One completed attempt as seen by telemetry.

    Attributes:
        attempt_index: 0-based attempt number
        outcome: "success" or "failure"
        elapsed_ms: Duration of the raw call including the timeout guard
        error: Classification of the failure (None on success)
        will_retry: Whether the engine schedules another attempt
        delay_ms: Backoff delay before the next attempt (None when not retrying)
        phase: Prompt phase of the request, for log correlation
    """

    attempt_index: int
    outcome: str
    elapsed_ms: int
    error: Optional["ClassifiedError"] = None
    will_retry: bool = False
    delay_ms: Optional[float] = None
    phase: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == "success"


AttemptHook = Callable[[AttemptEvent], None]


def emit(hook: Optional[AttemptHook], event: AttemptEvent) -> None:
    """Deliver `event` to `hook`; a missing or failing hook is ignored."""
    if hook is None:
        return
    try:
        hook(event)
    except Exception as e:
        logger.warning(
            "Telemetry hook failed",
            hook=getattr(hook, "__name__", type(hook).__name__),
            error_type=type(e).__name__,
        )


class LoggingAttemptHook:
    """Structured log line per attempt; cause text is redacted and truncated."""

    def __init__(self, max_cause_length: int = 500):
        self.max_cause_length = max_cause_length

    def __call__(self, event: AttemptEvent) -> None:
        if event.succeeded:
            logger.info(
                "LLM attempt succeeded",
                attempt=event.attempt_index,
                elapsed_ms=event.elapsed_ms,
                phase=event.phase,
            )
            return

        error = event.error
        fields = {
            "attempt": event.attempt_index,
            "elapsed_ms": event.elapsed_ms,
            "phase": event.phase,
            "error_kind": error.kind.value if error else None,
            "upstream_status": error.http_status if error else None,
            "will_retry": event.will_retry,
            "delay_ms": round(event.delay_ms) if event.delay_ms is not None else None,
        }
        if error is not None and error.cause is not None:
            fields["cause"] = truncate(redact_text(str(error.cause)), self.max_cause_length)
            fields["cause_type"] = type(error.cause).__name__

        if error is not None and error.requires_operator:
            logger.error("LLM attempt failed: operator attention required", operator_attention=True, **fields)
        elif event.will_retry:
            logger.warning("LLM attempt failed, retrying", **fields)
        else:
            logger.warning("LLM attempt failed", **fields)


class PrometheusAttemptHook:
    """Feeds llm_attempts_total, llm_retries_total and llm_attempt_latency_seconds."""

    def __call__(self, event: AttemptEvent) -> None:
        error_kind = event.error.kind.value if event.error else "none"
        llm_attempts_total.labels(outcome=event.outcome, error_kind=error_kind).inc()
        llm_attempt_latency_seconds.labels(outcome=event.outcome).observe(event.elapsed_ms / 1000)
        if event.will_retry:
            llm_retries_total.labels(error_kind=error_kind).inc()


def compose_hooks(*hooks: Optional[AttemptHook]) -> AttemptHook:
    """Combine hooks into one; each hook is isolated from the others' failures."""
    active = [hook for hook in hooks if hook is not None]

    def composed(event: AttemptEvent) -> None:
        for hook in active:
            emit(hook, event)

    return composed
