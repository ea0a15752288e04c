"""Monitoring and metrics instrumentation for the Smart Contract Assistant.

Exports custom Prometheus metrics and the completion telemetry hooks.
"""

from contract_assistant.monitoring.metrics import (
    contracts_generated_total,
    llm_attempt_latency_seconds,
    llm_attempts_total,
    llm_client_state_transitions_total,
    llm_completions_total,
    llm_retries_total,
    sessions_active,
    sessions_swept_total,
)
from contract_assistant.monitoring.telemetry import (
    AttemptEvent,
    LoggingAttemptHook,
    PrometheusAttemptHook,
    compose_hooks,
)

__all__ = [
    "llm_attempts_total",
    "llm_retries_total",
    "llm_attempt_latency_seconds",
    "llm_completions_total",
    "llm_client_state_transitions_total",
    "sessions_active",
    "sessions_swept_total",
    "contracts_generated_total",
    "AttemptEvent",
    "LoggingAttemptHook",
    "PrometheusAttemptHook",
    "compose_hooks",
]
