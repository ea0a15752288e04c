"""Custom Prometheus metrics for the Smart Contract Assistant.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- llm_attempts_total (error_kind="auth_error" needs operator attention)
- llm_retries_total (high retry rate indicates provider instability)
- llm_completions_total (status="failed" ratio)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Completion Attempt Metrics ===

llm_attempts_total = Counter(
    "llm_attempts_total",
    "Total raw completion attempts by outcome and error kind",
    ["outcome", "error_kind"],
)
"""
Raw call attempts.

Labels:
- outcome: success, failure
- error_kind: ErrorKind value, or "none" on success

Alert thresholds:
- CRITICAL: any error_kind="auth_error" (credentials broken)
"""

llm_retries_total = Counter(
    "llm_retries_total",
    "Total retries scheduled by error kind",
    ["error_kind"],
)
"""
Retries scheduled after a retryable failure.

Alert thresholds:
- WARN: retry rate > 10% of attempts
- CRITICAL: retry rate > 30% of attempts
"""

llm_attempt_latency_seconds = Histogram(
    "llm_attempt_latency_seconds",
    "Latency of a single raw completion attempt in seconds",
    ["outcome"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

llm_completions_total = Counter(
    "llm_completions_total",
    "Completed CompletionEngine.complete() calls by final status",
    ["status"],
)
"""
Final outcome of complete(): status is "success" or "failed".
"""

llm_client_state_transitions_total = Counter(
    "llm_client_state_transitions_total",
    "Provider client lifecycle transitions by target state",
    ["state"],
)

# === Session Metrics ===

sessions_active = Gauge(
    "sessions_active",
    "Sessions currently held by the in-memory store",
)

sessions_swept_total = Counter(
    "sessions_swept_total",
    "Idle sessions removed by the periodic sweep",
)

# === Code Generation Metrics ===

contracts_generated_total = Counter(
    "contracts_generated_total",
    "Generated contracts by language and whether the fallback template was used",
    ["language", "fallback"],
)
