"""
Backoff policy.

Exponential backoff with additive jitter:

    delay(i) = base * 2**i + uniform(0, jitter_fraction * base * 2**i)

`i` is 0 before the first retry. Jitter is never negative, so without a cap
delay(i) >= base * 2**i and the lower bound grows monotonically with i.
"""

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, FrozenSet, Optional

from contract_assistant.models.enums import ErrorKind

if TYPE_CHECKING:
    from contract_assistant.classification.classifier import ClassifiedError
    from contract_assistant.config import Settings

DEFAULT_RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({429, 500, 502, 503, 504})
DEFAULT_RETRYABLE_ERROR_KINDS: FrozenSet[ErrorKind] = frozenset(
    {ErrorKind.RATE_LIMITED, ErrorKind.SERVER_ERROR, ErrorKind.TIMEOUT}
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry configuration, shared read-only by all calls.

    Attributes:
        max_attempts: Retries after the first call (total calls <= max_attempts + 1)
        base_delay_ms: Delay before the first retry, without jitter
        jitter_fraction: Upper bound of the additive jitter, relative to the delay
        retryable_status_codes: Upstream statuses that may be retried
        retryable_error_kinds: Error kinds that may be retried
        max_delay_ms: Optional cap on a single delay (None = uncapped)
    """

    max_attempts: int = 3
    base_delay_ms: int = 2000
    jitter_fraction: float = 0.2
    retryable_status_codes: FrozenSet[int] = field(default=DEFAULT_RETRYABLE_STATUS_CODES)
    retryable_error_kinds: FrozenSet[ErrorKind] = field(default=DEFAULT_RETRYABLE_ERROR_KINDS)
    max_delay_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay_ms <= 0:
            raise ValueError("base_delay_ms must be > 0")
        if not 0 <= self.jitter_fraction < 1:
            raise ValueError("jitter_fraction must be in [0, 1)")
        if self.max_delay_ms is not None and self.max_delay_ms <= 0:
            raise ValueError("max_delay_ms must be > 0 when set")
        # Accept any iterable but store frozensets so the policy stays hashable
        object.__setattr__(self, "retryable_status_codes", frozenset(self.retryable_status_codes))
        object.__setattr__(self, "retryable_error_kinds", frozenset(self.retryable_error_kinds))

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryPolicy":
        return cls(
            max_attempts=settings.MAX_RETRIES,
            base_delay_ms=settings.RETRY_BASE_DELAY_MS,
            jitter_fraction=settings.RETRY_JITTER_FRACTION,
            max_delay_ms=settings.RETRY_MAX_DELAY_MS,
        )


def next_delay(
    attempt_index: int,
    policy: RetryPolicy,
    uniform: Callable[[float, float], float] = random.uniform,
) -> float:
    """
    Delay in milliseconds before retry number `attempt_index` (0-based).

    Args:
        attempt_index: 0 before the first retry, 1 before the second, ...
        policy: Retry policy
        uniform: Jitter source (tests pass a deterministic one)

    Returns:
        Delay in milliseconds, capped at policy.max_delay_ms when set
    """
    if attempt_index < 0:
        raise ValueError("attempt_index must be >= 0")

    exponential = policy.base_delay_ms * (2 ** attempt_index)
    jitter = uniform(0, policy.jitter_fraction * exponential) if policy.jitter_fraction else 0.0
    delay = exponential + max(jitter, 0.0)

    if policy.max_delay_ms is not None:
        delay = min(delay, policy.max_delay_ms)
    return delay


def should_retry(attempt_index: int, policy: RetryPolicy, error: "ClassifiedError") -> bool:
    """
    Decide whether the failed attempt `attempt_index` gets another try.

    The classifier's `retryable` flag is authoritative; the policy's sets
    can only narrow it.
    """
    if attempt_index >= policy.max_attempts:
        return False
    if not error.retryable:
        return False
    if error.kind in policy.retryable_error_kinds:
        return True
    return error.http_status is not None and error.http_status in policy.retryable_status_codes
