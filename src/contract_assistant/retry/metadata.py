"""
Per-attempt bookkeeping for the completion engine.

CallContext describes one attempt while it runs. AttemptResult is the tagged
union produced by each attempt; only the last one becomes the outcome of
complete(). Neither is persisted.
"""

import time
from dataclasses import dataclass, field
from typing import Optional, Union

from contract_assistant.classification.classifier import ClassifiedError
from contract_assistant.models.llm_models import ChatCompletionResponse


@dataclass(frozen=True)
class CallContext:
    """
    Attributes:
        attempt_index: 0 for the first call, incremented per retry
        started_at: Monotonic start time (seconds)
        deadline: Monotonic deadline (seconds), None when unbounded
    """

    attempt_index: int
    started_at: float = field(default_factory=time.monotonic)
    deadline: Optional[float] = None

    def __post_init__(self) -> None:
        if self.attempt_index < 0:
            raise ValueError("attempt_index must be >= 0")

    @classmethod
    def start(cls, attempt_index: int, timeout_ms: Optional[int]) -> "CallContext":
        now = time.monotonic()
        deadline = now + timeout_ms / 1000 if timeout_ms is not None else None
        return cls(attempt_index=attempt_index, started_at=now, deadline=deadline)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)


@dataclass(frozen=True)
class AttemptSuccess:
    response: ChatCompletionResponse
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class AttemptFailure:
    error: ClassifiedError
    ok: bool = field(default=False, init=False)


AttemptResult = Union[AttemptSuccess, AttemptFailure]
