"""
Completion engine exceptions.

CompletionFailed is the failure arm of CompletionEngine.complete(): it is
raised once the engine stops retrying and always carries a ClassifiedError.
OperationTimeoutError is raised by the timeout guard when an attempt (or a
whole request) outlives its deadline.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contract_assistant.classification.classifier import ClassifiedError


class OperationTimeoutError(TimeoutError):
    """
    Raised by run_with_timeout() when the timer fires first.

    Subclasses the builtin TimeoutError so normalization treats it as an
    elapsed deadline.

    Attributes:
        timeout_ms: Deadline that elapsed, in milliseconds
    """

    def __init__(self, timeout_ms: int, operation: str = "operation") -> None:
        self.timeout_ms = timeout_ms
        self.operation = operation
        super().__init__(f"{operation} timed out after {timeout_ms}ms")


class CompletionFailed(Exception):
    """
    Raised when a completion could not be produced.

    Attributes:
        error: Classification of the last failed attempt
        attempts: Number of raw calls made (1..max_attempts + 1)
    """

    def __init__(self, error: "ClassifiedError", attempts: int) -> None:
        self.error = error
        self.attempts = attempts
        super().__init__(
            f"Completion failed after {attempts} attempt(s): {error.kind.code} ({error.message})"
        )
