"""
Error classifier.

Maps any failure of a raw completion call to exactly one ErrorKind with a
user-facing message and a retryable flag. Rules are evaluated in order and
the first match wins; status codes are checked before message heuristics, so
a 500 whose body says "not found" is still a SERVER_ERROR.

    Rule  Match                                   Kind          Retryable
    1     status 429                              RATE_LIMITED  yes
    2     status >= 500 / no response at all      SERVER_ERROR  yes
    3     status 401                              AUTH_ERROR    no (operator)
    4     status 400 / validation signature       VALIDATION    no
    5     deadline elapsed / aborted              TIMEOUT       yes
    6     status 404 / "not found" in message     NOT_FOUND     no
    7     anything else                           UNKNOWN       no
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import structlog

from contract_assistant.classification.raw_error import RawCallError, normalize_error
from contract_assistant.models.enums import ErrorKind

logger = structlog.get_logger(__name__)

RATE_LIMITED_MESSAGE = "rate limit exceeded, try again later"
SERVER_ERROR_MESSAGE = "service temporarily unavailable"
AUTH_ERROR_MESSAGE = "authentication failed"
VALIDATION_MESSAGE = "invalid request parameters"
TIMEOUT_MESSAGE = "request timed out"
NOT_FOUND_MESSAGE = "requested resource not found"
UNKNOWN_MESSAGE = "an unexpected error occurred"

_VALIDATION_TYPES = {"ValidationError", "JSONDecodeError", "SyntaxError"}
_VALIDATION_PATTERN = re.compile(
    r"invalid (request|parameter|argument)|validation (error|failed)",
    re.IGNORECASE,
)

_TIMEOUT_TYPES = {"TimeoutError", "OperationTimeoutError", "AbortError", "CancelledError", "LLMTimeoutError"}
_TIMEOUT_PATTERN = re.compile(r"timed? ?out|timeout|abort", re.IGNORECASE)

_NOT_FOUND_PATTERN = re.compile(r"not found", re.IGNORECASE)

# HTTP status returned to our own clients for each kind
HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 503,
    ErrorKind.SERVER_ERROR: 503,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.AUTH_ERROR: 500,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNKNOWN: 500,
}


@dataclass(frozen=True)
class ClassifiedError:
    """
    Classification of a failed call.

    Attributes:
        kind: Error category
        http_status: Upstream status code, when the provider answered
        message: Safe, user-facing message
        retryable: Whether another attempt may succeed
        requires_operator: Credentials or configuration need a human
        cause: Original error; for logs and telemetry only, never serialized
    """

    kind: ErrorKind
    message: str
    retryable: bool
    http_status: Optional[int] = None
    requires_operator: bool = False
    cause: Any = field(default=None, repr=False, compare=False)

    @property
    def response_status(self) -> int:
        """HTTP status our API answers with for this error."""
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind.value,
            "code": self.kind.code,
            "message": self.message,
            "status": self.response_status,
            "retryable": self.retryable,
        }


def _has_validation_signature(raw: RawCallError) -> bool:
    if raw.error_type in _VALIDATION_TYPES:
        return True
    return bool(raw.message and _VALIDATION_PATTERN.search(raw.message))


def _has_timeout_signature(raw: RawCallError) -> bool:
    if raw.timed_out or raw.error_type in _TIMEOUT_TYPES:
        return True
    return bool(raw.message and _TIMEOUT_PATTERN.search(raw.message))


def _classify_raw(raw: RawCallError) -> ClassifiedError:
    status = raw.status

    if status == 429:
        return ClassifiedError(ErrorKind.RATE_LIMITED, RATE_LIMITED_MESSAGE, retryable=True, http_status=status)

    if (status is not None and status >= 500) or (status is None and raw.transport_failure):
        return ClassifiedError(ErrorKind.SERVER_ERROR, SERVER_ERROR_MESSAGE, retryable=True, http_status=status)

    if status == 401:
        return ClassifiedError(
            ErrorKind.AUTH_ERROR,
            AUTH_ERROR_MESSAGE,
            retryable=False,
            http_status=status,
            requires_operator=True,
        )

    if status == 400 or _has_validation_signature(raw):
        return ClassifiedError(ErrorKind.VALIDATION, VALIDATION_MESSAGE, retryable=False, http_status=status)

    if _has_timeout_signature(raw):
        return ClassifiedError(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, retryable=True, http_status=status)

    if status == 404 or (raw.message and _NOT_FOUND_PATTERN.search(raw.message)):
        return ClassifiedError(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE, retryable=False, http_status=status)

    return ClassifiedError(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE, retryable=False, http_status=status)


def classify(error: BaseException | RawCallError | None) -> ClassifiedError:
    """
    Classify a failure. Total: never raises, always returns one kind.

    Args:
        error: Exception from the raw call, or an already normalized RawCallError

    Returns:
        ClassifiedError whose `cause` is the original exception
    """
    try:
        raw = normalize_error(error)
        classified = _classify_raw(raw)
    except Exception as e:  # classification must stay total
        logger.error("Error classification failed", error_type=type(e).__name__, exc_info=True)
        return ClassifiedError(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE, retryable=False, cause=error)

    cause = raw.cause if raw.cause is not None else error
    return ClassifiedError(
        kind=classified.kind,
        message=classified.message,
        retryable=classified.retryable,
        http_status=classified.http_status,
        requires_operator=classified.requires_operator,
        cause=cause,
    )
