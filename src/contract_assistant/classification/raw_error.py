"""
Canonical raw-error shape.

Failures reach the completion engine from several sources: provider HTTP
errors, httpx transport errors, the timeout guard, client construction, and
plain Python exceptions whose status lives under `status`, `status_code` or
`statusCode`. normalize_error() turns all of them into one RawCallError at
the raw call boundary, so the classifier only ever looks at a single shape.
"""

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
import pydantic

from contract_assistant.llm.exceptions import (
    LLMAPIError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMTimeoutError,
)

_STATUS_ATTRIBUTES = ("status", "status_code", "statusCode", "http_status")


@dataclass(frozen=True)
class RawCallError:
    """
    Normalized failure of one raw call.

    Attributes:
        status: HTTP status code if the provider answered
        message: Best available error text (may be empty)
        error_type: Provider error type or Python exception class name
        code: Provider error code (e.g. "rate_limit_exceeded")
        timed_out: A deadline elapsed or the call was aborted
        transport_failure: No response was received (connection level)
        cause: Original exception, kept for logging only
    """

    status: Optional[int] = None
    message: str = ""
    error_type: Optional[str] = None
    code: Optional[str] = None
    timed_out: bool = False
    transport_failure: bool = False
    cause: Optional[BaseException] = field(default=None, repr=False, compare=False)


def _safe_str(value: Any) -> str:
    try:
        return str(value) if value is not None else ""
    except Exception:
        return ""


def _coerce_status(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _duck_typed_status(exc: BaseException) -> Optional[int]:
    for attribute in _STATUS_ATTRIBUTES:
        status = _coerce_status(getattr(exc, attribute, None))
        if status is not None:
            return status
    response = getattr(exc, "response", None)
    if response is not None:
        return _coerce_status(getattr(response, "status_code", None))
    return None


def _http_status_error(exc: httpx.HTTPStatusError) -> RawCallError:
    message = ""
    error_type = None
    code = None
    try:
        body = exc.response.json()
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = _safe_str(body["error"].get("message"))
            error_type = body["error"].get("type")
            code = body["error"].get("code")
    except (json.JSONDecodeError, UnicodeDecodeError, httpx.ResponseNotRead):
        pass
    return RawCallError(
        status=exc.response.status_code,
        message=message or _safe_str(exc),
        error_type=error_type or type(exc).__name__,
        code=code,
        cause=exc,
    )


def normalize_error(exc: BaseException | RawCallError | None) -> RawCallError:
    """
    Normalize any failure into a RawCallError. Never raises.

    Args:
        exc: Exception raised by the raw call (or an already normalized error)

    Returns:
        RawCallError carrying the original exception as `cause`
    """
    if isinstance(exc, RawCallError):
        return exc
    if exc is None:
        return RawCallError()

    message = _safe_str(exc)
    error_type = type(exc).__name__

    if isinstance(exc, LLMAPIError):
        return RawCallError(
            status=exc.status_code,
            message=exc.message,
            error_type=exc.error_type or error_type,
            code=exc.code,
            cause=exc,
        )
    if isinstance(exc, LLMConfigurationError):
        # Missing or unusable credentials: same meaning as a provider 401
        return RawCallError(status=401, message=exc.message, error_type=error_type, cause=exc)
    if isinstance(exc, (LLMTimeoutError, httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return RawCallError(message=message, error_type=error_type, timed_out=True, cause=exc)
    if isinstance(exc, asyncio.CancelledError):
        return RawCallError(message=message or "aborted", error_type=error_type, timed_out=True, cause=exc)
    if isinstance(exc, (LLMConnectionError, httpx.TransportError)):
        return RawCallError(message=message, error_type=error_type, transport_failure=True, cause=exc)
    if isinstance(exc, httpx.HTTPStatusError):
        return _http_status_error(exc)
    if isinstance(exc, (pydantic.ValidationError, json.JSONDecodeError)):
        return RawCallError(message=message, error_type=error_type, cause=exc)

    return RawCallError(
        status=_duck_typed_status(exc),
        message=message,
        error_type=_safe_str(getattr(exc, "type", None)) or error_type,
        code=_safe_str(getattr(exc, "code", None)) or None,
        cause=exc,
    )
