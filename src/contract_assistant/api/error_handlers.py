"""
FastAPI exception handlers for structured error responses.

Every error body has the same shape:

    {"error", "code", "message", "status", "retryable", "request_id", "timestamp"}

Completion failures carry their ClassifiedError; anything else unexpected is
classified on the spot, so message heuristics (timeouts, "not found") apply
to it too. No handler puts the cause, a stack trace or a provider body into
the response.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from contract_assistant.assistant.service import SessionStateError
from contract_assistant.classification.classifier import ClassifiedError, classify
from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.redaction.redactor import redact_text, truncate
from contract_assistant.retry.exceptions import CompletionFailed, OperationTimeoutError

logger = structlog.get_logger(__name__)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def error_body(
    request: Request,
    *,
    error: str,
    code: str,
    message: str,
    status_code: int,
    retryable: bool,
    **extra: Any,
) -> dict[str, Any]:
    body = {
        "error": error,
        "code": code,
        "message": message,
        "status": status_code,
        "retryable": retryable,
        "request_id": _request_id(request),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    body.update(extra)
    return body


def classified_response(request: Request, classified: ClassifiedError) -> JSONResponse:
    body = error_body(
        request,
        error=classified.kind.value,
        code=classified.kind.code,
        message=classified.message,
        status_code=classified.response_status,
        retryable=classified.retryable,
    )
    return JSONResponse(status_code=classified.response_status, content=body)


def _log_classified(event: str, classified: ClassifiedError, **fields: Any) -> None:
    cause = classified.cause
    fields.update(
        error_kind=classified.kind.value,
        upstream_status=classified.http_status,
        retryable=classified.retryable,
        cause_type=type(cause).__name__ if cause is not None else None,
        cause=truncate(redact_text(str(cause)), 500) if cause is not None else None,
    )
    if classified.requires_operator:
        logger.error(event, operator_attention=True, **fields)
    else:
        logger.warning(event, **fields)


async def completion_failed_handler(request: Request, exc: CompletionFailed) -> JSONResponse:
    """
    Handle completions that failed after classification.

    RATE_LIMITED / SERVER_ERROR -> 503, TIMEOUT -> 504, AUTH_ERROR -> 500,
    VALIDATION -> 400, NOT_FOUND -> 404, UNKNOWN -> 500.
    """
    _log_classified("Completion failed", exc.error, attempts=exc.attempts)
    return classified_response(request, exc.error)


async def operation_timeout_handler(request: Request, exc: OperationTimeoutError) -> JSONResponse:
    """Route-level deadline elapsed (whole chat request or code generation) -> 504."""
    classified = classify(exc)
    _log_classified("Operation timed out", classified, operation=exc.operation, timeout_ms=exc.timeout_ms)
    return classified_response(request, classified)


async def contract_spec_error_handler(request: Request, exc: ContractSpecError) -> JSONResponse:
    """Invalid contract specification -> 400 with the validation errors."""
    logger.warning("Invalid contract specification", message=exc.message, errors=exc.errors[:5])
    body = error_body(
        request,
        error="invalid_specification",
        code="VALIDATION",
        message=exc.message,
        status_code=status.HTTP_400_BAD_REQUEST,
        retryable=False,
        details=exc.errors,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def session_state_error_handler(request: Request, exc: SessionStateError) -> JSONResponse:
    """Operation not allowed in the current phase -> 409."""
    logger.info("Session state conflict", message=exc.message, phase=exc.phase.value if exc.phase else None)
    body = error_body(
        request,
        error="session_state_conflict",
        code="CONFLICT",
        message=exc.message,
        status_code=status.HTTP_409_CONFLICT,
        retryable=False,
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    """
    Handle invalid request bodies.

    Maps to 400 Bad Request (client error).
    """
    errors = jsonable_encoder(exc.errors(), custom_encoder={Exception: str})
    logger.warning("Invalid request format", error_count=len(errors))
    body = error_body(
        request,
        error="invalid_request",
        code="VALIDATION",
        message="Request validation failed",
        status_code=status.HTTP_400_BAD_REQUEST,
        retryable=False,
        details=errors,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Classified like completion failures; usually UNKNOWN -> 500 with the
    generic message.
    """
    classified = classify(exc)
    logger.exception("Unexpected error", error_type=type(exc).__name__, error_kind=classified.kind.value)
    return classified_response(request, classified)


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    CompletionFailed: completion_failed_handler,
    OperationTimeoutError: operation_timeout_handler,
    ContractSpecError: contract_spec_error_handler,
    SessionStateError: session_state_error_handler,
    RequestValidationError: request_validation_error_handler,
    PydanticValidationError: request_validation_error_handler,
    Exception: generic_error_handler,
}
