"""FastAPI middleware for request tracing and logging."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from contract_assistant.redaction.redactor import SENSITIVE_HEADERS, redact_mapping

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADERS = ("x-request-id", "x-correlation-id")


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID tracing to all requests.

    Features:
    - Reuses an incoming X-Request-ID / X-Correlation-ID, else generates a UUID4
    - Binds request_id to structlog context (appears in all logs)
    - Logs request start (with redacted headers) and end with duration
    - Adds X-Request-ID response header for client correlation
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request with tracing context."""
        request_id = next(
            (request.headers[h] for h in REQUEST_ID_HEADERS if request.headers.get(h)),
            None,
        ) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        logger.info(
            "Request started",
            query_params=dict(request.query_params) if request.query_params else None,
            headers=redact_mapping(dict(request.headers), SENSITIVE_HEADERS),
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            log = logger.warning if response.status_code >= 400 else logger.info
            log(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Request failed",
                exc_info=exc,
                duration_ms=round(duration_ms, 2),
            )
            raise

        finally:
            # Clear context after request (prevent leakage to other requests)
            structlog.contextvars.clear_contextvars()
