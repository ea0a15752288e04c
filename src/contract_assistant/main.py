"""
FastAPI application entry point for the Smart Contract Assistant.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from contract_assistant.api.dependencies import get_client_provider, get_session_store
from contract_assistant.api.error_handlers import EXCEPTION_HANDLERS
from contract_assistant.api.middleware import RequestTracingMiddleware
from contract_assistant.api.routes import router
from contract_assistant.config import settings
from contract_assistant.logging_config import configure_logging
from contract_assistant.sessions.sweeper import SessionSweeper

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Conversational smart contract design with Solidity, Vyper and Rust (ink!) code generation",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, prefix="/api", tags=["assistant"])


@app.on_event("startup")
async def startup():
    """Start the session sweeper and report the provider state."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        base_url=settings.OPENAI_BASE_URL,
        model=settings.OPENAI_MODEL,
        session_backend=settings.SESSION_BACKEND,
    )

    # Client is built here so a missing API key is reported at startup;
    # the provider stays FAILED and the app keeps serving.
    provider = get_client_provider()
    try:
        await provider.ensure_ready()
        logger.info("Completion client ready")
    except Exception as e:
        logger.error("Completion client unavailable", error_type=type(e).__name__, error=str(e))

    sweeper = SessionSweeper(
        get_session_store(),
        interval_seconds=settings.SESSION_SWEEP_INTERVAL_SECONDS,
    )
    sweeper.start()
    app.state.session_sweeper = sweeper

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Stop the sweeper and release the provider client and session store."""
    logger.info("Application shutdown")

    sweeper = getattr(app.state, "session_sweeper", None)
    if sweeper is not None:
        await sweeper.stop()

    await get_client_provider().close()
    await get_session_store().close()

    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/api/health",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "contract_assistant.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
