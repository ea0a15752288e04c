"""
FastAPI API routes and endpoints.

- routes.py: /api/chat, /api/phase, /api/generate-code, /api/language, /api/session, /api/health
- dependencies.py: Dependency injection for the client provider, session store, assistant, etc.
- models.py: API-specific request/response models
- error_handlers.py: Exception handlers for structured error responses
- middleware.py: Request ID tracing
"""

from contract_assistant.api import dependencies, error_handlers, models
from contract_assistant.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
