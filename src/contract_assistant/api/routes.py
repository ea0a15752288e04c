"""
HTTP routes of the Smart Contract Assistant (mounted under /api).

Each stateful handler runs a read-modify-write cycle on the session under the
session lock: load (or create) the session, let the assistant mutate it, and
write it back only when the assistant succeeded. Failures propagate to the
exception handlers in error_handlers.py.
"""

import time

import structlog
from fastapi import APIRouter, Depends, Response, status

from contract_assistant.api.dependencies import (
    get_assistant,
    get_client_provider,
    get_session_id,
    get_session_store,
    get_settings,
)
from contract_assistant.api.models import (
    ChatRequest,
    ChatResponse,
    ClearSessionResponse,
    ContractPayload,
    GenerateCodeRequest,
    GenerateCodeResponse,
    HealthResponse,
    LanguageRequest,
    LanguageResponse,
    PhaseTransitionRequest,
)
from contract_assistant.assistant.service import AssistantReply, ContractAssistant
from contract_assistant.config import Settings
from contract_assistant.llm.lifecycle import LLMClientProvider
from contract_assistant.models.enums import ContractLanguage
from contract_assistant.models.session_models import SessionState
from contract_assistant.redaction.redactor import truncate
from contract_assistant.retry.timeout import run_with_timeout
from contract_assistant.sessions.store import SessionStore

logger = structlog.get_logger(__name__)

router = APIRouter()

_STARTED_AT = time.monotonic()


def _contract_payload(reply: AssistantReply) -> ContractPayload | None:
    if reply.contract is None:
        return None
    return ContractPayload(
        language=reply.contract.language,
        code=reply.contract.code,
        warnings=reply.contract.warnings,
        fallback=reply.contract.fallback,
    )


def _chat_response(reply: AssistantReply, session: SessionState, started: float) -> ChatResponse:
    return ChatResponse(
        phase=reply.phase,
        message=reply.message,
        contract=_contract_payload(reply),
        spec=reply.spec,
        warnings=reply.warnings,
        debug={
            "responseTime": f"{int((time.perf_counter() - started) * 1000)}ms",
            "sessionId": session.session_id,
            "conversationLength": len(session.conversation),
        },
    )


async def _load_session(store: SessionStore, session_id: str, app_settings: Settings) -> SessionState:
    return await store.get_or_create(session_id, ContractLanguage(app_settings.DEFAULT_CONTRACT_LANGUAGE))


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Send a chat message",
    responses={
        400: {"description": "Invalid request"},
        503: {"description": "AI service rate limited or unavailable (retryable)"},
        504: {"description": "Request timed out (retryable)"},
    },
)
async def chat(
    request: ChatRequest,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    assistant: ContractAssistant = Depends(get_assistant),
    app_settings: Settings = Depends(get_settings),
) -> ChatResponse:
    """
    One conversation turn.

    The whole turn (all completion attempts and code generation) runs under
    CHAT_REQUEST_TIMEOUT_MS.
    """
    started = time.perf_counter()
    structlog.contextvars.bind_contextvars(session_id=session_id)

    async with store.lock(session_id):
        session = await _load_session(store, session_id, app_settings)
        logger.info(
            "Chat request",
            phase=session.phase.value,
            language=session.language.value,
            message=truncate(request.message, 100),
        )

        if request.new_chat:
            session.reset_conversation()
            logger.info("New chat started")
        if request.selected_language and request.selected_language != session.language:
            session.language = request.selected_language
            logger.info("Language updated", language=session.language.value)

        reply = await run_with_timeout(
            assistant.handle_message(session, request.message),
            app_settings.CHAT_REQUEST_TIMEOUT_MS,
            "chat_request",
        )
        await store.put(session)

    response = _chat_response(reply, session, started)
    logger.info("Chat response", phase=reply.phase.value, response_time=response.debug["responseTime"])
    return response


@router.post(
    "/phase",
    response_model=ChatResponse,
    summary="Move the conversation to another phase",
    responses={409: {"description": "Transition not possible in the current state"}},
)
async def transition_phase(
    request: PhaseTransitionRequest,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    assistant: ContractAssistant = Depends(get_assistant),
    app_settings: Settings = Depends(get_settings),
) -> ChatResponse:
    started = time.perf_counter()
    structlog.contextvars.bind_contextvars(session_id=session_id)

    async with store.lock(session_id):
        session = await _load_session(store, session_id, app_settings)
        reply = await run_with_timeout(
            assistant.transition(session, request.target_phase),
            app_settings.CHAT_REQUEST_TIMEOUT_MS,
            "phase_transition",
        )
        await store.put(session)

    logger.info("Phase transition successful", phase=reply.phase.value)
    return _chat_response(reply, session, started)


@router.post(
    "/generate-code",
    response_model=GenerateCodeResponse,
    summary="Generate contract code from a JSON specification",
    responses={
        400: {"description": "Invalid specification"},
        504: {"description": "Code generation timed out"},
    },
)
async def generate_code(
    request: GenerateCodeRequest,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    assistant: ContractAssistant = Depends(get_assistant),
    app_settings: Settings = Depends(get_settings),
) -> GenerateCodeResponse:
    session = await store.get(session_id)
    if request.language is not None:
        language = request.language
    elif session is not None:
        language = session.language
    else:
        language = ContractLanguage(app_settings.DEFAULT_CONTRACT_LANGUAGE)

    logger.info("Generating code", language=language.value, session_id=session_id)
    contract = await assistant.generate_code(request.json_spec, language)
    logger.info("Code generation successful", language=language.value, fallback=contract.fallback)

    return GenerateCodeResponse(
        language=contract.language,
        code=contract.code,
        warnings=contract.warnings,
        fallback=contract.fallback,
    )


@router.get("/language", response_model=LanguageResponse, summary="Current contract language")
async def get_language(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    app_settings: Settings = Depends(get_settings),
) -> LanguageResponse:
    session = await store.get(session_id)
    language = session.language if session else ContractLanguage(app_settings.DEFAULT_CONTRACT_LANGUAGE)
    return LanguageResponse(language=language)


@router.post("/language", response_model=LanguageResponse, summary="Set the contract language")
async def set_language(
    request: LanguageRequest,
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    app_settings: Settings = Depends(get_settings),
) -> LanguageResponse:
    async with store.lock(session_id):
        session = await _load_session(store, session_id, app_settings)
        session.language = request.language
        await store.put(session)

    logger.info("Language set", language=request.language.value, session_id=session_id)
    return LanguageResponse(language=request.language)


@router.delete("/session", response_model=ClearSessionResponse, summary="Clear the current session")
async def clear_session(
    session_id: str = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> ClearSessionResponse:
    async with store.lock(session_id):
        existed = await store.delete(session_id)
    logger.info("Session cleared", session_id=session_id, existed=existed)
    return ClearSessionResponse()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
    responses={503: {"description": "AI service unavailable"}},
)
async def health_check(
    response: Response,
    provider: LLMClientProvider = Depends(get_client_provider),
    store: SessionStore = Depends(get_session_store),
    app_settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Provider availability, client lifecycle state and session statistics.

    Returns 503 when the provider is unavailable.
    """
    available = await provider.health_check()
    if not available:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="ok" if available else "degraded",
        version=app_settings.APP_VERSION,
        environment=app_settings.ENVIRONMENT,
        ai_service={
            "available": available,
            "model": app_settings.OPENAI_MODEL,
            "client_state": provider.state.value,
        },
        session_stats=await store.stats(),
        uptime_seconds=int(time.monotonic() - _STARTED_AT),
    )
