"""
FastAPI dependency injection for the Smart Contract Assistant.

Provides singleton instances of shared resources (settings, client provider,
prompt builder, code generator, session store) and per-request factories for
the lightweight objects built on top of them (completion engine, assistant).
Tests replace any of these through `app.dependency_overrides`.
"""

from functools import lru_cache

from fastapi import Depends, Request

from contract_assistant.assistant.service import ContractAssistant
from contract_assistant.codegen.generator import ContractCodeGenerator
from contract_assistant.config import Settings, settings
from contract_assistant.llm.lifecycle import LLMClientProvider
from contract_assistant.llm.prompt_builder import PromptBuilder
from contract_assistant.monitoring.telemetry import (
    AttemptHook,
    LoggingAttemptHook,
    PrometheusAttemptHook,
    compose_hooks,
)
from contract_assistant.retry.engine import CompletionEngine
from contract_assistant.retry.policy import RetryPolicy
from contract_assistant.sessions.identity import session_id_from_request
from contract_assistant.sessions.redis_store import RedisSessionStore
from contract_assistant.sessions.store import InMemorySessionStore, SessionStore


@lru_cache()
def get_settings() -> Settings:
    return settings


@lru_cache()
def get_client_provider() -> LLMClientProvider:
    """
    Singleton owner of the provider client.

    The client itself is built lazily on first use (ensure_ready), so a
    missing API key does not prevent the application from starting.
    """
    return LLMClientProvider.from_settings(get_settings())


@lru_cache()
def get_prompt_builder() -> PromptBuilder:
    """Loads Jinja2 templates once and reuses them across requests."""
    return PromptBuilder.from_settings(get_settings())


@lru_cache()
def get_code_generator() -> ContractCodeGenerator:
    return ContractCodeGenerator()


@lru_cache()
def get_session_store() -> SessionStore:
    """In-memory store by default; Redis when SESSION_BACKEND=redis."""
    current = get_settings()
    if current.SESSION_BACKEND == "redis":
        return RedisSessionStore.from_settings(current)
    return InMemorySessionStore(idle_timeout_seconds=current.SESSION_IDLE_TIMEOUT_SECONDS)


@lru_cache()
def get_retry_policy() -> RetryPolicy:
    return RetryPolicy.from_settings(get_settings())


@lru_cache()
def get_telemetry_hook() -> AttemptHook:
    return compose_hooks(LoggingAttemptHook(), PrometheusAttemptHook())


def get_completion_engine(
    provider: LLMClientProvider = Depends(get_client_provider),
    policy: RetryPolicy = Depends(get_retry_policy),
    telemetry_hook: AttemptHook = Depends(get_telemetry_hook),
    app_settings: Settings = Depends(get_settings),
) -> CompletionEngine:
    """
    Create the completion engine over the shared provider.

    Not cached: the engine is stateless and cheap; the provider it wraps is
    the singleton.
    """
    return CompletionEngine(
        provider=provider,
        policy=policy,
        attempt_timeout_ms=app_settings.LLM_ATTEMPT_TIMEOUT_MS,
        telemetry_hook=telemetry_hook,
    )


def get_assistant(
    engine: CompletionEngine = Depends(get_completion_engine),
    prompt_builder: PromptBuilder = Depends(get_prompt_builder),
    generator: ContractCodeGenerator = Depends(get_code_generator),
    app_settings: Settings = Depends(get_settings),
) -> ContractAssistant:
    return ContractAssistant(
        engine=engine,
        prompt_builder=prompt_builder,
        generator=generator,
        codegen_timeout_ms=app_settings.CODEGEN_TIMEOUT_MS,
    )


def get_session_id(request: Request) -> str:
    return session_id_from_request(
        request.headers,
        request.client.host if request.client else None,
    )
