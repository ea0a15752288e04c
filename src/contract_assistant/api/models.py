"""
API request and response models.

Field names follow the JSON the browser client sends and expects
(camelCase aliases on the wire, snake_case in Python).
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from contract_assistant.models.enums import ChatPhase, ContractLanguage


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChatRequest(_WireModel):
    message: str = Field(..., min_length=1, description="User message")
    new_chat: bool = Field(default=False, alias="newChat", description="Start a new conversation")
    selected_language: Optional[ContractLanguage] = Field(
        default=None,
        alias="selectedLanguage",
        description="Switch the session's contract language before answering",
    )


class ContractPayload(_WireModel):
    language: ContractLanguage
    code: str
    warnings: list[str] = Field(default_factory=list)
    fallback: bool = False


class ChatResponse(_WireModel):
    phase: ChatPhase
    message: str
    contract: Optional[ContractPayload] = None
    spec: Optional[dict[str, Any]] = None
    warnings: list[str] = Field(default_factory=list)
    status: str = Field(default="success", examples=["success", "error"])
    retryable: bool = False
    debug: dict[str, Any] = Field(default_factory=dict)


class PhaseTransitionRequest(_WireModel):
    target_phase: int = Field(..., alias="targetPhase", ge=1, le=3)


class GenerateCodeRequest(_WireModel):
    json_spec: dict[str, Any] = Field(..., alias="jsonSpec", description="Contract specification")
    language: Optional[ContractLanguage] = Field(default=None, description="Defaults to the session language")


class GenerateCodeResponse(_WireModel):
    status: str = "success"
    language: ContractLanguage
    code: str
    warnings: list[str] = Field(default_factory=list)
    fallback: bool = False


class LanguageRequest(_WireModel):
    language: ContractLanguage


class LanguageResponse(_WireModel):
    status: str = "success"
    language: ContractLanguage
    supported_languages: list[ContractLanguage] = Field(
        default_factory=lambda: list(ContractLanguage),
        alias="supportedLanguages",
    )


class ClearSessionResponse(_WireModel):
    status: str = "success"
    message: str = "Session data cleared successfully"


class HealthResponse(_WireModel):
    status: str = Field(description="ok or degraded", examples=["ok", "degraded"])
    version: str
    environment: str
    ai_service: dict[str, Any] = Field(alias="aiService")
    session_stats: dict[str, Any] = Field(alias="sessionStats")
    uptime_seconds: int = Field(alias="uptime")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
