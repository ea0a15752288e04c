"""
LLM-specific data models for the request/response cycle.

These models are internal to the completion layer and describe the raw
communication with the chat-completion provider. They are separate from the
API models so the provider client can change without touching handlers.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict

from contract_assistant.models.enums import MessageRole


class ChatMessage(BaseModel):
    """Single chat turn."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: MessageRole
    content: str


class ChatCompletionRequest(BaseModel):
    """
    Internal request model for a chat completion.

    Provider-agnostic; the client translates it to the provider payload.
    """
    model_config = ConfigDict(frozen=True)

    messages: list[ChatMessage] = Field(..., min_length=1, description="Ordered conversation")
    model: str = Field(..., description="Model identifier (e.g., 'gpt-4o-mini')")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1, le=16384)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    json_response: bool = Field(default=False, description="Request a JSON object response")
    phase: str = Field(default="phase1", description="Conversation phase key (for logging)")


class ChatCompletionResponse(BaseModel):
    """
    Internal response model from a chat completion.

    Contains the assistant text plus metadata for audit/logging.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Assistant message text")
    model: str = Field(..., description="Model that produced the response")
    finish_reason: Optional[str] = Field(default=None)
    prompt_tokens: Optional[int] = Field(default=None)
    completion_tokens: Optional[int] = Field(default=None)
    total_tokens: Optional[int] = Field(default=None)
    latency_ms: int = Field(default=0, ge=0)
    provider_request_id: Optional[str] = Field(default=None)
    raw_metadata: Dict[str, Any] = Field(default_factory=dict)
