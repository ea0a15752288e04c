"""
Pydantic data models for the Smart Contract Assistant.

Includes:
- Enums (ErrorKind, MessageRole, ContractLanguage, ChatPhase)
- LLM models (ChatMessage, ChatCompletionRequest, ChatCompletionResponse)
- Session state (SessionState)
"""

from contract_assistant.models.enums import ChatPhase, ContractLanguage, ErrorKind, MessageRole
from contract_assistant.models.llm_models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)
from contract_assistant.models.session_models import SessionState

__all__ = [
    # Enums
    "ErrorKind",
    "MessageRole",
    "ContractLanguage",
    "ChatPhase",
    # LLM models
    "ChatMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    # Sessions
    "SessionState",
]
