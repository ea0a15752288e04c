"""
Provider client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for chat-completion clients
- OpenAIChatClient: httpx implementation for OpenAI-compatible APIs
- LLMClientProvider: Lifecycle owner (UNINITIALIZED / READY / FAILED)
- PromptBuilder: Builds the message list sent for a session
- exceptions: Client-level exceptions
"""

from contract_assistant.llm.base_client import BaseLLMClient
from contract_assistant.llm.openai_client import OpenAIChatClient
from contract_assistant.llm.lifecycle import ClientState, LLMClientProvider
from contract_assistant.llm.prompt_builder import PromptBuilder
from contract_assistant.llm.exceptions import (
    LLMAPIError,
    LLMClientError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMResponseFormatError,
    LLMTimeoutError,
)

__all__ = [
    "BaseLLMClient",
    "OpenAIChatClient",
    "ClientState",
    "LLMClientProvider",
    "PromptBuilder",
    "LLMClientError",
    "LLMConfigurationError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "LLMAPIError",
    "LLMResponseFormatError",
]
