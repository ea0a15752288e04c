"""Conversation flow of the smart contract assistant."""

from contract_assistant.assistant.service import (
    AssistantReply,
    ContractAssistant,
    SessionStateError,
    extract_json_spec,
)

__all__ = [
    "AssistantReply",
    "ContractAssistant",
    "SessionStateError",
    "extract_json_spec",
]
