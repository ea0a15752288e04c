"""
Session state persisted between chat requests.
"""

import time
from typing import Any, Optional

from pydantic import BaseModel, Field

from contract_assistant.models.enums import ChatPhase, ContractLanguage
from contract_assistant.models.llm_models import ChatMessage


class SessionState(BaseModel):
    """Per-client conversation state."""

    session_id: str
    conversation: list[ChatMessage] = Field(default_factory=list)
    phase: ChatPhase = ChatPhase.REQUIREMENTS
    language: ContractLanguage = ContractLanguage.SOLIDITY
    spec: Optional[dict[str, Any]] = Field(
        default=None,
        description="Latest validated contract specification",
    )
    last_activity: float = Field(default_factory=time.time)

    def touch(self, now: float | None = None) -> None:
        self.last_activity = time.time() if now is None else now

    def reset_conversation(self) -> None:
        self.conversation = []
        self.phase = ChatPhase.REQUIREMENTS
        self.spec = None

    def is_expired(self, now: float, idle_timeout_seconds: float) -> bool:
        return now - self.last_activity > idle_timeout_seconds
