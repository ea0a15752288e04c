"""
Prompt builder for chat completions.

Responsible for:
- Rendering the Jinja2 system prompt for the session's phase and language
- Trimming the conversation to the configured history window
- Constructing the ChatCompletionRequest with per-phase sampling settings
"""

from pathlib import Path
from typing import Dict, List, Optional

import structlog
from jinja2 import Environment, FileSystemLoader

from contract_assistant.config import Settings
from contract_assistant.models.enums import ContractLanguage, MessageRole
from contract_assistant.models.llm_models import ChatCompletionRequest, ChatMessage
from contract_assistant.models.session_models import SessionState

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "prompts"

_LANGUAGE_LABELS = {
    ContractLanguage.SOLIDITY: "Solidity",
    ContractLanguage.VYPER: "Vyper",
    ContractLanguage.RUST: "Rust (ink!)",
}


class PromptBuilder:
    """
    Build completion requests from session state.

    Sampling parameters are looked up per prompt key: "phase1", "phase2",
    "summary" or "discussion".
    """

    def __init__(
        self,
        templates_dir: Path = DEFAULT_TEMPLATES_DIR,
        model: str = "gpt-4o-mini",
        top_p: Optional[float] = 0.95,
        max_history: int = 40,
        temperatures: Optional[Dict[str, float]] = None,
        max_tokens: Optional[Dict[str, int]] = None,
    ):
        self.templates_dir = Path(templates_dir)
        self.model = model
        self.top_p = top_p
        self.max_history = max_history
        self.temperatures = temperatures or {}
        self.max_tokens = max_tokens or {}

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,  # Prompts, not HTML
        )
        try:
            self.system_template = self.jinja_env.get_template("system_prompt.txt")
            logger.info("Loaded prompt templates", templates_dir=str(self.templates_dir))
        except Exception as e:
            logger.error("Failed to load prompt templates", error=str(e))
            raise

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptBuilder":
        return cls(
            model=settings.OPENAI_MODEL,
            top_p=settings.OPENAI_TOP_P,
            max_history=settings.SESSION_MAX_HISTORY,
            temperatures=settings.LLM_TEMPERATURE_BY_PHASE,
            max_tokens=settings.LLM_MAX_TOKENS_BY_PHASE,
        )

    def build_system_prompt(self, phase_key: str, language: ContractLanguage) -> str:
        language = ContractLanguage(language)
        return self.system_template.render(
            phase_key=phase_key,
            language=language.value,
            language_label=_LANGUAGE_LABELS[language],
        ).strip()

    def build_messages(self, session: SessionState, phase_key: str) -> List[ChatMessage]:
        """System prompt followed by the last `max_history` conversation turns."""
        history = session.conversation[-self.max_history:] if self.max_history > 0 else []
        system = ChatMessage(
            role=MessageRole.SYSTEM,
            content=self.build_system_prompt(phase_key, session.language),
        )
        return [system, *history]

    def build_request(
        self,
        session: SessionState,
        phase_key: str,
        json_response: bool = False,
    ) -> ChatCompletionRequest:
        messages = self.build_messages(session, phase_key)
        logger.debug(
            "Built completion request",
            phase=phase_key,
            messages=len(messages),
            truncated=len(session.conversation) > self.max_history,
        )
        return ChatCompletionRequest(
            messages=messages,
            model=self.model,
            temperature=self.temperatures.get(phase_key, 0.7),
            max_tokens=self.max_tokens.get(phase_key, 500),
            top_p=self.top_p,
            json_response=json_response,
            phase=phase_key,
        )
