"""
Smart contract assistant: the conversation flow around the completion engine.

Phases:
    1 REQUIREMENTS   free-form discussion of what the contract should do
    2 SPECIFICATION  the assistant produces a JSON specification
    3 REVIEW         code has been generated; discussion of the result

A JSON specification found in an assistant reply during phases 2 and 3 is
validated, stored on the session and rendered; the session then moves to
REVIEW. Handlers own persistence: the assistant mutates the SessionState it
is given and the caller writes it back only on success.
"""

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.codegen.generator import ContractCodeGenerator, GeneratedContract
from contract_assistant.llm.prompt_builder import PromptBuilder
from contract_assistant.models.enums import ChatPhase, ContractLanguage, MessageRole
from contract_assistant.models.llm_models import ChatMessage
from contract_assistant.models.session_models import SessionState
from contract_assistant.retry.engine import CompletionEngine
from contract_assistant.retry.exceptions import OperationTimeoutError
from contract_assistant.retry.timeout import run_with_timeout

logger = structlog.get_logger(__name__)

_JSON_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


class SessionStateError(Exception):
    """Operation not allowed in the session's current state (HTTP 409)."""

    def __init__(self, message: str, phase: Optional[ChatPhase] = None):
        super().__init__(message)
        self.message = message
        self.phase = phase


@dataclass
class AssistantReply:
    phase: ChatPhase
    message: str
    contract: Optional[GeneratedContract] = None
    spec: Optional[dict[str, Any]] = None
    warnings: list[str] = field(default_factory=list)


def _loads_object(text: str) -> Optional[dict[str, Any]]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def extract_json_spec(text: str) -> Optional[dict[str, Any]]:
    """
    Find a contract specification in an assistant reply.

    Looks at fenced ```json blocks first, then at the whole reply. Returns
    the first JSON object carrying a `contractName`, or None.
    """
    candidates = [m.group(1) for m in _JSON_BLOCK.finditer(text)]
    candidates.append(text.strip())
    for candidate in candidates:
        spec = _loads_object(candidate)
        if spec is not None and "contractName" in spec:
            return spec
    return None


class ContractAssistant:
    """
    Conversation flow for one request.

    Built per request from shared collaborators: the completion engine, the
    prompt builder and the code generator.
    """

    def __init__(
        self,
        engine: CompletionEngine,
        prompt_builder: PromptBuilder,
        generator: ContractCodeGenerator,
        codegen_timeout_ms: int = 30000,
    ):
        self.engine = engine
        self.prompt_builder = prompt_builder
        self.generator = generator
        self.codegen_timeout_ms = codegen_timeout_ms

    async def generate_code(self, spec: Any, language: ContractLanguage | str) -> GeneratedContract:
        """
        Render `spec` in a worker thread under the code generation deadline.

        Raises:
            ContractSpecError: Invalid specification
            OperationTimeoutError: Rendering took longer than codegen_timeout_ms
        """
        return await run_with_timeout(
            asyncio.to_thread(self.generator.generate, spec, language),
            self.codegen_timeout_ms,
            "code_generation",
        )

    async def _apply_spec(self, session: SessionState, spec: dict[str, Any]) -> tuple[GeneratedContract | None, list[str]]:
        try:
            contract = await self.generate_code(spec, session.language)
        except ContractSpecError as e:
            logger.warning(
                "Specification in reply rejected",
                session_id=session.session_id,
                errors=e.errors[:3],
            )
            return None, [e.message, *e.errors]
        except OperationTimeoutError as e:
            # The completion already succeeded; keep the reply and report the slow render
            logger.warning(
                "Code generation for reply timed out",
                session_id=session.session_id,
                timeout_ms=e.timeout_ms,
            )
            return None, [f"Code generation timed out after {e.timeout_ms} ms; use /api/generate-code to retry"]

        session.spec = contract.spec
        session.phase = ChatPhase.REVIEW
        return contract, contract.warnings

    async def handle_message(self, session: SessionState, message: str) -> AssistantReply:
        """
        One user turn: append, complete, append the reply.

        Raises:
            CompletionFailed: The completion could not be produced
        """
        session.conversation.append(ChatMessage(role=MessageRole.USER, content=message))
        request = self.prompt_builder.build_request(session, session.phase.prompt_key)

        response = await self.engine.complete(request)
        session.conversation.append(ChatMessage(role=MessageRole.ASSISTANT, content=response.content))

        contract = None
        warnings: list[str] = []
        if session.phase in (ChatPhase.SPECIFICATION, ChatPhase.REVIEW):
            spec = extract_json_spec(response.content)
            if spec is not None:
                contract, warnings = await self._apply_spec(session, spec)

        return AssistantReply(
            phase=session.phase,
            message=response.content,
            contract=contract,
            spec=session.spec if contract else None,
            warnings=warnings,
        )

    async def transition(self, session: SessionState, target_phase: ChatPhase | int) -> AssistantReply:
        """
        Move the session to `target_phase`.

        Raises:
            SessionStateError: Nothing to summarize, or no specification for code
            ContractSpecError: The summarized specification is invalid
            CompletionFailed: The summary completion could not be produced
        """
        target = ChatPhase(target_phase)
        logger.info(
            "Phase transition",
            session_id=session.session_id,
            current=session.phase.value,
            target=target.value,
        )

        if target is ChatPhase.REQUIREMENTS:
            session.phase = ChatPhase.REQUIREMENTS
            return AssistantReply(phase=session.phase, message="Back to requirements. What should the contract do?")

        if target is ChatPhase.SPECIFICATION:
            return await self._summarize(session)

        if session.spec is None:
            raise SessionStateError("No contract specification yet; create one in phase 2 first", session.phase)
        contract = await self.generate_code(session.spec, session.language)
        session.spec = contract.spec
        session.phase = ChatPhase.REVIEW
        return AssistantReply(
            phase=session.phase,
            message=f"Generated {session.language.value} code for {contract.spec.get('contractName')}.",
            contract=contract,
            spec=session.spec,
            warnings=contract.warnings,
        )

    async def _summarize(self, session: SessionState) -> AssistantReply:
        if not session.conversation:
            raise SessionStateError("Nothing to summarize; describe the contract first", session.phase)

        request = self.prompt_builder.build_request(session, "summary", json_response=True)
        response = await self.engine.complete(request)

        spec = _loads_object(response.content) or extract_json_spec(response.content)
        if spec is None:
            raise ContractSpecError("Summary did not contain a JSON contract specification")

        result = await asyncio.to_thread(self.generator.validator.validate, spec, session.language)
        session.spec = result.spec
        session.phase = ChatPhase.SPECIFICATION

        summary = "Contract specification:\n```json\n" + json.dumps(result.spec, indent=2) + "\n```"
        session.conversation.append(ChatMessage(role=MessageRole.ASSISTANT, content=summary))
        return AssistantReply(
            phase=session.phase,
            message=summary,
            spec=result.spec,
            warnings=result.warnings,
        )
