"""
Enumerations for the Smart Contract Assistant data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Taxonomy of failures surfaced by the completion layer.

    Exhaustive: UNKNOWN is the default bucket, and every raised failure
    maps to exactly one kind.
    """

    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    AUTH_ERROR = "auth_error"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    UNKNOWN = "unknown"

    @property
    def code(self) -> str:
        """Upper-case error code used in HTTP payloads (e.g. RATE_LIMITED)."""
        return self.name


class MessageRole(str, Enum):
    """Chat message roles understood by the completion provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ContractLanguage(str, Enum):
    """Target languages for generated contracts."""

    SOLIDITY = "solidity"
    VYPER = "vyper"
    RUST = "rust"

    @property
    def comment_prefix(self) -> str:
        return "#" if self is ContractLanguage.VYPER else "//"


class ChatPhase(int, Enum):
    """
    Conversation phases.

    Ordered: requirements gathering, specification, code review/discussion.
    """

    REQUIREMENTS = 1
    SPECIFICATION = 2
    REVIEW = 3

    @property
    def prompt_key(self) -> str:
        """Key used for per-phase temperature / max-token settings."""
        return {
            ChatPhase.REQUIREMENTS: "phase1",
            ChatPhase.SPECIFICATION: "phase2",
            ChatPhase.REVIEW: "discussion",
        }[self]
