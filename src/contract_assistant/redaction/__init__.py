"""Redaction of credentials before logging or returning errors."""

from contract_assistant.redaction.redactor import (
    DEFAULT_SENSITIVE_KEYS,
    REDACTED,
    redact_mapping,
    redact_text,
    truncate,
)

__all__ = [
    "DEFAULT_SENSITIVE_KEYS",
    "REDACTED",
    "redact_mapping",
    "redact_text",
    "truncate",
]
