"""
Credential redaction for logs and error payloads.

Request headers, request bodies and error messages pass through here before
they are logged, so API keys and bearer tokens never reach log sinks or
HTTP responses.
"""

import re
from typing import Any, Iterable, Optional


REDACTED = "[REDACTED]"

SENSITIVE_HEADERS = frozenset({
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "x-forwarded-for",
})

SENSITIVE_FIELDS = frozenset({
    "password",
    "token",
    "secret",
    "apikey",
    "api_key",
    "key",
})

DEFAULT_SENSITIVE_KEYS = SENSITIVE_HEADERS | SENSITIVE_FIELDS

_SECRET_PATTERNS = [
    re.compile(r"\bsk-[A-Za-z0-9_\-]{8,}"),
    re.compile(r"(?i)\bbearer\s+[A-Za-z0-9._\-~+/]+=*"),
]


def redact_mapping(obj: Any, sensitive_keys: Optional[Iterable[str]] = None) -> Any:
    """
    Recursively replace values of sensitive keys with "[REDACTED]".

    Keys are compared case-insensitively. Lists and nested dicts are walked;
    the input is never mutated.

    Examples:
        >>> redact_mapping({"Authorization": "Bearer x", "path": "/api/chat"})
        {'Authorization': '[REDACTED]', 'path': '/api/chat'}
    """
    keys = frozenset(k.lower() for k in (sensitive_keys or DEFAULT_SENSITIVE_KEYS))

    if isinstance(obj, dict):
        redacted = {}
        for key, value in obj.items():
            if isinstance(key, str) and key.lower() in keys:
                redacted[key] = REDACTED
            else:
                redacted[key] = redact_mapping(value, keys)
        return redacted
    if isinstance(obj, list):
        return [redact_mapping(item, keys) for item in obj]
    return obj


def redact_text(text: Optional[str]) -> Optional[str]:
    """Mask provider-style secrets (sk-..., Bearer ...) inside free text."""
    if not text:
        return text
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def truncate(text: Optional[str], limit: int = 1000) -> Optional[str]:
    """Cut `text` to `limit` characters, appending '...' when shortened."""
    if not text or len(text) <= limit:
        return text
    return text[:limit] + "..."
