"""
Session identity.

Clients may send an explicit `X-Session-ID` header. Without one the session
falls back to the client address plus user agent, stripped to [A-Za-z0-9-].
"""

import re
from typing import Mapping, Optional

SESSION_HEADER = "x-session-id"
MAX_SESSION_ID_LENGTH = 256

_UNSAFE = re.compile(r"[^a-zA-Z0-9-]")


def sanitize_session_id(raw: str) -> str:
    return _UNSAFE.sub("", raw)[:MAX_SESSION_ID_LENGTH]


def session_id_from_request(headers: Mapping[str, str], client_host: Optional[str]) -> str:
    """
    Derive the session id for a request.

    Examples:
        >>> session_id_from_request({"user-agent": "curl/8.0"}, "127.0.0.1")
        '127001-curl80'
    """
    explicit = headers.get(SESSION_HEADER)
    if explicit:
        session_id = sanitize_session_id(explicit)
        if session_id:
            return session_id

    user_agent = headers.get("user-agent") or "unknown"
    return sanitize_session_id(f"{client_host or 'unknown'}-{user_agent}") or "anonymous"
