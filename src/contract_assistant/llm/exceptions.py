"""
Custom exceptions for the LLM client layer.

The client raises these for every failure of a single raw call. They are
normalized into one RawCallError shape before the classifier sees them, so
the completion engine can decide whether to retry.
"""

from typing import Any, Optional


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.

    All LLM-specific exceptions inherit from this to allow catching
    any LLM-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConfigurationError(LLMClientError):
    """
    Raised when the client cannot be constructed (e.g. API key missing).

    Normalized as a credential failure: the operator has to fix it.
    """
    pass


class LLMConnectionError(LLMClientError):
    """
    Raised when unable to reach the provider.

    Includes DNS failures, refused connections, dropped sockets.
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when the HTTP transport gives up waiting for the provider.
    """
    pass


class LLMAPIError(LLMClientError):
    """
    Raised when the provider answers with a non-2xx status.

    Carries the provider's error body fields when it returned the usual
    {"error": {"message", "type", "code", "param"}} envelope.
    """
    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: Optional[str] = None,
        code: Optional[str] = None,
        param: Optional[str] = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.error_type = error_type
        self.code = code
        self.param = param


class LLMResponseFormatError(LLMClientError):
    """
    Raised when a 2xx response body is empty or not a chat completion.
    """
    pass
