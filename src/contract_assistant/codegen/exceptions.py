"""
Code generation exceptions.
"""

from typing import Any


class ContractSpecError(Exception):
    """
    Contract specification is unusable.

    Raised for non-object specs, unsupported languages and critical schema
    violations (missing required fields, wrong types, values outside an enum).
    """

    def __init__(self, message: str, errors: list[str] | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.details = details or {}

    def __str__(self) -> str:
        if self.errors:
            return f"{self.message} | Errors: {self.errors}"
        return self.message
