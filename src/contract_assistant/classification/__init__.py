"""
Failure classification for outbound completion calls.

Main Components:
    - RawCallError / normalize_error: one canonical shape for every raw failure
    - ClassifiedError / classify: total mapping onto ErrorKind
"""

from contract_assistant.classification.classifier import (
    HTTP_STATUS_BY_KIND,
    ClassifiedError,
    classify,
)
from contract_assistant.classification.raw_error import RawCallError, normalize_error

__all__ = [
    "HTTP_STATUS_BY_KIND",
    "ClassifiedError",
    "RawCallError",
    "classify",
    "normalize_error",
]
