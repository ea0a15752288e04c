"""
Contract specification validation.

Validates a JSON contract specification against contract_spec.json
(Draft 7). Missing language version, contract name and license are filled in
with defaults and reported as warnings. Schema errors with keyword
`required`, `type` or `enum` are critical and raise ContractSpecError; every
other schema error becomes a warning and generation continues.
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from jsonschema import Draft7Validator

from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.models.enums import ContractLanguage

logger = structlog.get_logger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "schemas" / "contract_spec.json"

DEFAULT_VERSIONS = {
    ContractLanguage.SOLIDITY: "0.8.20",
    ContractLanguage.VYPER: "0.3.9",
    ContractLanguage.RUST: "1.70.0",
}
DEFAULT_CONTRACT_NAME = "SmartContract"
DEFAULT_LICENSE = "MIT"

CRITICAL_KEYWORDS = frozenset({"required", "type", "enum"})

MAX_REPORTED_ERRORS = 10


@dataclass(frozen=True)
class SpecValidationResult:
    """
    Attributes:
        spec: Copy of the input with defaults filled in
        warnings: Non-critical schema errors
        defaults_applied: Fields filled in with default values
    """

    spec: dict[str, Any]
    warnings: list[str] = field(default_factory=list)
    defaults_applied: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.warnings


def _format_error(error) -> str:
    path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
    return f"{path}: {error.message}"


class ContractSpecValidator:
    """Draft 7 validator for contract specifications (schema loaded once)."""

    def __init__(self, schema_path: Path = DEFAULT_SCHEMA_PATH):
        self.schema_path = Path(schema_path)
        self._validator: Draft7Validator | None = None

    def _get_validator(self) -> Draft7Validator:
        if self._validator is None:
            with open(self.schema_path, "r", encoding="utf-8") as f:
                schema = json.load(f)
            Draft7Validator.check_schema(schema)
            self._validator = Draft7Validator(schema)
            logger.info("Loaded contract spec schema", schema_path=str(self.schema_path))
        return self._validator

    def apply_defaults(self, spec: dict[str, Any], language: ContractLanguage) -> list[str]:
        """Fill missing version / name / license in place; returns the warnings."""
        warnings = []
        version_key = language.value
        if not spec.get(version_key):
            spec[version_key] = DEFAULT_VERSIONS[language]
            warnings.append(f"Added missing {version_key} version: {spec[version_key]}")
        if not spec.get("contractName"):
            spec["contractName"] = DEFAULT_CONTRACT_NAME
            warnings.append(f"Added missing contractName: {DEFAULT_CONTRACT_NAME}")
        if not spec.get("license"):
            spec["license"] = DEFAULT_LICENSE
            warnings.append(f"Added missing license: {DEFAULT_LICENSE}")
        return warnings

    def validate(self, spec: Any, language: ContractLanguage | str) -> SpecValidationResult:
        """
        Validate (a copy of) `spec` for `language`.

        Raises:
            ContractSpecError: spec is not an object, language is unsupported,
                or the schema reports a critical error
        """
        if not isinstance(spec, dict):
            raise ContractSpecError("Invalid JSON specification: must be an object")
        try:
            language = ContractLanguage(language)
        except ValueError as e:
            raise ContractSpecError(f"Unsupported language: {language}") from e

        fixed = copy.deepcopy(spec)
        default_warnings = self.apply_defaults(fixed, language)
        for warning in default_warnings:
            logger.warning("Contract spec default applied", detail=warning)

        errors = sorted(self._get_validator().iter_errors(fixed), key=lambda e: [str(p) for p in e.absolute_path])
        critical = [e for e in errors if e.validator in CRITICAL_KEYWORDS]
        soft = [e for e in errors if e.validator not in CRITICAL_KEYWORDS]

        if critical:
            messages = [_format_error(e) for e in critical[:MAX_REPORTED_ERRORS]]
            logger.warning(
                "Contract spec validation failed",
                language=language.value,
                critical_errors=len(critical),
                first_error=messages[0],
            )
            raise ContractSpecError(
                f"Invalid JSON specification: {messages[0]}",
                errors=messages,
                details={"language": language.value, "error_count": len(errors)},
            )

        warnings = [_format_error(e) for e in soft[:MAX_REPORTED_ERRORS]]
        if soft:
            logger.warning("Contract spec has schema warnings", language=language.value, warnings=len(soft))
        return SpecValidationResult(spec=fixed, warnings=warnings, defaults_applied=default_warnings)
