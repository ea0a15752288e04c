"""
Contract code generator.

Pipeline for one request:
1. Validate the specification (defaults filled, critical errors raise)
2. Enhance it (ERC-20 events, example function, NatSpec)
3. Render the language template
4. On a rendering failure, render the fallback template instead
5. Prepend a review warning when validation reported schema warnings

Rendering is synchronous and CPU-bound; API routes call generate() in a
worker thread under the timeout guard.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
from jinja2 import Environment, FileSystemLoader, TemplateError

from contract_assistant.codegen.enhance import enhance_spec
from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.codegen.type_mapping import convert_type_to_rust, convert_type_to_vyper
from contract_assistant.codegen.validator import DEFAULT_VERSIONS, ContractSpecValidator
from contract_assistant.models.enums import ContractLanguage
from contract_assistant.monitoring.metrics import contracts_generated_total

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

TEMPLATE_NAMES = {
    ContractLanguage.SOLIDITY: "solidity.sol.j2",
    ContractLanguage.VYPER: "vyper.vy.j2",
    ContractLanguage.RUST: "rust.rs.j2",
}
FALLBACK_TEMPLATE_NAMES = {
    ContractLanguage.SOLIDITY: "fallback_solidity.sol.j2",
    ContractLanguage.VYPER: "fallback_vyper.vy.j2",
    ContractLanguage.RUST: "fallback_rust.rs.j2",
}

_RAW_LITERAL = re.compile(r'^(-?\d+(\.\d+)?(e\d+)?|0x[0-9a-fA-F]+|".*"|\'.*\'|msg\.\w+|.*\(.*\))$')
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """
    Examples:
        >>> snake_case("MyERC20Token")
        'my_erc20_token'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def solidity_location(solidity_type: str) -> str:
    """Add the `memory` data location where Solidity requires one."""
    if solidity_type in ("string", "bytes") or solidity_type.endswith("]"):
        return f"{solidity_type} memory"
    return solidity_type


def _literal(value: Any, true: str, false: str) -> str:
    if isinstance(value, bool):
        return true if value else false
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    if text.lower() in ("true", "false"):
        return true if text.lower() == "true" else false
    if _RAW_LITERAL.match(text):
        return text
    return json.dumps(text)


def solidity_params(params: list[dict[str, Any]]) -> str:
    return ", ".join(f"{solidity_location(p['type'])} {p['name']}" for p in params)


def vyper_params(params: list[dict[str, Any]]) -> str:
    return ", ".join(f"{snake_case(p['name'])}: {convert_type_to_vyper(p['type'])}" for p in params)


def rust_params(params: list[dict[str, Any]]) -> str:
    return ", ".join(f"{snake_case(p['name'])}: {convert_type_to_rust(p['type'])}" for p in params)


def warning_header(language: ContractLanguage) -> str:
    prefix = language.comment_prefix
    return (
        f"{prefix} WARNING: This contract was generated with some schema validation warnings.\n"
        f"{prefix} Review carefully before deployment.\n\n"
    )


@dataclass(frozen=True)
class GeneratedContract:
    """
    Attributes:
        language: Target language
        code: Generated source
        warnings: Schema warnings reported by validation
        fallback: True when the fallback template was used
        spec: Enhanced specification the code was rendered from
    """

    language: ContractLanguage
    code: str
    warnings: list[str] = field(default_factory=list)
    fallback: bool = False
    spec: dict[str, Any] = field(default_factory=dict, repr=False)


class ContractCodeGenerator:
    """Render contract specifications into Solidity, Vyper or Rust (ink!)."""

    def __init__(
        self,
        validator: ContractSpecValidator | None = None,
        templates_dir: Path = DEFAULT_TEMPLATES_DIR,
    ):
        self.validator = validator or ContractSpecValidator()
        self.templates_dir = Path(templates_dir)
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,  # Source code, not HTML
        )
        self.jinja_env.filters.update(
            snake_case=snake_case,
            rust_type=convert_type_to_rust,
            vyper_type=convert_type_to_vyper,
            solidity_location=solidity_location,
            solidity_params=solidity_params,
            vyper_params=vyper_params,
            rust_params=rust_params,
            solidity_literal=lambda v: _literal(v, "true", "false"),
            vyper_literal=lambda v: _literal(v, "True", "False"),
        )

    def render(self, spec: dict[str, Any], language: ContractLanguage) -> str:
        return self.jinja_env.get_template(TEMPLATE_NAMES[language]).render(spec=spec)

    def render_fallback(self, spec: dict[str, Any], language: ContractLanguage) -> str:
        contract_name = str(spec.get("contractName") or "SmartContract")
        return self.jinja_env.get_template(FALLBACK_TEMPLATE_NAMES[language]).render(
            contract_name=contract_name,
            module_name=snake_case(contract_name) or "smart_contract",
            version=spec.get(language.value) or DEFAULT_VERSIONS[language],
            license=spec.get("license") or "MIT",
        )

    def generate(self, spec: Any, language: ContractLanguage | str) -> GeneratedContract:
        """
        Generate contract source for `language`.

        Raises:
            ContractSpecError: Invalid specification or unsupported language
        """
        try:
            language = ContractLanguage(language)
        except ValueError as e:
            raise ContractSpecError(f"Unsupported language: {language}") from e

        result = self.validator.validate(spec, language)
        enhanced = enhance_spec(result.spec)
        contract_name = enhanced.get("contractName")

        logger.info("Generating contract code", language=language.value, contract_name=contract_name)

        fallback = False
        try:
            code = self.render(enhanced, language)
        except (TemplateError, TypeError, AttributeError, KeyError, ValueError) as e:
            logger.error(
                "Contract template rendering failed, using fallback",
                language=language.value,
                contract_name=contract_name,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            code = self.render_fallback(enhanced, language)
            fallback = True

        if result.warnings:
            code = warning_header(language) + code

        contracts_generated_total.labels(language=language.value, fallback=str(fallback).lower()).inc()
        return GeneratedContract(
            language=language,
            code=code,
            warnings=list(result.warnings),
            fallback=fallback,
            spec=enhanced,
        )
