"""
Contract code generation from JSON specifications.

Components:
- ContractSpecValidator: Draft 7 validation with defaults
- enhance_spec: completes partial specifications
- convert_type_to_rust / convert_type_to_vyper: Solidity type translation
- ContractCodeGenerator: Jinja2 rendering with fallback templates
"""

from contract_assistant.codegen.enhance import enhance_spec
from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.codegen.generator import ContractCodeGenerator, GeneratedContract
from contract_assistant.codegen.type_mapping import convert_type_to_rust, convert_type_to_vyper
from contract_assistant.codegen.validator import ContractSpecValidator, SpecValidationResult

__all__ = [
    "ContractCodeGenerator",
    "ContractSpecError",
    "ContractSpecValidator",
    "GeneratedContract",
    "SpecValidationResult",
    "convert_type_to_rust",
    "convert_type_to_vyper",
    "enhance_spec",
]
