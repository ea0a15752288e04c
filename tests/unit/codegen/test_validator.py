"""Unit tests for ContractSpecValidator."""

import pytest

from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.codegen.validator import ContractSpecValidator, DEFAULT_VERSIONS
from contract_assistant.models.enums import ContractLanguage


@pytest.fixture(scope="module")
def validator():
    return ContractSpecValidator()


def test_valid_spec_without_warnings(validator, token_spec_data):
    result = validator.validate(token_spec_data, ContractLanguage.SOLIDITY)

    assert result.valid
    assert result.warnings == []
    assert result.defaults_applied == []
    assert result.spec == token_spec_data


def test_input_is_not_mutated(validator, minimal_spec):
    validator.validate(minimal_spec, ContractLanguage.SOLIDITY)
    assert minimal_spec == {"contractName": "SimpleStorage"}


@pytest.mark.parametrize("language", list(ContractLanguage))
def test_defaults_applied(validator, language):
    result = validator.validate({}, language)

    assert result.spec[language.value] == DEFAULT_VERSIONS[language]
    assert result.spec["contractName"] == "SmartContract"
    assert result.spec["license"] == "MIT"
    assert len(result.defaults_applied) == 3
    # Defaults are not schema warnings
    assert result.valid


def test_language_given_as_string(validator, minimal_spec):
    result = validator.validate(minimal_spec, "vyper")
    assert result.spec["vyper"] == "0.3.9"


def test_non_object_rejected(validator):
    with pytest.raises(ContractSpecError, match="must be an object"):
        validator.validate(["not", "an", "object"], ContractLanguage.SOLIDITY)


def test_unsupported_language(validator, minimal_spec):
    with pytest.raises(ContractSpecError, match="Unsupported language"):
        validator.validate(minimal_spec, "cobol")


@pytest.mark.parametrize(
    "spec,fragment",
    [
        ({"contractName": "Token", "functions": "transfer"}, "functions"),
        ({"contractName": "Token", "functions": [{"visibility": "public"}]}, "name"),
        ({"contractName": "Token", "functions": [{"name": "f", "mutability": "constant"}]}, "functions.0.mutability"),
        ({"contractName": "Token", "stateVariables": [{"name": "x"}]}, "type"),
    ],
)
def test_critical_errors_raise(validator, spec, fragment):
    with pytest.raises(ContractSpecError) as exc_info:
        validator.validate(spec, ContractLanguage.SOLIDITY)

    assert exc_info.value.errors
    assert any(fragment in error for error in exc_info.value.errors)


def test_soft_errors_become_warnings(validator):
    spec = {"contractName": "Token", "functions": [{"name": "1transfer"}]}

    result = validator.validate(spec, ContractLanguage.SOLIDITY)

    assert not result.valid
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("functions.0.name")


def test_invalid_contract_name_is_a_warning(validator):
    result = validator.validate({"contractName": "My Token"}, ContractLanguage.SOLIDITY)
    assert result.warnings and result.warnings[0].startswith("contractName")


def test_schema_loaded_once(validator, minimal_spec):
    validator.validate(minimal_spec, ContractLanguage.SOLIDITY)
    first = validator._validator
    validator.validate(minimal_spec, ContractLanguage.RUST)
    assert validator._validator is first


def test_error_message_format():
    error = ContractSpecError("Invalid JSON specification", errors=["root: bad"])
    assert str(error) == "Invalid JSON specification | Errors: ['root: bad']"
    assert str(ContractSpecError("plain")) == "plain"
