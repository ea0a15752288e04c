"""Unit tests for ContractCodeGenerator and its template filters."""

import pytest
from jinja2 import TemplateError

from contract_assistant.codegen.exceptions import ContractSpecError
from contract_assistant.codegen.generator import (
    ContractCodeGenerator,
    snake_case,
    solidity_location,
    solidity_params,
    warning_header,
)
from contract_assistant.models.enums import ContractLanguage


@pytest.fixture(scope="module")
def generator():
    return ContractCodeGenerator()


class TestFilters:
    @pytest.mark.parametrize(
        "name,expected",
        [("MyToken", "my_token"), ("getOwnerBalance", "get_owner_balance"), ("MyERC20Token", "my_erc20_token"), ("owner", "owner")],
    )
    def test_snake_case(self, name, expected):
        assert snake_case(name) == expected

    @pytest.mark.parametrize(
        "solidity_type,expected",
        [("string", "string memory"), ("bytes", "bytes memory"), ("uint256[]", "uint256[] memory"), ("address", "address")],
    )
    def test_solidity_location(self, solidity_type, expected):
        assert solidity_location(solidity_type) == expected

    def test_solidity_params(self):
        params = [{"name": "to", "type": "address"}, {"name": "memo", "type": "string"}]
        assert solidity_params(params) == "address to, string memory memo"

    def test_warning_header_uses_language_comment(self):
        assert warning_header(ContractLanguage.SOLIDITY).startswith("// WARNING")
        assert warning_header(ContractLanguage.VYPER).startswith("# WARNING")
        assert warning_header(ContractLanguage.RUST).startswith("// WARNING")


class TestSolidity:
    def test_token_contract(self, generator, token_spec_data):
        result = generator.generate(token_spec_data, ContractLanguage.SOLIDITY)
        code = result.code

        assert result.language is ContractLanguage.SOLIDITY
        assert result.fallback is False
        assert result.warnings == []
        assert code.startswith("// SPDX-License-Identifier: MIT\npragma solidity ^0.8.20;")
        assert "contract MyToken {" in code
        assert '    string public name = "My Token";' in code
        assert "    uint8 public decimals = 18;" in code
        assert "    mapping(address => uint256) public balanceOf;" in code
        assert "    event Transfer(address indexed from, address indexed to, uint256 value);" in code
        assert "    constructor(uint256 initialSupply) {" in code
        assert "        balanceOf[msg.sender] = initialSupply;" in code
        assert "    function transfer(address to, uint256 value) public returns (bool) {" in code
        assert "    function getOwnerBalance(address owner) external view returns (uint256) {" in code
        assert code.rstrip().endswith("}")

    def test_minimal_spec_is_enhanced(self, generator, minimal_spec):
        result = generator.generate(minimal_spec, ContractLanguage.SOLIDITY)

        assert "contract SimpleStorage {" in result.code
        assert "function example() public view returns (string memory) {" in result.code
        assert 'return "Hello, World!";' in result.code
        assert result.spec["natspec"]["title"] == "SimpleStorage"

    def test_function_without_body_reverts(self, generator):
        spec = {"contractName": "Vault", "functions": [{"name": "withdraw", "mutability": "payable"}]}
        code = generator.generate(spec, ContractLanguage.SOLIDITY).code

        assert "function withdraw() public payable {" in code
        assert 'revert("Not implemented");' in code

    def test_boolean_and_expression_literals(self, generator):
        spec = {
            "contractName": "Flags",
            "stateVariables": [
                {"name": "paused", "type": "bool", "initialValue": True},
                {"name": "owner", "type": "address", "initialValue": "msg.sender"},
                {"name": "cap", "type": "uint256", "initialValue": "1000"},
            ],
        }
        code = generator.generate(spec, ContractLanguage.SOLIDITY).code

        assert "bool public paused = true;" in code
        assert "address public owner = msg.sender;" in code
        assert "uint256 public cap = 1000;" in code


class TestVyper:
    def test_token_contract(self, generator, token_spec_data):
        code = generator.generate(token_spec_data, ContractLanguage.VYPER).code

        assert code.startswith("#pragma version 0.3.9\n# SPDX-License-Identifier: MIT")
        assert "event Transfer:" in code
        assert "    from: indexed(address)" in code
        assert "    value: uint256" in code
        assert "name: public(String[100])" in code
        assert "balance_of: public(HashMap[address, uint256])" in code
        assert "def __init__(initial_supply: uint256):" in code
        assert '    self.name = "My Token"' in code
        assert "    self.decimals = 18" in code
        assert "def transfer(to: address, value: uint256) -> bool:" in code
        assert "    return empty(bool)" in code
        assert "@view\n@external\ndef get_owner_balance(owner: address) -> uint256:" in code

    def test_internal_function(self, generator):
        spec = {"contractName": "Helper", "functions": [{"name": "checkOwner", "visibility": "internal"}]}
        code = generator.generate(spec, ContractLanguage.VYPER).code

        assert "@internal\ndef check_owner():\n    pass" in code

    def test_no_constructor_without_initial_values(self, generator, minimal_spec):
        code = generator.generate(minimal_spec, ContractLanguage.VYPER).code
        assert "__init__" not in code


class TestRust:
    def test_token_contract(self, generator, token_spec_data):
        code = generator.generate(token_spec_data, ContractLanguage.RUST).code

        assert "// Using Rust version 1.70.0" in code
        assert "#[ink::contract]\nmod my_token {" in code
        assert "    pub struct MyToken {" in code
        assert "        balance_of: HashMap<AccountId, u128>," in code
        assert "        #[ink(topic)]\n        from: AccountId," in code
        assert "        pub fn new(initial_supply: u128) -> Self {" in code
        assert "        #[ink(message)]\n        pub fn transfer(&mut self, to: AccountId, value: u128) -> bool {" in code
        assert "pub fn get_owner_balance(&self, owner: AccountId) -> u128 {" in code

    def test_private_function_is_not_a_message(self, generator):
        spec = {"contractName": "Helper", "functions": [{"name": "recompute", "visibility": "private"}]}
        code = generator.generate(spec, ContractLanguage.RUST).code

        assert "        fn recompute(&mut self) {" in code
        assert "#[ink(message)]" not in code

    def test_payable_message(self, generator):
        spec = {"contractName": "Vault", "functions": [{"name": "deposit", "visibility": "external", "mutability": "payable"}]}
        code = generator.generate(spec, ContractLanguage.RUST).code

        assert "#[ink(message, payable)]" in code


class TestGenerate:
    def test_language_as_string(self, generator, minimal_spec):
        assert generator.generate(minimal_spec, "rust").language is ContractLanguage.RUST

    def test_unsupported_language(self, generator, minimal_spec):
        with pytest.raises(ContractSpecError, match="Unsupported language"):
            generator.generate(minimal_spec, "move")

    def test_critical_error_raises(self, generator):
        with pytest.raises(ContractSpecError):
            generator.generate({"contractName": "Broken", "functions": "none"}, ContractLanguage.SOLIDITY)

    @pytest.mark.parametrize("language", list(ContractLanguage))
    def test_schema_warnings_prepend_header(self, generator, language):
        spec = {"contractName": "Token", "functions": [{"name": "1transfer"}]}
        result = generator.generate(spec, language)

        assert result.warnings
        assert result.code.startswith(warning_header(language))

    @pytest.mark.parametrize("language", list(ContractLanguage))
    def test_rendering_failure_uses_fallback(self, language, token_spec_data, monkeypatch):
        generator = ContractCodeGenerator()

        def broken_render(spec, lang):
            raise TemplateError("unexpected end of template")

        monkeypatch.setattr(generator, "render", broken_render)
        result = generator.generate(token_spec_data, language)

        assert result.fallback is True
        assert "fallback contract" in result.code
        assert "MyToken" in result.code

    def test_fallback_vyper_uses_spec_version(self, token_spec_data, monkeypatch):
        generator = ContractCodeGenerator()
        def broken_render(spec, lang):
            raise KeyError("natspec")

        monkeypatch.setattr(generator, "render", broken_render)

        code = generator.generate({**token_spec_data, "vyper": "0.4.0"}, ContractLanguage.VYPER).code

        assert code.startswith("#pragma version 0.4.0")

    def test_input_spec_not_mutated(self, generator, minimal_spec):
        generator.generate(minimal_spec, ContractLanguage.SOLIDITY)
        assert minimal_spec == {"contractName": "SimpleStorage"}
