"""
Specification enhancement.

Completes partial specifications before rendering:
- Token-like contracts (name contains "token" or "erc20") without events get
  the ERC-20 Transfer and Approval events
- A specification without functions gets a single `example` view function
- A NatSpec block is added when missing
"""

import copy
from typing import Any

ERC20_EVENTS = [
    {
        "name": "Transfer",
        "parameters": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
    {
        "name": "Approval",
        "parameters": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "spender", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
]

EXAMPLE_FUNCTION = {
    "name": "example",
    "visibility": "public",
    "mutability": "view",
    "returns": {"type": "string"},
    "body": 'return "Hello, World!";',
}


def is_token_contract(contract_name: str) -> bool:
    name = contract_name.lower()
    return "token" in name or "erc20" in name


def enhance_spec(spec: dict[str, Any]) -> dict[str, Any]:
    """Return an enhanced deep copy of `spec`; the input is not modified."""
    enhanced = copy.deepcopy(spec)
    contract_name = enhanced.get("contractName") or "SmartContract"

    if not enhanced.get("events"):
        enhanced["events"] = copy.deepcopy(ERC20_EVENTS) if is_token_contract(contract_name) else []

    if not enhanced.get("functions"):
        enhanced["functions"] = [copy.deepcopy(EXAMPLE_FUNCTION)]

    if not enhanced.get("natspec"):
        enhanced["natspec"] = {
            "title": contract_name,
            "author": "",
            "notice": f"{contract_name} smart contract",
            "dev": "Generated by the Smart Contract Assistant",
        }

    return enhanced
