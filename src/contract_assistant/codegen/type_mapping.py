"""
Solidity type names translated to Rust (ink!) and Vyper.

Specifications use Solidity type names; the Rust and Vyper templates map them
through these functions. Dynamic arrays, fixed arrays and mappings are
handled recursively.
"""

import re

RUST_TYPES = {
    "uint256": "u128",
    "uint128": "u128",
    "uint64": "u64",
    "uint32": "u32",
    "uint8": "u8",
    "uint": "u128",
    "int256": "i128",
    "int128": "i128",
    "int64": "i64",
    "int32": "i32",
    "int8": "i8",
    "int": "i128",
    "bool": "bool",
    "address": "AccountId",
    "string": "String",
    "bytes": "Vec<u8>",
    "bytes32": "[u8; 32]",
}

VYPER_TYPES = {
    "uint256": "uint256",
    "uint128": "uint128",
    "uint64": "uint64",
    "uint32": "uint32",
    "uint8": "uint8",
    "uint": "uint256",
    "int256": "int256",
    "int128": "int128",
    "int64": "int64",
    "int32": "int32",
    "int8": "int8",
    "int": "int256",
    "bool": "bool",
    "address": "address",
    "string": "String[100]",
    "bytes": "Bytes[100]",
}

DEFAULT_VYPER_ARRAY_LENGTH = 100

_FIXED_ARRAY = re.compile(r"^(.+)\[(\d+)\]$")
_MAPPING = re.compile(r"^mapping\s*\((.+?)\s*=>\s*(.+)\)$")
_FIXED_BYTES = re.compile(r"^bytes(\d+)$")
_SIZED_STRING = re.compile(r"^string\[(\d+)\]$")


def convert_type_to_rust(solidity_type: str) -> str:
    """
    Examples:
        >>> convert_type_to_rust("address[]")
        'Vec<AccountId>'
        >>> convert_type_to_rust("mapping(address => uint256)")
        'HashMap<AccountId, u128>'
    """
    solidity_type = solidity_type.strip()

    if solidity_type.endswith("[]"):
        return f"Vec<{convert_type_to_rust(solidity_type[:-2])}>"

    fixed = _FIXED_ARRAY.match(solidity_type)
    if fixed:
        return f"[{convert_type_to_rust(fixed.group(1))}; {fixed.group(2)}]"

    if solidity_type.startswith("mapping"):
        mapping = _MAPPING.match(solidity_type)
        if mapping:
            key = convert_type_to_rust(mapping.group(1))
            value = convert_type_to_rust(mapping.group(2))
            return f"HashMap<{key}, {value}>"
        return "HashMap<AccountId, u128>"

    return RUST_TYPES.get(solidity_type, "String")


def convert_type_to_vyper(solidity_type: str) -> str:
    """
    Examples:
        >>> convert_type_to_vyper("uint256[]")
        'DynArray[uint256, 100]'
        >>> convert_type_to_vyper("bytes32")
        'Bytes[32]'
    """
    solidity_type = solidity_type.strip()

    if solidity_type.endswith("[]"):
        return f"DynArray[{convert_type_to_vyper(solidity_type[:-2])}, {DEFAULT_VYPER_ARRAY_LENGTH}]"

    sized_string = _SIZED_STRING.match(solidity_type)
    if sized_string:
        return f"String[{sized_string.group(1)}]"

    fixed = _FIXED_ARRAY.match(solidity_type)
    if fixed:
        return f"DynArray[{convert_type_to_vyper(fixed.group(1))}, {fixed.group(2)}]"

    fixed_bytes = _FIXED_BYTES.match(solidity_type)
    if fixed_bytes:
        return f"Bytes[{fixed_bytes.group(1)}]"

    mapping = _MAPPING.match(solidity_type)
    if mapping:
        key = convert_type_to_vyper(mapping.group(1))
        value = convert_type_to_vyper(mapping.group(2))
        return f"HashMap[{key}, {value}]"

    return VYPER_TYPES.get(solidity_type, solidity_type)
