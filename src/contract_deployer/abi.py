"""Constructor ABI helpers for contract-deployer library."""

from typing import Any, Dict, List, Sequence

from eth_abi import encode, is_encodable

from .exceptions import ArgumentMismatchError


def abi_type(param: Dict[str, Any]) -> str:
    """
    Get the canonical type string of an ABI parameter.

    Tuple types are collapsed from their components, e.g. a struct
    parameter of type "tuple[]" becomes "(address,uint256)[]".

    Args:
        param: ABI input definition

    Returns:
        Type string accepted by eth_abi
    """
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def constructor_inputs(abi: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Get constructor inputs from a contract ABI (empty if no constructor)."""
    for item in abi:
        if item.get("type") == "constructor":
            return item.get("inputs", [])
    return []


def validate_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> None:
    """
    Check constructor arguments against the ABI.

    Args:
        abi: Contract ABI
        args: Ordered constructor arguments

    Raises:
        ArgumentMismatchError: If arity differs or an argument has the wrong type
    """
    inputs = constructor_inputs(abi)
    if len(inputs) != len(args):
        raise ArgumentMismatchError(
            f"Constructor expects {len(inputs)} argument(s), got {len(args)}"
        )

    for position, (param, value) in enumerate(zip(inputs, args)):
        typ = abi_type(param)
        if not is_encodable(typ, value):
            name = param.get("name") or f"#{position}"
            raise ArgumentMismatchError(
                f"Constructor argument {name} expects type {typ}, got {value!r}"
            )


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments.

    Args:
        abi: Contract ABI
        args: Ordered constructor arguments (already validated)

    Returns:
        Hex string without 0x prefix, the form explorers expect
    """
    types = [abi_type(param) for param in constructor_inputs(abi)]
    if not types:
        return ""
    return encode(types, list(args)).hex()
