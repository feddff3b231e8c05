# decoding/values.py
"""
Helpers that turn ABI parameter descriptors into eth_abi type strings and
eth_abi output into plain, JSON friendly Python values.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from eth_utils import to_checksum_address

_ARRAY_RE = re.compile(r"^(.*)\[(\d*)\]$")


def canonical_type(param: Mapping[str, Any]) -> str:
    """
    Convert an ABI parameter to the type string used in signatures and by eth_abi.

    Tuples are expanded to "(t1,t2)" and keep their array suffix, so
    {"type": "tuple[]", "components": [uint256, address]} -> "(uint256,address)[]".
    """
    abi_type = param["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    suffix = abi_type[len("tuple"):]
    components = param.get("components") or []
    inner = ",".join(canonical_type(c) for c in components)
    return f"({inner}){suffix}"


def canonical_types(params: Iterable[Mapping[str, Any]]) -> List[str]:
    return [canonical_type(p) for p in params]


def _element(param: Mapping[str, Any]) -> Dict[str, Any]:
    # drop the outermost array dimension
    m = _ARRAY_RE.match(param["type"])
    return {**param, "type": m.group(1)}


def is_array(param: Mapping[str, Any]) -> bool:
    return _ARRAY_RE.match(param["type"]) is not None


def clean_value(param: Mapping[str, Any], value: Any) -> Any:
    """
    addresses -> checksummed, bytes/bytesN -> 0x hex, tuples -> dict by
    component name, arrays -> list. Everything else is returned as decoded.
    """
    if is_array(param):
        element = _element(param)
        return [clean_value(element, v) for v in value]

    abi_type = param["type"]
    if abi_type == "tuple":
        return named_values(param.get("components") or [], value)
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return "0x" + bytes(value).hex()
    return value


def named_values(params: Sequence[Mapping[str, Any]], values: Sequence[Any]) -> Dict[str, Any]:
    """
    Zip decoded values with their ABI names. An unnamed parameter falls back
    to its position so nothing is silently dropped.
    """
    out: Dict[str, Any] = {}
    for i, (param, value) in enumerate(zip(params, values)):
        out[param.get("name") or str(i)] = clean_value(param, value)
    return out
