# decoding/calls.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from common.utils import hex_to_bytes
from decoding.schema import SchemaRegistry
from decoding.values import named_values


class DecodeError(ValueError):
    pass


@dataclass
class DecodedCall:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    nested: Optional["DecodedCall"] = None
    success: Optional[bool] = None


def decode_call(payload: Union[str, bytes, None], registry: SchemaRegistry) -> Optional[DecodedCall]:
    """
    Decode a transaction input against the registry.

    Returns None when the payload carries no selector or the selector is not
    in the schema (plain ETH transfers, calls to other modules). Raises
    DecodeError when the selector matches but the argument bytes do not fit
    the function's parameter layout.
    """
    try:
        raw = hex_to_bytes(payload)
    except ValueError as e:
        raise DecodeError(f"Call payload is not valid hex: {e}") from e
    if len(raw) < 4:
        return None

    entry = registry.lookup_function(raw)
    if entry is None:
        return None

    try:
        values = abi_decode(entry.input_types, raw[4:])
    except (DecodingError, ValueError, OverflowError) as e:
        raise DecodeError(f"Cannot decode {entry.signature} ({entry.selector}): {e}") from e

    return DecodedCall(name=entry.name, args=named_values(entry.inputs, values))
