# decoding/nested.py
from __future__ import annotations

from dataclasses import replace
from typing import Optional

from decoding.calls import DecodedCall, decode_call
from decoding.schema import SchemaRegistry

# relayed meta-transactions: execute(..., bytes _data, ...) runs _data on the wallet
DISPATCH_FUNCTION = "execute"
DATA_ARGUMENT = "_data"


def is_dispatch(call: Optional[DecodedCall]) -> bool:
    return call is not None and call.name == DISPATCH_FUNCTION


def resolve_nested(call: Optional[DecodedCall], registry: SchemaRegistry) -> Optional[DecodedCall]:
    """
    Unwrap one level of dispatch. The inner call is decoded with the same
    registry and attached as ``nested``; it is never unwrapped again, even if it
    is itself a dispatch.
    """
    if not is_dispatch(call):
        return call
    inner_payload = call.args.get(DATA_ARGUMENT)
    if not inner_payload:
        return call
    inner = decode_call(inner_payload, registry)
    if inner is None:
        return call
    return replace(call, nested=inner)
