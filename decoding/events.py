# decoding/events.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from common.utils import hex_to_bytes
from decoding.calls import DecodeError
from decoding.schema import SchemaRegistry
from decoding.values import canonical_type, canonical_types, clean_value, is_array

_DYNAMIC_TYPES = ("string", "bytes")


@dataclass(frozen=True)
class DecodedEvent:
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def as_facet(self) -> Dict[str, Any]:
        return {"name": self.name, **self.fields}


def _hashed_in_topic(param: Mapping[str, Any]) -> bool:
    # indexed reference types are logged as keccak256 of their encoding
    t = param["type"]
    return t in _DYNAMIC_TYPES or t.startswith("tuple") or is_array(param)


def _decode_topic(param: Mapping[str, Any], topic: str) -> Any:
    if _hashed_in_topic(param):
        return str(topic).lower()
    raw = hex_to_bytes(topic)
    if len(raw) != 32:
        raise DecodeError(f"Topic for {param.get('name')!r} is {len(raw)} bytes, expected 32")
    (value,) = abi_decode([canonical_type(param)], raw)
    return clean_value(param, value)


def decode_event(log: Mapping[str, Any], registry: SchemaRegistry) -> Optional[DecodedEvent]:
    """
    Decode a raw log whose topic0 is a known event. Indexed parameters come
    from topics[1:] in declaration order, the rest from the data blob. Logs of
    events outside the schema return None.
    """
    topics = [t for t in (log.get("topics") or []) if t]
    if not topics:
        return None
    entry = registry.lookup_event(topics[0])
    if entry is None:
        return None

    indexed = entry.indexed_inputs
    if len(topics) - 1 < len(indexed):
        raise DecodeError(
            f"{entry.signature} expects {len(indexed)} indexed topics, log has {len(topics) - 1}"
        )

    positions = list(enumerate(entry.inputs))
    topic_slots = [i for i, p in positions if p.get("indexed")]
    data_slots = [i for i, p in positions if not p.get("indexed")]

    values: Dict[int, Any] = {}
    try:
        for i, topic in zip(topic_slots, topics[1:]):
            values[i] = _decode_topic(entry.inputs[i], topic)

        data_params = [entry.inputs[i] for i in data_slots]
        decoded = abi_decode(canonical_types(data_params), hex_to_bytes(log.get("data") or "0x"))
        for i, value in zip(data_slots, decoded):
            values[i] = clean_value(entry.inputs[i], value)
    except DecodeError:
        raise
    except (DecodingError, ValueError, OverflowError) as e:
        raise DecodeError(f"Cannot decode event {entry.signature}: {e}") from e

    # declaration order, wherever each value came from
    fields = {(p.get("name") or str(i)): values[i] for i, p in positions}
    return DecodedEvent(name=entry.name, fields=fields)
