# decoding/__init__.py
from .schema import SchemaEntry, SchemaError, SchemaNotFound, SchemaRegistry, load_schema
from .calls import DecodeError, DecodedCall, decode_call
from .nested import resolve_nested
from .events import DecodedEvent, decode_event
from .outcome import correlate_outcome
from .normalize import normalize_numeric
from .record import EnrichedRecord

__all__ = [
    "SchemaEntry",
    "SchemaError",
    "SchemaNotFound",
    "SchemaRegistry",
    "load_schema",
    "DecodeError",
    "DecodedCall",
    "decode_call",
    "resolve_nested",
    "DecodedEvent",
    "decode_event",
    "correlate_outcome",
    "normalize_numeric",
    "EnrichedRecord",
]
