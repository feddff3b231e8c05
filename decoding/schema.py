# decoding/schema.py
"""
decoding.schema

Contract interface definitions (one ABI per module version) and selector based
lookup of functions and events.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from eth_utils import keccak

from common.utils import hex_to_bytes, strip_0x
from decoding.values import canonical_types

logger = logging.getLogger(__name__)


class SchemaNotFound(FileNotFoundError):
    pass


class SchemaError(ValueError):
    pass


@dataclass(frozen=True)
class SchemaEntry:
    name: str
    type: str
    inputs: Tuple[Mapping[str, Any], ...] = ()
    anonymous: bool = False
    signature: str = field(init=False, compare=False)
    selector: str = field(init=False, compare=False)
    topic: str = field(init=False, compare=False)

    def __post_init__(self):
        sig = f"{self.name}({','.join(canonical_types(self.inputs))})"
        digest = keccak(text=sig).hex()
        object.__setattr__(self, "signature", sig)
        # 4-byte function selector and full 32-byte event topic
        object.__setattr__(self, "selector", "0x" + strip_0x(digest)[:8])
        object.__setattr__(self, "topic", "0x" + strip_0x(digest))

    @classmethod
    def from_abi(cls, item: Mapping[str, Any]) -> "SchemaEntry":
        try:
            return cls(
                name=item["name"],
                type=item["type"],
                inputs=tuple(item.get("inputs") or ()),
                anonymous=bool(item.get("anonymous", False)),
            )
        except (KeyError, TypeError) as e:
            raise SchemaError(f"Malformed ABI entry {item!r}: {e}") from e

    @property
    def input_types(self) -> List[str]:
        return canonical_types(self.inputs)

    @property
    def indexed_inputs(self) -> List[Mapping[str, Any]]:
        return [p for p in self.inputs if p.get("indexed")]


class SchemaRegistry:
    """
    Read-only set of function and event entries for one contract version.

    Functions are indexed by 4-byte selector and events by topic0 when the
    registry is built, so every lookup is a dict hit. Two different entries
    that hash to the same selector (or topic) make the schema ambiguous and
    are rejected.
    """

    def __init__(self, entries, module: Optional[str] = None, version: Optional[str] = None):
        self.module = module
        self.version = version
        self._entries: Tuple[SchemaEntry, ...] = tuple(entries)
        self._functions: Dict[str, SchemaEntry] = {}
        self._events: Dict[str, SchemaEntry] = {}
        for entry in self._entries:
            if entry.type == "function":
                self._index(self._functions, entry.selector, entry)
            elif entry.type == "event" and not entry.anonymous:
                self._index(self._events, entry.topic, entry)

    @staticmethod
    def _index(table: Dict[str, SchemaEntry], key: str, entry: SchemaEntry) -> None:
        existing = table.get(key)
        if existing is None:
            table[key] = entry
        elif existing == entry:
            logger.debug("duplicate ABI entry %s ignored", entry.signature)
        else:
            raise SchemaError(
                f"{entry.type} {entry.signature} collides with {existing.signature} on {key}"
            )

    @classmethod
    def from_abi(cls, abi: List[Mapping[str, Any]], module: Optional[str] = None,
                 version: Optional[str] = None) -> "SchemaRegistry":
        entries = [SchemaEntry.from_abi(item) for item in abi
                   if item.get("type") in ("function", "event")]
        return cls(entries, module=module, version=version)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SchemaEntry]:
        return iter(self._entries)

    @property
    def functions(self) -> List[SchemaEntry]:
        return list(self._functions.values())

    @property
    def events(self) -> List[SchemaEntry]:
        return list(self._events.values())

    def lookup_function(self, payload: Union[str, bytes]) -> Optional[SchemaEntry]:
        """Match the first 4 bytes of a call payload. Unknown selectors return None."""
        try:
            raw = hex_to_bytes(payload)
        except ValueError:
            return None
        if len(raw) < 4:
            return None
        return self._functions.get("0x" + raw[:4].hex())

    def lookup_event(self, topic0: Optional[str]) -> Optional[SchemaEntry]:
        if not topic0:
            return None
        return self._events.get(str(topic0).lower())

    def find(self, name: str, type: Optional[str] = None) -> Optional[SchemaEntry]:
        for entry in self._entries:
            if entry.name == name and (type is None or entry.type == type):
                return entry
        return None


def schema_path(abi_dir: str, version: str, module: str) -> str:
    return os.path.join(abi_dir, version, f"{module}.json")


def load_schema(abi_dir: str, version: str, module: str) -> SchemaRegistry:
    """
    Load abi/<version>/<module>.json. The file is either {"abi": [...]} (build
    artifact) or a bare ABI list.
    """
    path = schema_path(abi_dir, version, module)
    if not os.path.exists(path):
        raise SchemaNotFound(f"No ABI for {module} {version} at {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SchemaError(f"Failed to read ABI {path}: {e}") from e

    abi = doc.get("abi") if isinstance(doc, dict) else doc
    if not isinstance(abi, list):
        raise SchemaError(f"ABI document {path} has no 'abi' list")

    registry = SchemaRegistry.from_abi(abi, module=module, version=version)
    logger.info("Loaded %s %s: %d functions, %d events",
                module, version, len(registry.functions), len(registry.events))
    return registry
