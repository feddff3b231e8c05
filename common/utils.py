"""
common.utils

Utility helper functions.
"""
import re
from typing import Union

_ADDRESS_RE = re.compile(r"^[0-9a-fA-F]{40}$")


def strip_0x(s: str) -> str:
    return s[2:] if isinstance(s, str) and s[:2] in ("0x", "0X") else s


def hex_to_bytes(value: Union[str, bytes, bytearray, None]) -> bytes:
    """
    Accept 0x-prefixed hex, bare hex or raw bytes and return bytes.
    Raises ValueError on odd length or non hex characters.
    """
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return bytes.fromhex(strip_0x(value.strip()))


def hex_to_int(value) -> int:
    """
    "0x9a1e30" -> 10100272, "42" -> 42, "0x" -> 0.
    """
    if isinstance(value, int):
        return value
    s = str(value).strip().lower()
    if s.startswith("0x"):
        return int(s[2:], 16) if len(s) > 2 else 0
    return int(s)


def normalize_address(addr: str) -> str:
    """
    Returns lowercased 0x-prefixed 40-hex address or raises ValueError.
    Accepts inputs with extra whitespace/quotes.
    """
    if not addr:
        raise ValueError("Empty address.")
    h = strip_0x(str(addr).strip().strip('"').strip("'"))
    if not _ADDRESS_RE.match(h):
        raise ValueError(f"Invalid address: {addr!r} (need 20-byte hex, e.g. 0x...40 hex chars)")
    return "0x" + h.lower()


def pad_topic(address: str) -> str:
    """
    Left pad a 20-byte address to a 32-byte topic value.
    """
    return "0x" + strip_0x(normalize_address(address)).rjust(64, "0")
