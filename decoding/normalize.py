# decoding/normalize.py
from typing import Any, Dict, Mapping

from common.utils import hex_to_int
from decoding.calls import DecodeError

# Etherscan returns these as hex strings ("0x" alone for zero)
NUMERIC_FIELDS = ("timeStamp", "blockNumber", "gasPrice", "gasUsed", "logIndex", "transactionIndex")


def normalize_numeric(log: Mapping[str, Any]) -> Dict[str, int]:
    """
    Return the numeric log fields as ints, keyed by their original names.
    Fields missing from the log are skipped; the log itself is left untouched.
    """
    out: Dict[str, int] = {}
    for key in NUMERIC_FIELDS:
        if key not in log or log[key] is None:
            continue
        try:
            out[key] = hex_to_int(log[key])
        except ValueError as e:
            raise DecodeError(f"Log field {key}={log[key]!r} is not numeric") from e
    return out
