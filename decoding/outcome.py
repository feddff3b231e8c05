# decoding/outcome.py
from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional

from common.utils import hex_to_int
from decoding.calls import DecodeError, DecodedCall
from decoding.nested import is_dispatch
from decoding.schema import SchemaRegistry

# TransactionExecuted(address indexed wallet, bool indexed success, ...)
RESULT_EVENT = "TransactionExecuted"
RESULT_TOPIC_INDEX = 2


def correlate_outcome(
    call: Optional[DecodedCall],
    log: Mapping[str, Any],
    registry: SchemaRegistry,
) -> Optional[DecodedCall]:
    """
    Set ``success`` on a dispatch call from the log it produced.

    A log that is not the result event means the relayed call went through
    (the module emitted its own event). For the result event the indexed
    success flag decides: any non-zero value is success.
    """
    if not is_dispatch(call):
        return call

    topics = log.get("topics") or []
    topic0 = str(topics[0]).lower() if topics else None
    result_event = registry.find(RESULT_EVENT, "event")
    if result_event is None or topic0 != result_event.topic:
        return replace(call, success=True)

    if len(topics) <= RESULT_TOPIC_INDEX:
        raise DecodeError(f"{RESULT_EVENT} log has no success topic at index {RESULT_TOPIC_INDEX}")
    try:
        flag = hex_to_int(topics[RESULT_TOPIC_INDEX])
    except ValueError as e:
        raise DecodeError(f"{RESULT_EVENT} success topic is not hex: {topics[RESULT_TOPIC_INDEX]!r}") from e
    return replace(call, success=flag != 0)
