# decoding/record.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from decoding.calls import DecodedCall
from decoding.events import DecodedEvent


@dataclass
class EnrichedRecord:
    """
    One fully decoded log. ``event`` and ``call`` are None when the log or its
    transaction did not match the schema; ``error`` is only set when the log
    could not be processed and the batch was allowed to continue.
    """
    log: Dict[str, Any]
    numeric: Dict[str, int] = field(default_factory=dict)
    event: Optional[DecodedEvent] = None
    call: Optional[DecodedCall] = None
    error: Optional[str] = None

    @property
    def transaction_hash(self) -> Optional[str]:
        return self.log.get("transactionHash")

    @property
    def function_name(self) -> Optional[str]:
        return self.call.name if self.call else None

    @property
    def inner_function_name(self) -> Optional[str]:
        if self.call is None or self.call.nested is None:
            return None
        return self.call.nested.name

    def matches_method(self, method: Optional[str]) -> bool:
        # a failed log has no call to match on, keep it so the error is reported
        if not method or self.error is not None:
            return True
        return method in (self.function_name, self.inner_function_name)

    def to_dict(self) -> Dict[str, Any]:
        """
        Flat output mapping: raw log fields, then "event", then funName /
        funInput / subFunName / subFunInput / success, then the normalized
        numeric fields replacing their hex originals.
        """
        out: Dict[str, Any] = dict(self.log)
        if self.event is not None:
            out["event"] = self.event.as_facet()
        if self.call is not None:
            out["funName"] = self.call.name
            out["funInput"] = self.call.args
            if self.call.nested is not None:
                out["subFunName"] = self.call.nested.name
                out["subFunInput"] = self.call.nested.args
            if self.call.success is not None:
                out["success"] = self.call.success
        out.update(self.numeric)
        if self.error is not None:
            out["error"] = self.error
        return out
