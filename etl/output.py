# etl/output.py
import json
import pprint
from typing import Any, Dict, List


def render_json(records: List[Dict[str, Any]]) -> str:
    return json.dumps(records, indent=2)


def render_text(records: List[Dict[str, Any]], depth: int = 4) -> str:
    # records -> record -> facet -> values; deeper structures collapse to "..."
    return pprint.pformat(records, depth=depth, width=120, sort_dicts=False)
