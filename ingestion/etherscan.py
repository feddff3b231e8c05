# ingestion/etherscan.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from common.utils import pad_topic
from ingestion.client import FetchError, HttpClient

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.etherscan.io/api"
PAGE_SIZE = 1000  # Etherscan max records per getLogs call


def _result(data: Any) -> List[dict]:
    if not isinstance(data, dict):
        raise FetchError("Etherscan response is not an object")
    status = data.get("status")
    message = data.get("message", "")
    result = data.get("result")

    # empty range is reported as an error status
    if status == "0" and (result == [] or "no records found" in str(message).lower()):
        return []
    if status != "1":
        detail = result if isinstance(result, str) else message
        raise FetchError(f"Etherscan API error: {detail}")
    if not isinstance(result, list):
        raise FetchError("Etherscan getLogs did not return a list")
    return result


def fetch_logs(
    client: HttpClient,
    api_key: Optional[str],
    address: str,
    wallet: Optional[str],
    from_block: int,
    to_block: int,
    base_url: str = DEFAULT_BASE_URL,
) -> List[dict]:
    """
    Logs emitted by ``address`` in [from_block, to_block], filtered on the
    first indexed argument (topic1) being ``wallet`` when one is given.
    Pages through results until a short page comes back.
    """
    if not isinstance(address, str) or not address.startswith("0x"):
        raise ValueError("address must be a 0x prefixed hex string")
    if not isinstance(from_block, int) or not isinstance(to_block, int):
        raise ValueError("from_block and to_block must be integers")
    if from_block < 0 or to_block < from_block:
        raise ValueError("invalid block range")

    params: Dict[str, Any] = {
        "module": "logs",
        "action": "getLogs",
        "apikey": api_key or "",
        "fromBlock": from_block,
        "toBlock": to_block,
        "address": address,
        "offset": PAGE_SIZE,
    }
    if wallet:
        params["topic1"] = pad_topic(wallet)

    logs: List[dict] = []
    page = 1
    while True:
        batch = _result(client.get_json(base_url, params={**params, "page": page}))
        logs.extend(batch)
        logger.debug("getLogs %s page %d: %d logs", address, page, len(batch))
        if len(batch) < PAGE_SIZE:
            break
        page += 1

    logger.info("Fetched %d logs for %s in blocks %d..%d", len(logs), address, from_block, to_block)
    return logs
