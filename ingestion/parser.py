# ingestion/parser.py
"""
ingestion.parser
Validate raw transaction and log JSON before decoding.
"""
from typing import Any, Dict


def parse_transaction(tx_json: dict) -> dict:
    if not tx_json or "hash" not in tx_json:
        raise ValueError("Invalid transaction JSON")
    return {
        "tx_hash": tx_json["hash"],
        "from": tx_json.get("from"),
        "to": tx_json.get("to"),
        "value": tx_json.get("value"),
        "input_data": tx_json.get("input") or "0x",
    }


def parse_log(log_json: dict) -> Dict[str, Any]:
    """
    Check the fields the decoder relies on and return a shallow copy with
    ``topics`` as a list. All other fields are passed through unchanged.
    """
    if not log_json or "topics" not in log_json:
        raise ValueError("Invalid log JSON")
    tx_hash = log_json.get("transactionHash")
    if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
        raise ValueError(f"Log has no transactionHash: {log_json!r}")
    topics = log_json.get("topics")
    if not isinstance(topics, (list, tuple)):
        raise ValueError("Log topics must be a list")
    return {**log_json, "topics": list(topics)}
