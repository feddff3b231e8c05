# ingestion/fetcher.py
from __future__ import annotations

from typing import Any, List

from ingestion.client import FetchError, HttpClient
from ingestion.parser import parse_transaction


def rpc_call(client: HttpClient, rpc_url: str, method: str, params: List[Any]) -> Any:
    """
    Return the JSON RPC result field directly.
    """
    payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
    data = client.post_json(rpc_url, payload)
    if not isinstance(data, dict):
        raise FetchError(f"RPC response for {method} is not an object")
    if "error" in data:
        raise FetchError(f"RPC error for {method}: {data['error']}")
    return data.get("result")


def fetch_transaction(client: HttpClient, rpc_url: str, tx_hash: str) -> dict:
    if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
        raise ValueError("tx_hash must be a 0x prefixed hex string")
    tx = rpc_call(client, rpc_url, "eth_getTransactionByHash", [tx_hash])
    if tx is None:
        raise FetchError(f"Transaction {tx_hash} not found")
    return tx


def fetch_input(client: HttpClient, rpc_url: str, tx_hash: str) -> str:
    """The call payload (``input``) of the transaction that emitted a log."""
    try:
        return parse_transaction(fetch_transaction(client, rpc_url, tx_hash))["input_data"]
    except ValueError as e:
        raise FetchError(f"Bad transaction response for {tx_hash}: {e}") from e


__all__ = [
    "FetchError",
    "rpc_call",
    "fetch_transaction",
    "fetch_input",
]
