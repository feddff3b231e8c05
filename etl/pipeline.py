# etl/pipeline.py
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from common.settings import Settings
from decoding import (
    DecodeError,
    EnrichedRecord,
    SchemaRegistry,
    correlate_outcome,
    decode_call,
    decode_event,
    load_schema,
    normalize_numeric,
    resolve_nested,
)
from ingestion.client import FetchError, HttpClient
from ingestion.etherscan import fetch_logs
from ingestion.fetcher import fetch_input
from ingestion.module_registry import fetch_module_address
from ingestion.parser import parse_log

logger = logging.getLogger(__name__)

FetchInputFn = Callable[[str], str]

ON_ERROR_FAIL = "fail"
ON_ERROR_SKIP = "skip"


def decode_log(log: Mapping[str, Any], call_input: str, registry: SchemaRegistry) -> EnrichedRecord:
    """
    Decode one log and the input of the transaction that emitted it.
    Pure: the same log and payload always give an equal record.
    """
    try:
        raw = parse_log(dict(log))
    except ValueError as e:
        raise DecodeError(str(e)) from e

    call = decode_call(call_input, registry)
    call = resolve_nested(call, registry)
    call = correlate_outcome(call, raw, registry)
    return EnrichedRecord(
        log=raw,
        numeric=normalize_numeric(raw),
        event=decode_event(raw, registry),
        call=call,
    )


async def decode_logs(
    logs: Sequence[Mapping[str, Any]],
    registry: SchemaRegistry,
    fetch_input_fn: FetchInputFn,
    *,
    concurrency: int = 8,
    on_error: str = ON_ERROR_FAIL,
) -> List[EnrichedRecord]:
    """
    Fetch each log's transaction input and decode it, one task per log.

    Results come back in input order. With on_error="fail" the first
    DecodeError or FetchError cancels the remaining tasks and is raised; with
    "skip" the failing log becomes a record carrying only the raw log and an
    ``error`` string.
    """
    if on_error not in (ON_ERROR_FAIL, ON_ERROR_SKIP):
        raise ValueError(f"on_error must be {ON_ERROR_FAIL!r} or {ON_ERROR_SKIP!r}")

    sem = asyncio.Semaphore(max(1, int(concurrency)))

    async def handle_one(log: Mapping[str, Any]) -> EnrichedRecord:
        async with sem:
            try:
                tx_hash = log.get("transactionHash")
                if not tx_hash:
                    raise DecodeError(f"Log has no transactionHash: {dict(log)!r}")
                # the fetcher is blocking, keep it off the event loop
                call_input = await asyncio.to_thread(fetch_input_fn, tx_hash)
                return decode_log(log, call_input, registry)
            except (DecodeError, FetchError) as e:
                if on_error == ON_ERROR_FAIL:
                    raise
                logger.warning("Skipping log %s: %s", log.get("transactionHash"), e)
                return EnrichedRecord(log=dict(log), error=f"{type(e).__name__}: {e}")

    tasks = [asyncio.create_task(handle_one(lg)) for lg in logs]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def filter_by_method(records: Sequence[EnrichedRecord], method: Optional[str]) -> List[EnrichedRecord]:
    """
    Keep records whose outer or inner function is ``method``; empty method
    keeps all. Records carrying an ``error`` are always kept.
    """
    return [r for r in records if r.matches_method(method)]


def run_pipeline(
    client: HttpClient,
    settings: Settings,
    *,
    module: str,
    version: str,
    wallet: Optional[str],
    method: Optional[str],
    from_block: int,
    to_block: int,
    address: Optional[str] = None,
    concurrency: Optional[int] = None,
    on_error: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    End to end: resolve the module address, load its ABI, fetch the wallet's
    logs, decode them and return the records matching ``method`` as dicts.
    """
    registry = load_schema(settings.schema_source.abi_dir, version, module)

    if address is None:
        address = fetch_module_address(client, settings.registry.module_endpoint, module, version)
    logger.info("%s %s at %s", module, version, address)

    logs = fetch_logs(
        client,
        settings.etherscan.api_key,
        address,
        wallet,
        from_block,
        to_block,
        base_url=settings.etherscan.base_url,
    )

    fetch = functools.partial(fetch_input, client, settings.rpc.url)
    records = asyncio.run(
        decode_logs(
            logs,
            registry,
            fetch,
            concurrency=concurrency or settings.pipeline.concurrency,
            on_error=on_error or settings.pipeline.on_error,
        )
    )
    kept = filter_by_method(records, method)
    logger.info("Decoded %d logs, %d match method %r", len(records), len(kept), method or "*")
    return [r.to_dict() for r in kept]
