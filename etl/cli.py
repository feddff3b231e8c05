import argparse
import logging
import sys

from dotenv import load_dotenv

from common.logging_setup import setup_logging
from common.settings import load_settings
from common.utils import normalize_address
from decoding import DecodeError, SchemaError, SchemaNotFound
from etl.output import render_json, render_text
from etl.pipeline import run_pipeline
from ingestion.client import FetchError, HttpClient
from ingestion.module_registry import ModuleNotFound

logger = logging.getLogger("module_logs")

PLACEHOLDER_RPC = "https://example.invalid"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Decode the logs a wallet module emitted for a wallet, with the calls behind them"
    )
    p.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    p.add_argument("--module", default=None, help="Module name, e.g. TransferManager")
    p.add_argument("--version", default=None, help="Release version of the module ABI, e.g. 1.6.0")
    p.add_argument("--wallet", default=None, help="Wallet address (topic1 filter)")
    p.add_argument("--address", default=None,
                   help="Module contract address; skips the module registry lookup")
    p.add_argument("--method", default=None,
                   help="Only keep logs whose call or inner call is this function ('' keeps all)")
    p.add_argument("--from", dest="from_block", type=int, default=None, help="First block")
    p.add_argument("--to", dest="to_block", type=int, default=None, help="Last block")
    p.add_argument("--json", action="store_true", help="Print JSON instead of text")
    p.add_argument("--concurrency", type=int, default=None, help="Transactions fetched in parallel")
    p.add_argument("--on-error", dest="on_error", choices=["fail", "skip"], default=None,
                   help="Abort on the first bad log, or mark it and continue")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings(args.config)
    except RuntimeError as e:
        print(f"ERROR {e}", file=sys.stderr)
        return 2

    d = settings.defaults
    method = d.method if args.method is None else args.method
    from_block = d.from_block if args.from_block is None else args.from_block
    to_block = d.to_block if args.to_block is None else args.to_block

    if settings.rpc.url == PLACEHOLDER_RPC:
        print("ERROR INFURA_API_KEY (or RPC_URL_OVERRIDE) env var not set", file=sys.stderr)
        return 2
    if not settings.etherscan.api_key:
        print("ERROR ETHERSCAN_API_KEY env var not set", file=sys.stderr)
        return 2
    if args.address is None and not settings.registry.module_endpoint:
        print("ERROR MODULE_ENDPOINT env var not set (or pass --address)", file=sys.stderr)
        return 2
    try:
        wallet = normalize_address(args.wallet or d.wallet)
        address = normalize_address(args.address) if args.address else None
    except ValueError as e:
        print(f"ERROR {e}", file=sys.stderr)
        return 2
    if from_block < 0 or to_block < from_block:
        print("ERROR --from must be less than or equal to --to", file=sys.stderr)
        return 2

    client = HttpClient(
        timeout=settings.rpc.timeout,
        max_retries=settings.http.max_retries,
        backoff_seconds=settings.http.backoff_seconds,
    )
    with client:
        try:
            records = run_pipeline(
                client,
                settings,
                module=args.module or d.module,
                version=args.version or d.version,
                wallet=wallet,
                method=method,
                from_block=from_block,
                to_block=to_block,
                address=address,
                concurrency=args.concurrency,
                on_error=args.on_error,
            )
        except (SchemaNotFound, SchemaError, ModuleNotFound, FetchError, DecodeError, ValueError) as e:
            logger.error("%s: %s", type(e).__name__, e)
            return 1

    print(render_json(records) if args.json else render_text(records))
    return 0


if __name__ == "__main__":
    sys.exit(main())
