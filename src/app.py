"""Command line entry point for txscope."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Iterable, Optional

from art import text2art
from dotenv import load_dotenv

import settings
from adapters.bitcoin_address import BitcoinAddressValidator
from adapters.insight_formatting import (
    format_address_state,
    format_deposits,
    format_paged_result,
    format_utxos,
)
from client import build_client
from core.aggregator import AddressAggregator
from core.errors import AggregationError, InvalidAddress

NAME = "TXSCOPE"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _print_banner() -> None:
    # stdout carries the JSON result, so the banner goes to stderr.
    sys.stderr.write(text2art(NAME, font=FONT))


class _SecretMaskingFilter(logging.Filter):
    """Replace secret values in the rendered message and traceback of a record."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        values = sorted({value for value in secrets if value}, key=len, reverse=True)
        # Longest first, since alternation stops at the first alternative that matches.
        self._pattern = re.compile("|".join(map(re.escape, values))) if values else None

    def filter(self, record: logging.LogRecord) -> bool:
        if self._pattern is None:
            return True
        record.msg = self._pattern.sub("***", record.getMessage())
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self._pattern.sub("***", record.exc_text)
        return True


def _secret_values(env_names: Iterable[str]) -> list[str]:
    return [value for value in (os.getenv(name) for name in env_names) if value]


def _log_file_path(file_cfg: dict) -> str:
    path = file_cfg.get("path", "logs/txscope.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return path


def _build_handlers(config: dict) -> list[logging.Handler]:
    """Create the console and rotating file handlers enabled in ``config``."""

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        # stdout carries the JSON result.
        handlers.append(logging.StreamHandler(sys.stderr))

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(
            RotatingFileHandler(
                _log_file_path(file_cfg),
                maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
                backupCount=int(file_cfg.get("backup_count", 5)),
                encoding="utf-8",
            )
        )

    masking = _SecretMaskingFilter(_secret_values(config.get("mask_env", [])))
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.addFilter(masking)
        handler.setFormatter(formatter)
    return handlers


def _configure_logging(config: Optional[dict] = None) -> None:
    config = settings.LOGGING if config is None else config
    if not config or not config.get("enabled", False):
        return

    # Secrets named in mask_env usually live in .env.
    load_dotenv()
    handlers = _build_handlers(config)
    if handlers:
        level = logging.getLevelName(str(config.get("level", "INFO")).upper())
        logging.basicConfig(level=level if isinstance(level, int) else logging.INFO, handlers=handlers)


def _load_deposit_request(args: argparse.Namespace) -> dict:
    """Merge a JSON request file with command line addresses and exclusions."""

    request: dict[str, Any] = {"addresses": [], "ignoredTx": []}
    if args.request:
        with open(args.request, "r", encoding="utf-8") as handle:
            request.update(json.load(handle))
    if args.addrs:
        request["addresses"] = list(request.get("addresses") or []) + args.addrs.split(",")
    if args.ignore_tx:
        request["ignoredTx"] = list(request.get("ignoredTx") or []) + args.ignore_tx
    return request


async def _execute(args: argparse.Namespace) -> Any:
    validator = BitcoinAddressValidator(settings.ADDRESS_NETWORK)
    async with build_client(
        settings.INDEX_BASE_URL,
        api_prefix=settings.INDEX_API_PREFIX,
        timeout=settings.INDEX_TIMEOUT_SECONDS,
    ) as index:
        aggregator = AddressAggregator(index, index, validator, settings.AGGREGATION)
        no_cache = args.no_cache

        if args.command == "addr":
            state = await aggregator.address_summary(args.addr, no_cache, include_tx_list=not args.no_tx_list)
            return format_address_state(state, include_tx_list=not args.no_tx_list)
        if args.command == "utxo":
            return format_utxos(await aggregator.utxos(args.addr, no_cache))
        if args.command == "balance":
            return await aggregator.balance(args.addr, no_cache)
        if args.command == "total-received":
            return await aggregator.total_received(args.addr, no_cache)
        if args.command == "total-sent":
            return await aggregator.total_sent(args.addr, no_cache)
        if args.command == "unconfirmed-balance":
            return await aggregator.unconfirmed_balance(args.addr, no_cache)
        if args.command == "multi-utxo":
            return format_utxos(await aggregator.utxos_for_addresses(args.addrs, no_cache))
        if args.command == "txs":
            result = await aggregator.list_transactions_for_addresses(
                args.addrs,
                from_index=args.from_index,
                to_index=args.to_index,
                ignore_cache=no_cache,
            )
            return format_paged_result(result)
        if args.command == "deposits":
            deposits = await aggregator.detect_deposits_for_request(_load_deposit_request(args))
            return format_deposits(deposits)
    raise RuntimeError(f"Unknown command: {args.command}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="txscope")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--no-cache", action="store_true", help="Bypass the index cache")

    addr_parser = subparsers.add_parser("addr", parents=[common], help="Show an address summary")
    addr_parser.add_argument("addr")
    addr_parser.add_argument("--no-tx-list", action="store_true", help="Omit the transaction id list")

    for name, help_text in (
        ("utxo", "List unspent outputs of an address"),
        ("balance", "Confirmed balance in satoshis"),
        ("total-received", "Total received in satoshis"),
        ("total-sent", "Total sent in satoshis"),
        ("unconfirmed-balance", "Unconfirmed balance in satoshis"),
    ):
        single = subparsers.add_parser(name, parents=[common], help=help_text)
        single.add_argument("addr")

    multi_utxo = subparsers.add_parser("multi-utxo", parents=[common], help="Unspent outputs of many addresses")
    multi_utxo.add_argument("--addrs", required=True, help="Comma separated addresses")

    txs = subparsers.add_parser("txs", parents=[common], help="Paged transactions of many addresses")
    txs.add_argument("--addrs", required=True, help="Comma separated addresses")
    txs.add_argument("--from", dest="from_index", type=int, default=None)
    txs.add_argument("--to", dest="to_index", type=int, default=None)

    deposits = subparsers.add_parser("deposits", parents=[common], help="Detect incoming deposits")
    deposits.add_argument("--addrs", default="", help="Comma separated addresses")
    deposits.add_argument("--ignore-tx", action="append", default=[], help="Transaction id to skip")
    deposits.add_argument("--request", help="JSON file shaped like {addresses, ignoredTx}")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _print_banner()
    _configure_logging()

    try:
        result = asyncio.run(_execute(args))
    except InvalidAddress as exc:
        LOGGER.error("%s", exc)
        sys.stderr.write(f"{exc}\n")
        return 2
    except AggregationError:
        LOGGER.exception("Request failed")
        sys.stderr.write("Internal server error\n")
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
