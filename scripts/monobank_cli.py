#!/usr/bin/env python3
"""
Read-only monobank acquiring queries for operators.

Usage:
    python -m scripts.monobank_cli merchant
    python -m scripts.monobank_cli pubkey
    python -m scripts.monobank_cli status <invoice_id>
    python -m scripts.monobank_cli payment-info <invoice_id>
    python -m scripts.monobank_cli statement --from 1577836800 [--to 1580515200]

Token: --token, otherwise <APP_ENV>_MONOBANK_TOKEN via config.py.
Output: JSON on stdout. Exit code 1 on API errors.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from app.core.logging_config import setup_logging
from payments.exceptions import MonoAcquiringError
from payments.monobank import MonoAcquiring

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="monobank_cli", description="monobank acquiring queries")
    parser.add_argument("--token", help="X-Token (defaults to config)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("merchant", help="merchant details")
    commands.add_parser("pubkey", help="webhook verification public key")

    status = commands.add_parser("status", help="invoice status")
    status.add_argument("invoice_id")

    payment_info = commands.add_parser("payment-info", help="successful payment details")
    payment_info.add_argument("invoice_id")

    statement = commands.add_parser("statement", help="payments for a period")
    statement.add_argument("--from", dest="timestamp_from", type=int, required=True)
    statement.add_argument("--to", dest="timestamp_to", type=int, default=None)
    return parser


def run(client: MonoAcquiring, args: argparse.Namespace):
    if args.command == "merchant":
        return client.get_merchant_details()
    if args.command == "pubkey":
        return {"key": client.get_public_key()}
    if args.command == "status":
        return client.get_payment_status(args.invoice_id)
    if args.command == "payment-info":
        return client.get_payment_success_details(args.invoice_id)
    if args.command == "statement":
        return client.get_payments_list(args.timestamp_from, args.timestamp_to)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.token:
        client = MonoAcquiring(token=args.token)
    else:
        client = MonoAcquiring.from_config()

    try:
        result = run(client, args)
    except MonoAcquiringError as e:
        logger.error(f"monobank_cli: FAILED command={args.command} status={e.status_code} error={e.message}")
        print(json.dumps({"error": e.message, "status": e.status_code}, ensure_ascii=False), file=sys.stderr)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
