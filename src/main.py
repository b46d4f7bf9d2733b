import argparse
import csv
import logging
import sys
from typing import List, Optional

from config import EngineSettings, build_settings
from exceptions import ConfigError
from payments_engine import PaymentsEngine
from report import write_accounts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments",
        description="Apply a CSV of transactions and print the final client accounts.",
    )
    parser.add_argument("input", help="transactions CSV file, or - to read from stdin")
    parser.add_argument(
        "--dispute-window",
        type=int,
        help="only keep this many past transactions disputable (default: keep all)",
    )
    parser.add_argument("--eviction-interval", type=int, help="transactions between history sweeps")
    parser.add_argument("--log-level", help="logging level for stderr output (default: WARNING)")
    return parser


def load_settings(args: argparse.Namespace) -> EngineSettings:
    return build_settings(
        dispute_window=args.dispute_window,
        eviction_interval=args.eviction_interval,
        log_level=args.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.logging_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(settings)
    try:
        if args.input == "-":
            accounts = engine.process_stream(sys.stdin)
        else:
            accounts = engine.process_file(args.input)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error(f"Cannot read {args.input}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
