# main.py

"""Entry point for the scheduled price monitor."""

import argparse
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import MonitorConfig
from src.exceptions import ConfigError

logger = logging.getLogger("price_monitor.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_monitor",
        description=(
            "Record today's prices, alert on changes, "
            "and publish the price history dataset."
        ),
        epilog="Settings are read from the environment and a .env file.",
    )
    parser.add_argument(
        "-d",
        "--date",
        default=None,
        dest="reference_date",
        help="Reference date YYYY-MM-DD (default: today).",
    )
    parser.add_argument(
        "--digest",
        action="store_true",
        default=False,
        dest="force_digest",
        help="Build the weekly report regardless of the weekday.",
    )
    parser.add_argument(
        "--no-notify",
        action="store_false",
        default=True,
        dest="notify",
        help="Log notifications instead of emailing them.",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Print the latest recorded prices and exit.",
    )
    parser.add_argument(
        "--chart",
        action="store_true",
        default=False,
        help="Re-publish the dataset and chart from stored history.",
    )
    return parser


def main() -> None:
    """Parse arguments, load config and dispatch to the runner."""
    parser = _build_parser()
    args = parser.parse_args()

    try:
        config = MonitorConfig.from_env()
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        log_file = setup_logging(config.logs_dir)
    except OSError as exc:
        parser.error(f"cannot open run log in {config.logs_dir}: {exc}")
    logger.info("price_monitor starting, log file: %s", log_file)

    from src.cli.runner import (
        parse_reference_date,
        run_monitor,
        run_publish,
        show_latest,
    )

    if args.show:
        exit_code = show_latest(config)
    elif args.chart:
        exit_code = run_publish(config, chart=True)
    else:
        exit_code = run_monitor(
            config,
            reference_date=parse_reference_date(args.reference_date),
            force_digest=args.force_digest,
            notify=args.notify,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
