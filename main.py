# main.py

"""Entry point for the product_compare headless CLI."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("product_compare.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_STRATEGIES)

    parser = argparse.ArgumentParser(
        prog="product_compare",
        description="Multi-source product attribute comparison.",
        epilog=f"Available strategies: {valid_ids}",
    )
    parser.add_argument(
        "product1",
        nargs="?",
        default=None,
        help="First product name.",
    )
    parser.add_argument(
        "product2",
        nargs="?",
        default=None,
        help="Second product name.",
    )
    parser.add_argument(
        "-s",
        "--strategies",
        default=None,
        help="Comma-separated strategy IDs (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Custom output directory (default: results/).",
    )
    parser.add_argument(
        "--logs",
        type=int,
        default=0,
        metavar="N",
        help="Print the N most recent event log entries to stderr.",
    )
    parser.add_argument(
        "--export-logs",
        action="store_true",
        default=False,
        dest="export_logs",
        help="Also write the comparison's event log to a JSON file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO log records on the console.",
    )
    parser.add_argument(
        "--list-strategies",
        action="store_true",
        default=False,
        dest="list_strategies",
        help="List registered strategies and exit.",
    )
    return parser


def main() -> None:
    """Route to the strategy listing or a headless comparison."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("product_compare starting, log file: %s", log_file)

    from src.cli.runner import cli_compare, list_strategies

    if args.list_strategies:
        sys.exit(list_strategies())
    if args.product1 is None or args.product2 is None:
        parser.error("two product names are required")

    exit_code = asyncio.run(
        cli_compare(
            product1=args.product1,
            product2=args.product2,
            strategy_csv=args.strategies,
            output_format=args.output_format,
            output_dir=args.output_dir,
            show_logs=args.logs,
            export_logs=args.export_logs,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
