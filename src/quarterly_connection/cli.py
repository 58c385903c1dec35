"""Command-line argument parsing for the quarterly connection report generator."""

from __future__ import annotations

import argparse
from datetime import date
from typing import Optional, Sequence


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for report generation.

    Returns:
        Parsed CLI arguments containing quarter, year, associate, config path,
        output directory, worker count and verbosity.
    """
    parser = argparse.ArgumentParser(
        prog="qc",
        description=(
            "Generate quarterly connection HTML reports from Jira tickets and "
            "GitHub activity."
        ),
        epilog=(
            "If --associate is not specified, reports are generated for all "
            "associates in the config file."
        ),
    )

    parser.add_argument(
        "--quarter",
        required=True,
        help="Quarter to generate the report for (Q1, Q2, Q3, Q4).",
    )
    parser.add_argument(
        "--year",
        type=_positive_int,
        default=date.today().year,
        help="Year for the quarter (default: current year).",
    )
    parser.add_argument(
        "--associate",
        default=None,
        help="Associate name from the config file (default: all associates).",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML config file (default: config.yaml).",
    )
    parser.add_argument(
        "--output",
        default="reports",
        help="Output directory for reports (default: reports).",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=4,
        help="Number of associates processed concurrently (default: 4).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)
