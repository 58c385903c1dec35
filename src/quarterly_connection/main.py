"""Quarterly connection report generator entry point."""

from __future__ import annotations

import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .aggregator import build_report
from .cli import parse_args
from .config import Config, load_config, select_associates
from .errors import ApiError, ConfigurationError, InvalidQuarter
from .github_client import GitHubClient
from .jira_client import JiraClient
from .models import Associate, DateRange, ReportModel
from .quarters import get_quarter_dates, normalize_quarter
from .renderer import write_report
from .summary import format_summary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_INVALID_INPUT = 2
EXIT_ASSOCIATE_FAILED = 4


@dataclass(slots=True)
class AssociateResult:
    """Outcome of one associate's fetch, aggregate and render pipeline."""

    associate: Associate
    model: Optional[ReportModel] = None
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def generate_associate_report(
    associate: Associate,
    config: Config,
    quarter: str,
    year: int,
    date_range: DateRange,
    output_dir: str,
) -> AssociateResult:
    """Fetch, aggregate and write the report for a single associate.

    Raises:
        ApiError: When either the Jira or GitHub fetch fails.
        OSError: When the report file cannot be written.
    """
    logger.info("Fetching Jira data", extra={"associate": associate.name})
    with JiraClient(
        config.jira_url,
        config.jira_token,
        story_points_field=config.story_points_field,
    ) as jira_client:
        tickets = jira_client.fetch_completed_tickets(associate.jira_username, date_range)

    logger.info("Fetching GitHub data", extra={"associate": associate.name})
    with GitHubClient(config.github_token, api_url=config.github_api_url) as github_client:
        contributions = github_client.fetch_contributions(associate.github_username, date_range)

    model = build_report(
        associate=associate,
        quarter=quarter,
        year=year,
        period=date_range,
        tickets=tickets,
        contributions=contributions,
        jira_url=config.jira_url,
    )
    path = write_report(model, output_dir)
    return AssociateResult(associate=associate, model=model, path=path)


def _safe_generate(
    associate: Associate,
    config: Config,
    quarter: str,
    year: int,
    date_range: DateRange,
    output_dir: str,
) -> AssociateResult:
    try:
        return generate_associate_report(associate, config, quarter, year, date_range, output_dir)
    except (ApiError, OSError) as exc:
        logger.warning(
            "Skipping report for %s: %s",
            associate.name,
            exc,
            extra={"associate": associate.name, "error_type": type(exc).__name__},
        )
        return AssociateResult(associate=associate, error=str(exc))


def process_associates(
    associates: Sequence[Associate],
    config: Config,
    quarter: str,
    year: int,
    date_range: DateRange,
    output_dir: str,
    workers: int = 4,
) -> List[AssociateResult]:
    """Generate reports for ``associates`` with bounded concurrency.

    One associate's failure never stops the others. Results are returned in
    the order of ``associates`` regardless of completion order.
    """
    if not associates:
        return []

    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(associates)))) as pool:
        futures = [
            pool.submit(_safe_generate, associate, config, quarter, year, date_range, output_dir)
            for associate in associates
        ]
        return [future.result() for future in futures]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run report generation and return a process exit code."""
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        quarter = normalize_quarter(args.quarter)
        date_range = get_quarter_dates(quarter, args.year)
        config = load_config(args.config)
        associates = select_associates(config, args.associate)
    except (InvalidQuarter, ConfigurationError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    try:
        if not args.associate:
            print(f"No associate specified - generating reports for all {len(associates)} associates")
        print(
            f"Generating {quarter} {args.year} reports "
            f"({date_range.start_day} to {date_range.end_day})..."
        )

        results = process_associates(
            associates,
            config,
            quarter,
            args.year,
            date_range,
            args.output,
            workers=args.workers,
        )
    except Exception:
        logger.exception("Unexpected error while generating reports")
        return EXIT_UNEXPECTED

    failed = 0
    for index, result in enumerate(results, start=1):
        prefix = f"[{index}/{len(results)}] {result.associate.name}"
        if not result.ok:
            failed += 1
            print(f"{prefix}: FAILED - {result.error}")
            continue
        print(f"\n{prefix}: report generated at {result.path}")
        if result.model is not None:
            print(format_summary(result.model))

    if failed:
        print(f"\n{failed} of {len(results)} reports failed; see warnings above.")
        return EXIT_ASSOCIATE_FAILED

    print(f"\nAll reports generated successfully in {args.output}/")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
