"""Report model assembly from fetched Jira and GitHub records.

Every summary value is derived directly from the record collections on each
call, so building a report twice from the same input yields the same numbers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Set

from .models import (
    Associate,
    Contributions,
    DateRange,
    ReportModel,
    TrackerTicket,
)

logger = logging.getLogger(__name__)


def total_story_points(tickets: Iterable[TrackerTicket]) -> float:
    """Sum story points over tickets that carry an estimate."""
    return sum(ticket.story_points for ticket in tickets if ticket.story_points is not None)


def unique_repositories(contributions: Contributions) -> Set[str]:
    """Return repository identifiers seen across PRs, issues and reviews.

    Matching is exact and case-sensitive. Records whose URL did not yield a
    repository (empty identifier) are not counted.
    """
    repos: Set[str] = set()
    repos.update(pr.repo for pr in contributions.pull_requests)
    repos.update(issue.repo for issue in contributions.issues)
    repos.update(review.repo for review in contributions.code_reviews)
    repos.discard("")
    return repos


def build_report(
    associate: Associate,
    quarter: str,
    year: int,
    period: DateRange,
    tickets: Sequence[TrackerTicket],
    contributions: Contributions,
    jira_url: str = "",
    generated_at: Optional[datetime] = None,
) -> ReportModel:
    """Reduce fetched records into an immutable :class:`ReportModel`.

    Business logic:
    - Merged pull requests are those with a merge timestamp, whatever their state.
    - Closed issues are those with a close timestamp.
    - Commit and line totals sum over every pull request; failed detail
      fetches contribute 0.
    - Tickets without an estimate add nothing to the story-point total and
      are excluded from ``tickets_with_story_points``.
    """
    pull_requests = tuple(contributions.pull_requests)
    issues = tuple(contributions.issues)
    code_reviews = tuple(contributions.code_reviews)

    model = ReportModel(
        associate_name=associate.name,
        display_name=associate.display_name,
        quarter=quarter,
        year=year,
        period=period,
        jira_url=jira_url.rstrip("/"),
        generated_at=generated_at or datetime.now(timezone.utc),
        tickets=tuple(tickets),
        pull_requests=pull_requests,
        issues=issues,
        code_reviews=code_reviews,
        total_tickets=len(tickets),
        tickets_with_story_points=sum(1 for ticket in tickets if ticket.has_story_points),
        total_story_points=float(total_story_points(tickets)),
        total_pull_requests=len(pull_requests),
        merged_pull_requests=sum(1 for pr in pull_requests if pr.is_merged),
        total_issues=len(issues),
        closed_issues=sum(1 for issue in issues if issue.is_closed),
        total_code_reviews=len(code_reviews),
        total_commits=sum(pr.commits for pr in pull_requests),
        total_lines_added=sum(pr.additions for pr in pull_requests),
        total_lines_deleted=sum(pr.deletions for pr in pull_requests),
        total_changed_files=sum(pr.changed_files for pr in pull_requests),
        unique_repositories=len(unique_repositories(contributions)),
    )

    logger.info(
        "Built report model",
        extra={
            "associate": associate.name,
            "tickets": model.total_tickets,
            "pull_requests": model.total_pull_requests,
            "issues": model.total_issues,
            "code_reviews": model.total_code_reviews,
        },
    )
    return model
