"""Plain-text summary of a report model for console output.

This module provides utilities for:
- Formatting story-point totals, including the "no estimate" case.
- Building a human-readable digest of the Jira and GitHub report figures.
"""

from __future__ import annotations

from .models import ReportModel


def format_story_points(total: float, estimated_tickets: int) -> str:
    """Format a story-point total.

    Returns ``"n/a"`` when no ticket carried an estimate, so an unestimated
    quarter is distinguishable from one whose estimates sum to zero.
    """
    if estimated_tickets == 0:
        return "n/a"
    if float(total).is_integer():
        return f"{int(total)}"
    return f"{total:.1f}"


def format_summary(model: ReportModel) -> str:
    """Generate a human-readable summary for a report model.

    Args:
        model: Fully built report model.

    Returns:
        Formatted multi-line text summary.
    """
    points = format_story_points(model.total_story_points, model.tickets_with_story_points)

    lines = [
        f"Associate: {model.display_name}",
        f"Period: {model.quarter} {model.year} ({model.period.start_day} to {model.period.end_day})",
        "",
        "1) Jira",
        f"   Tickets completed: {model.total_tickets}",
        f"   Story points: {points} ({model.tickets_with_story_points} estimated)",
        "",
        "2) GitHub",
        f"   Pull requests: {model.total_pull_requests} ({model.merged_pull_requests} merged)",
        f"   Commits: {model.total_commits}",
        f"   Lines: +{model.total_lines_added} / -{model.total_lines_deleted}"
        f" across {model.total_changed_files} files",
        f"   Issues: {model.total_issues} ({model.closed_issues} closed)",
        f"   Code reviews: {model.total_code_reviews}",
        f"   Repositories: {model.unique_repositories}",
    ]

    return "\n".join(lines)
