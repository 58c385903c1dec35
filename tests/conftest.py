"""Shared fixtures for report model tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quarterly_connection.models import (
    Associate,
    CodeReviewRecord,
    Contributions,
    IssueRecord,
    PullRequestRecord,
    TrackerTicket,
)


def _utc(month: int, day: int) -> datetime:
    return datetime(2024, month, day, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def associate() -> Associate:
    return Associate(name="jdoe", jira_username="jdoe", github_username="jdoe-gh", full_name="Jane Doe")


@pytest.fixture
def tickets() -> list:
    return [
        TrackerTicket(key="ABC-1", summary="Ship it", status="Done", type="Story", story_points=3.0,
                      resolved=_utc(5, 1)),
        TrackerTicket(key="ABC-2", summary="Fix <script>", status="Closed", type="Bug"),
    ]


@pytest.fixture
def contributions() -> Contributions:
    return Contributions(
        pull_requests=[
            PullRequestRecord(number=7, title="Add endpoint", url="https://github.com/acme/api/pull/7",
                              state="closed", created_at=_utc(4, 10), repo="acme/api",
                              merged_at=_utc(4, 12), commits=3, additions=10, deletions=2, changed_files=4),
        ],
        issues=[
            IssueRecord(number=4, title="Crash on start", url="https://github.com/acme/web/issues/4",
                        state="open", created_at=_utc(4, 15), repo="acme/web"),
        ],
        code_reviews=[
            CodeReviewRecord(pr_number=11, pr_title="Refactor", url="https://github.com/acme/api/pull/11",
                             state="open", created_at=_utc(5, 2), repo="acme/api"),
        ],
    )
