"""Domain models for quarterly connection report data.

Records are normalized at the client boundary: optional wire fields become
``None`` and numeric unions become a single type before reaching these classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive UTC reporting period."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("DateRange start must not be after end.")

    @property
    def start_day(self) -> str:
        return self.start.strftime("%Y-%m-%d")

    @property
    def end_day(self) -> str:
        return self.end.strftime("%Y-%m-%d")


@dataclass(slots=True)
class Associate:
    """Represents one person listed in the configuration file."""

    name: str
    jira_username: str
    github_username: str
    full_name: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or self.name


@dataclass(slots=True)
class TrackerTicket:
    """Represents a Jira ticket resolved within the report period."""

    key: str
    summary: str
    status: str
    type: str
    priority: Optional[str] = None
    story_points: Optional[float] = None
    assignee: str = ""
    reporter: str = ""
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    resolved: Optional[datetime] = None

    @property
    def has_story_points(self) -> bool:
        return self.story_points is not None


@dataclass(slots=True)
class PullRequestRecord:
    """Represents a pull request authored by the associate."""

    number: int
    title: str
    url: str
    state: str
    created_at: datetime
    repo: str
    merged_at: Optional[datetime] = None
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


@dataclass(slots=True)
class IssueRecord:
    """Represents a GitHub issue authored by or involving the associate."""

    number: int
    title: str
    url: str
    state: str
    created_at: datetime
    repo: str
    closed_at: Optional[datetime] = None

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None


@dataclass(slots=True)
class CodeReviewRecord:
    """Represents a pull request reviewed by the associate."""

    pr_number: int
    pr_title: str
    url: str
    state: str
    created_at: datetime
    repo: str


@dataclass(slots=True)
class Contributions:
    """All GitHub activity fetched for one associate."""

    pull_requests: List[PullRequestRecord] = field(default_factory=list)
    issues: List[IssueRecord] = field(default_factory=list)
    code_reviews: List[CodeReviewRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ReportModel:
    """Aggregated report data handed to the renderer."""

    associate_name: str
    display_name: str
    quarter: str
    year: int
    period: DateRange
    jira_url: str
    generated_at: datetime

    tickets: Tuple[TrackerTicket, ...]
    pull_requests: Tuple[PullRequestRecord, ...]
    issues: Tuple[IssueRecord, ...]
    code_reviews: Tuple[CodeReviewRecord, ...]

    total_tickets: int
    tickets_with_story_points: int
    total_story_points: float
    total_pull_requests: int
    merged_pull_requests: int
    total_issues: int
    closed_issues: int
    total_code_reviews: int
    total_commits: int
    total_lines_added: int
    total_lines_deleted: int
    total_changed_files: int
    unique_repositories: int
