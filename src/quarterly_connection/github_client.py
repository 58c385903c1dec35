"""GitHub REST API client for pull request, issue and review activity."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any, Dict, List, Optional, Set, Tuple
from urllib.parse import urlparse

from .errors import ApiError, DecodeError, PartialDetailFailure
from .http_client import BaseClient, parse_timestamp
from .models import CodeReviewRecord, Contributions, DateRange, IssueRecord, PullRequestRecord

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


def extract_repo(url: Optional[str]) -> str:
    """Return ``owner/repo`` from a web URL like ``https://host/owner/repo/pull/1``.

    Malformed URLs yield an empty string rather than raising.
    """
    if not url:
        return ""
    parsed = urlparse(url)
    if not parsed.netloc:
        return ""
    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 2:
        return ""
    return f"{segments[0]}/{segments[1]}"


def split_repo(repo: str) -> Tuple[str, str]:
    owner, _, name = repo.partition("/")
    if not owner or not name:
        return "", ""
    return owner, name


def _count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


class GitHubClient(BaseClient):
    """Client for the GitHub search and pull request endpoints."""

    _SEARCH_PATH = "search/issues"
    _SEARCH_PAGE_SIZE = 100
    # GitHub search never returns more than 1000 results.
    _MAX_SEARCH_PAGES = 10

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        max_workers: int = 8,
        timeout_seconds: int = 30,
    ) -> None:
        """Initialize an authenticated GitHub client.

        Args:
            token: Personal access token sent as a bearer token.
            api_url: REST API root; override for GitHub Enterprise.
            max_workers: Upper bound on concurrent pull request detail requests.
            timeout_seconds: Per-request timeout in seconds.
        """
        super().__init__(
            api_url,
            token,
            timeout_seconds=timeout_seconds,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )
        self._max_workers = max(1, max_workers)

    def fetch_contributions(self, username: str, date_range: DateRange) -> Contributions:
        """Fetch pull requests, issues and code reviews for ``username``.

        Raises:
            TransportError: On network failures or timeouts.
            AuthError: When the token is rejected.
            DecodeError: When a search response does not match the expected schema.
        """
        logger.info("Fetching pull requests", extra={"username": username})
        pull_requests = self.fetch_pull_requests(username, date_range)

        logger.info("Fetching issues", extra={"username": username})
        issues = self.fetch_issues(username, date_range)

        logger.info("Fetching code reviews", extra={"username": username})
        code_reviews = self.fetch_code_reviews(username, date_range)

        return Contributions(
            pull_requests=pull_requests,
            issues=issues,
            code_reviews=code_reviews,
        )

    def search(self, query: str) -> List[Dict[str, Any]]:
        """Run an issue search and follow ``Link: rel="next"`` until exhausted."""
        items: List[Dict[str, Any]] = []
        path: Optional[str] = self._SEARCH_PATH
        params: Optional[Dict[str, Any]] = {"q": query, "per_page": self._SEARCH_PAGE_SIZE}
        pages = 0

        while path is not None:
            payload, next_url = self._get_page(path, params)
            page_items = payload.get("items")
            if not isinstance(page_items, list):
                raise DecodeError(f"GitHub search response is missing the 'items' array: q={query}")

            items.extend(page_items)
            pages += 1

            if payload.get("incomplete_results"):
                logger.warning("GitHub search returned incomplete results", extra={"query": query})

            if pages >= self._MAX_SEARCH_PAGES and next_url:
                logger.warning(
                    "Stopping GitHub search at the result ceiling",
                    extra={"query": query, "total_count": payload.get("total_count")},
                )
                break

            # The next link already carries the query string.
            path, params = next_url, None

        return items

    def _range_qualifier(self, date_range: DateRange) -> str:
        return f"{date_range.start_day}..{date_range.end_day}"

    def _required(self, item: Any, query: str) -> Tuple[int, str, str, str, datetime]:
        if not isinstance(item, dict):
            raise DecodeError(f"GitHub search item is not an object: q={query}")
        number = item.get("number")
        html_url = item.get("html_url")
        created_at = parse_timestamp(item.get("created_at"))
        if not isinstance(number, int) or not html_url or created_at is None:
            raise DecodeError(
                f"GitHub search item is missing number, html_url or created_at: q={query}"
            )
        return number, str(item.get("title") or ""), str(html_url), str(item.get("state") or ""), created_at

    def fetch_pull_requests(self, username: str, date_range: DateRange) -> List[PullRequestRecord]:
        """Fetch authored pull requests and enrich them with change statistics."""
        query = f"author:{username} type:pr created:{self._range_qualifier(date_range)}"
        pull_requests: List[PullRequestRecord] = []

        for item in self.search(query):
            number, title, url, state, created_at = self._required(item, query)
            pull_requests.append(
                PullRequestRecord(
                    number=number,
                    title=title,
                    url=url,
                    state=state,
                    created_at=created_at,
                    repo=extract_repo(url),
                    merged_at=self._merged_at(item),
                )
            )

        self._enrich_pull_requests(pull_requests)
        return pull_requests

    def _merged_at(self, item: Dict[str, Any]) -> Optional[datetime]:
        """Derive the merge timestamp from a search item.

        Prefers the explicit ``pull_request.merged_at`` value. Older servers omit
        that key, in which case a closed pull request is assumed merged; that
        fallback over-counts pull requests closed without merging.
        """
        linkage = item.get("pull_request")
        if not isinstance(linkage, dict):
            return None
        if "merged_at" in linkage:
            return parse_timestamp(linkage.get("merged_at"))
        return parse_timestamp(item.get("closed_at"))

    def fetch_pull_request_detail(self, repo: str, number: int) -> Dict[str, Any]:
        """Fetch ``/repos/{owner}/{repo}/pulls/{number}``.

        Raises:
            PartialDetailFailure: When the repository cannot be determined or the
                request fails for any API reason.
        """
        owner, name = split_repo(repo)
        if not owner:
            raise PartialDetailFailure(f"Cannot fetch details for #{number}: unknown repository")
        try:
            return self._get_json(f"repos/{owner}/{name}/pulls/{number}")
        except ApiError as exc:
            raise PartialDetailFailure(f"Detail fetch failed for {repo}#{number}: {exc}") from exc

    def _enrich_pull_requests(self, pull_requests: List[PullRequestRecord]) -> None:
        """Populate change statistics on each record using bounded fan-out.

        Results are applied by original index, so completion order never affects
        the returned ordering. A failed detail leaves that record's counters at 0.
        """
        if not pull_requests:
            return

        details: List[Optional[Dict[str, Any]]] = [None] * len(pull_requests)
        failures = 0

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(pull_requests))) as pool:
            futures = {
                pool.submit(self.fetch_pull_request_detail, pr.repo, pr.number): index
                for index, pr in enumerate(pull_requests)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    details[index] = future.result()
                except PartialDetailFailure as exc:
                    failures += 1
                    logger.warning("%s", exc, extra={"pr_url": pull_requests[index].url})

        for pr, detail in zip(pull_requests, details):
            if detail is None:
                continue
            pr.commits = _count(detail.get("commits"))
            pr.additions = _count(detail.get("additions"))
            pr.deletions = _count(detail.get("deletions"))
            pr.changed_files = _count(detail.get("changed_files"))
            if "merged_at" in detail:
                pr.merged_at = parse_timestamp(detail.get("merged_at"))

        logger.info(
            "Enriched pull requests",
            extra={"pull_requests": len(pull_requests), "detail_failures": failures},
        )

    def _issue_records(self, query: str) -> List[IssueRecord]:
        records: List[IssueRecord] = []
        for item in self.search(query):
            if isinstance(item, dict) and item.get("pull_request") is not None:
                continue
            number, title, url, state, created_at = self._required(item, query)
            records.append(
                IssueRecord(
                    number=number,
                    title=title,
                    url=url,
                    state=state,
                    created_at=created_at,
                    repo=extract_repo(url),
                    closed_at=parse_timestamp(item.get("closed_at")),
                )
            )
        return records

    def fetch_issues(self, username: str, date_range: DateRange) -> List[IssueRecord]:
        """Fetch issues authored by or involving ``username``.

        Authored issues come first; an issue matched by both searches is kept
        once, keyed by ``(repo, number)``.
        """
        window = self._range_qualifier(date_range)
        authored = self._issue_records(f"author:{username} type:issue created:{window}")
        involved = self._issue_records(
            f"involves:{username} type:issue updated:{window} -author:{username}"
        )

        seen: Set[Tuple[str, int]] = set()
        issues: List[IssueRecord] = []
        for issue in authored + involved:
            identity = (issue.repo, issue.number)
            if identity in seen:
                continue
            seen.add(identity)
            issues.append(issue)
        return issues

    def fetch_code_reviews(self, username: str, date_range: DateRange) -> List[CodeReviewRecord]:
        """Fetch pull requests reviewed by ``username`` that they did not author."""
        query = (
            f"reviewed-by:{username} type:pr reviewed:{self._range_qualifier(date_range)} "
            f"-author:{username}"
        )
        reviews: List[CodeReviewRecord] = []
        for item in self.search(query):
            number, title, url, state, created_at = self._required(item, query)
            reviews.append(
                CodeReviewRecord(
                    pr_number=number,
                    pr_title=title,
                    url=url,
                    state=state,
                    created_at=created_at,
                    repo=extract_repo(url),
                )
            )
        return reviews
