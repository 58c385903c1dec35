"""Tests for GitHub search pagination, normalization and detail enrichment."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quarterly_connection.errors import ApiError, DecodeError, PartialDetailFailure, TransportError
from quarterly_connection.github_client import GitHubClient, extract_repo, split_repo
from quarterly_connection.quarters import get_quarter_dates

Q2 = get_quarter_dates("Q2", 2024)


def _build_client() -> GitHubClient:
    return GitHubClient("gh-token", max_workers=4)


def _item(number: int, repo: str = "acme/api", kind: str = "pull", **overrides) -> dict:
    item = {
        "number": number,
        "title": f"Item {number}",
        "html_url": f"https://github.com/{repo}/{kind}/{number}",
        "state": "closed",
        "created_at": "2024-04-10T12:00:00Z",
        "closed_at": None,
    }
    item.update(overrides)
    return item


def _pr_item(number: int, repo: str = "acme/api", merged_at=None, **overrides) -> dict:
    return _item(number, repo, "pull", pull_request={"url": "x", "merged_at": merged_at}, **overrides)


def _page(items, next_url=None):
    return {"total_count": len(items), "incomplete_results": False, "items": items}, next_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://github.com/acme/api/pull/12", "acme/api"),
        ("https://ghe.example.com/team/service/issues/3", "team/service"),
        ("https://github.com/acme/api", "acme/api"),
        ("https://github.com/acme", ""),
        ("not a url", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_extract_repo(url, expected):
    """Verify owner/repo extraction and empty fallback for malformed URLs."""
    assert extract_repo(url) == expected


def test_split_repo():
    """Verify owner/repo splitting rejects identifiers without both halves."""
    assert split_repo("acme/api") == ("acme", "api")
    assert split_repo("") == ("", "")
    assert split_repo("acme/") == ("", "")


def test_search_follows_next_links_until_exhausted():
    """Verify search pagination follows Link rel=next URLs and concatenates items."""
    client = _build_client()
    client._get_page = Mock(
        side_effect=[
            _page([_item(1), _item(2)], next_url="https://api.github.com/search/issues?page=2"),
            _page([_item(3)]),
        ]
    )

    items = client.search("author:jdoe type:pr")

    assert [item["number"] for item in items] == [1, 2, 3]
    first_call, second_call = client._get_page.call_args_list
    assert first_call.args == ("search/issues", {"q": "author:jdoe type:pr", "per_page": 100})
    assert second_call.args == ("https://api.github.com/search/issues?page=2", None)


def test_search_stops_at_result_ceiling():
    """Verify search stops after the maximum page count even if more pages are linked."""
    client = _build_client()
    client._get_page = Mock(return_value=_page([_item(1)], next_url="https://api.github.com/next"))

    items = client.search("q")

    assert client._get_page.call_count == client._MAX_SEARCH_PAGES
    assert len(items) == client._MAX_SEARCH_PAGES


def test_search_missing_items_raises_decode_error():
    """Verify a search payload without items is a DecodeError."""
    client = _build_client()
    client._get_page = Mock(return_value=({"message": "Validation Failed"}, None))

    with pytest.raises(DecodeError):
        client.search("q")


def test_fetch_pull_requests_builds_query_and_populates_statistics():
    """Verify authored PRs are queried by creation window and enriched from the detail endpoint."""
    client = _build_client()
    client._get_page = Mock(
        return_value=_page([_pr_item(7, merged_at="2024-04-12T08:00:00Z", closed_at="2024-04-12T08:00:00Z")])
    )
    client._get_json = Mock(
        return_value={"commits": 3, "additions": 10, "deletions": 2, "changed_files": 4,
                      "merged_at": "2024-04-12T08:00:00Z"}
    )

    (pr,) = client.fetch_pull_requests("jdoe", Q2)

    assert client._get_page.call_args.args[1]["q"] == "author:jdoe type:pr created:2024-04-01..2024-06-30"
    client._get_json.assert_called_once_with("repos/acme/api/pulls/7")
    assert pr.repo == "acme/api"
    assert (pr.commits, pr.additions, pr.deletions, pr.changed_files) == (3, 10, 2, 4)
    assert pr.merged_at == datetime(2024, 4, 12, 8, 0, 0, tzinfo=timezone.utc)


def test_fetch_pull_requests_closed_unmerged_uses_explicit_merge_field():
    """Verify a closed PR whose linkage reports no merge is not treated as merged."""
    client = _build_client()
    client._get_page = Mock(return_value=_page([_pr_item(8, closed_at="2024-04-20T00:00:00Z")]))
    client._get_json = Mock(return_value={"commits": 1, "additions": 1, "deletions": 1, "changed_files": 1})

    (pr,) = client.fetch_pull_requests("jdoe", Q2)

    assert pr.merged_at is None
    assert pr.is_merged is False


def test_fetch_pull_requests_infers_merge_from_close_without_merge_field():
    """Verify linkage without merged_at falls back to the closed timestamp."""
    client = _build_client()
    item = _item(9, closed_at="2024-04-20T00:00:00Z", pull_request={"url": "x"})
    client._get_page = Mock(return_value=_page([item]))
    client._get_json = Mock(side_effect=TransportError("down"))

    (pr,) = client.fetch_pull_requests("jdoe", Q2)

    assert pr.merged_at == datetime(2024, 4, 20, 0, 0, 0, tzinfo=timezone.utc)


def test_detail_failure_is_isolated_to_one_pull_request():
    """Verify one failed detail fetch leaves zeros only on that PR and preserves order."""
    client = _build_client()
    client._get_page = Mock(return_value=_page([_pr_item(1), _pr_item(2), _pr_item(3, repo="acme/web")]))

    def _detail(path):
        if path.endswith("/pulls/2"):
            raise ApiError("boom")
        number = int(path.rsplit("/", 1)[1])
        return {"commits": number, "additions": number * 10, "deletions": number, "changed_files": None}

    client._get_json = Mock(side_effect=_detail)

    prs = client.fetch_pull_requests("jdoe", Q2)

    assert [pr.number for pr in prs] == [1, 2, 3]
    assert (prs[0].commits, prs[0].additions) == (1, 10)
    assert (prs[1].commits, prs[1].additions, prs[1].deletions) == (0, 0, 0)
    assert (prs[2].commits, prs[2].additions) == (3, 30)
    assert prs[2].changed_files == 0


def test_fetch_pull_request_detail_without_repo_raises_partial_failure():
    """Verify records without a parseable repository skip the detail request."""
    client = _build_client()
    client._get_json = Mock()

    with pytest.raises(PartialDetailFailure):
        client.fetch_pull_request_detail("", 5)

    client._get_json.assert_not_called()


def test_fetch_issues_skips_pull_requests_and_dedupes_across_queries():
    """Verify PR hits are dropped and an issue matched by both searches appears once."""
    client = _build_client()
    shared = _item(4, kind="issues", closed_at="2024-05-01T00:00:00Z")
    client._get_page = Mock(
        side_effect=[
            _page([shared, _pr_item(5)]),
            _page([dict(shared), _item(6, repo="acme/web", kind="issues", state="open")]),
        ]
    )

    issues = client.fetch_issues("jdoe", Q2)

    assert [(issue.repo, issue.number) for issue in issues] == [("acme/api", 4), ("acme/web", 6)]
    assert issues[0].is_closed is True
    assert issues[1].is_closed is False
    queries = [call.args[1]["q"] for call in client._get_page.call_args_list]
    assert queries == [
        "author:jdoe type:issue created:2024-04-01..2024-06-30",
        "involves:jdoe type:issue updated:2024-04-01..2024-06-30 -author:jdoe",
    ]


def test_fetch_code_reviews_keeps_every_hit():
    """Verify review hits become records without deduplication."""
    client = _build_client()
    client._get_page = Mock(return_value=_page([_pr_item(11, repo="other/lib"), _pr_item(11, repo="other/lib")]))

    reviews = client.fetch_code_reviews("jdoe", Q2)

    assert len(reviews) == 2
    assert reviews[0].pr_number == 11
    assert reviews[0].repo == "other/lib"
    assert client._get_page.call_args.args[1]["q"] == (
        "reviewed-by:jdoe type:pr reviewed:2024-04-01..2024-06-30 -author:jdoe"
    )


def test_search_item_missing_number_raises_decode_error():
    """Verify search items without required fields are a DecodeError."""
    client = _build_client()
    client._get_page = Mock(return_value=_page([{"title": "x", "html_url": "https://github.com/a/b/pull/1"}]))

    with pytest.raises(DecodeError):
        client.fetch_code_reviews("jdoe", Q2)
