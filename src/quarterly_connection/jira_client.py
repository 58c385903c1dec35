"""Jira REST API client for resolved-ticket retrieval."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import DecodeError, IncompleteResult
from .http_client import BaseClient, parse_timestamp
from .models import DateRange, TrackerTicket

logger = logging.getLogger(__name__)

DEFAULT_STORY_POINTS_FIELD = "customfield_12310243"
DONE_STATUSES = ("Done", "Closed", "Resolved")


def parse_story_points(value: Any) -> Optional[float]:
    """Normalize the story-points custom field into ``Optional[float]``.

    Jira returns the field as an integer, a float, ``null`` or not at all
    depending on the instance schema. Anything that is not a real number is
    treated as "no estimate".
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _name(value: Any, key: str = "name") -> str:
    if isinstance(value, dict):
        return str(value.get(key) or "")
    return ""


class JiraClient(BaseClient):
    """Typed client for the Jira ``/rest/api/2/search`` endpoint."""

    _SEARCH_PATH = "rest/api/2/search"
    _PAGE_SIZE = 1000

    def __init__(
        self,
        base_url: str,
        token: str,
        story_points_field: str = DEFAULT_STORY_POINTS_FIELD,
        timeout_seconds: int = 30,
    ) -> None:
        """Initialize an authenticated Jira client.

        Args:
            base_url: Jira server URL, e.g. ``https://issues.example.com``.
            token: Personal access token sent as a bearer token.
            story_points_field: Custom field id that holds story points.
            timeout_seconds: Per-request timeout in seconds.
        """
        super().__init__(base_url, token, timeout_seconds=timeout_seconds)
        self._story_points_field = story_points_field

    def build_jql(self, username: str, date_range: DateRange) -> str:
        statuses = ", ".join(DONE_STATUSES)
        return (
            f'assignee = "{username}" AND status in ({statuses}) '
            f'AND resolved >= "{date_range.start_day}" AND resolved <= "{date_range.end_day}" '
            "ORDER BY resolved DESC"
        )

    def _fields(self) -> str:
        return ",".join(
            [
                "summary",
                "status",
                "issuetype",
                "priority",
                "assignee",
                "reporter",
                self._story_points_field,
                "created",
                "updated",
                "resolutiondate",
            ]
        )

    def fetch_completed_tickets(self, username: str, date_range: DateRange) -> List[TrackerTicket]:
        """Fetch tickets assigned to ``username`` and resolved within ``date_range``.

        Resolution dates are compared by calendar day. When the server reports a
        ``total`` larger than one page, subsequent pages are requested with
        ``startAt`` until every ticket has been collected.

        Raises:
            TransportError: On network failures or timeouts.
            AuthError: When the token is rejected.
            DecodeError: When the response does not match the search schema.
            IncompleteResult: When the server reports more tickets than it returns.
        """
        jql = self.build_jql(username, date_range)
        tickets: List[TrackerTicket] = []
        start_at = 0

        while True:
            payload = self._get_json(
                self._SEARCH_PATH,
                params={
                    "jql": jql,
                    "startAt": start_at,
                    "maxResults": self._PAGE_SIZE,
                    "fields": self._fields(),
                },
            )

            items = payload.get("issues")
            if not isinstance(items, list):
                raise DecodeError("Jira search response is missing the 'issues' array.")

            tickets.extend(self._parse_ticket(item) for item in items)

            total = payload.get("total")
            if not isinstance(total, int) or len(tickets) >= total:
                break
            if not items:
                raise IncompleteResult(
                    f"Jira reported {total} tickets for {username} but returned only {len(tickets)}."
                )
            start_at = len(tickets)

        logger.info(
            "Fetched Jira tickets",
            extra={
                "username": username,
                "tickets": len(tickets),
                "with_story_points": sum(1 for ticket in tickets if ticket.has_story_points),
            },
        )
        return tickets

    def _parse_ticket(self, item: Any) -> TrackerTicket:
        if not isinstance(item, dict) or not item.get("key") or not isinstance(item.get("fields"), dict):
            raise DecodeError(f"Jira issue payload is missing 'key' or 'fields': {item!r:.200}")

        fields: Dict[str, Any] = item["fields"]
        priority = _name(fields.get("priority")) or None

        return TrackerTicket(
            key=str(item["key"]),
            summary=str(fields.get("summary") or ""),
            status=_name(fields.get("status")),
            type=_name(fields.get("issuetype")),
            priority=priority,
            story_points=parse_story_points(fields.get(self._story_points_field)),
            assignee=_name(fields.get("assignee"), "displayName"),
            reporter=_name(fields.get("reporter"), "displayName"),
            created=parse_timestamp(fields.get("created")),
            updated=parse_timestamp(fields.get("updated")),
            resolved=parse_timestamp(fields.get("resolutiondate")),
        )
