"""Shared HTTP plumbing for the Jira and GitHub REST clients."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import requests

from .errors import ApiError, AuthError, DecodeError, TransportError

logger = logging.getLogger(__name__)

_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")
_PREVIEW_LENGTH = 200


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO8601 timestamp into a UTC datetime.

    Accepts ``Z``, ``+HH:MM`` and Jira's compact ``+HHMM`` offsets. Empty or
    unparsable values yield ``None`` instead of raising, so a single bad field
    never discards a whole batch.
    """
    if not value or not isinstance(value, str):
        return None

    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    normalized = _COMPACT_OFFSET.sub(r"\1:\2", normalized)

    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        logger.debug("Ignoring unparsable timestamp", extra={"value": value})
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _preview(text: str) -> str:
    if len(text) > _PREVIEW_LENGTH:
        return text[:_PREVIEW_LENGTH] + "..."
    return text


class BaseClient:
    """Thin ``requests.Session`` wrapper that maps failures onto API errors."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout_seconds: int = 30,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        self._session.headers.update(headers or {})
        self._session.headers["Authorization"] = f"Bearer {token}"

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "BaseClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_url(self, path: str) -> str:
        """Build a fully qualified URL; absolute URLs pass through unchanged."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _request(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Execute a GET request and raise on transport or HTTP failures.

        Raises:
            TransportError: On timeouts, connection failures and other
                transport-level problems.
            AuthError: On HTTP 401 or 403.
            ApiError: On any other HTTP status >= 400.
        """
        try:
            response = self._session.get(url, params=params, timeout=self._timeout_seconds)
        except requests.Timeout as exc:
            raise TransportError(
                f"Request timed out after {self._timeout_seconds}s: GET {url}"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request failed: GET {url}: {exc}") from exc

        status_code = response.status_code
        if status_code in (401, 403):
            raise AuthError(
                f"Credentials rejected (status {status_code}): GET {url} - {_preview(response.text)}"
            )
        if status_code >= 400:
            raise ApiError(f"API request failed: GET {url} returned {status_code} - {_preview(response.text)}")

        return response

    def _decode(self, response: requests.Response, url: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(
                f"API returned invalid JSON: GET {url}\nResponse preview: {_preview(response.text)}"
            ) from exc

        if not isinstance(payload, dict):
            raise DecodeError(f"API returned unexpected payload shape: GET {url}")

        return payload

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET ``path`` and return the decoded JSON object."""
        url = self._build_url(path)
        response = self._request(url, params)
        return self._decode(response, url)

    def _get_page(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        """GET one page and return its payload plus the ``rel="next"`` link, if any."""
        url = self._build_url(path)
        response = self._request(url, params)
        next_url = (response.links or {}).get("next", {}).get("url")
        return self._decode(response, url), next_url
