"""Configuration loading and validation for the quarterly connection reports.

Usage:
    config = load_config("config.yaml")            # raises ConfigurationError
    associates = select_associates(config, "jdoe")  # or None for everyone
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .github_client import DEFAULT_API_URL
from .jira_client import DEFAULT_STORY_POINTS_FIELD
from .models import Associate


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the report generator."""

    jira_url: str
    jira_token: str
    github_token: str
    associates: Dict[str, Associate] = field(default_factory=dict)
    story_points_field: str = DEFAULT_STORY_POINTS_FIELD
    github_api_url: str = DEFAULT_API_URL


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    return value if isinstance(value, dict) else {}


def _parse_associates(raw: Any, errors: List[str]) -> Dict[str, Associate]:
    if not isinstance(raw, dict) or not raw:
        errors.append("  - 'associates' mapping is empty; add at least one associate")
        return {}

    associates: Dict[str, Associate] = {}
    for name, info in raw.items():
        if not isinstance(info, dict):
            errors.append(f"  - associate '{name}' must be a mapping")
            continue

        jira_username = str(info.get("jira_username") or "").strip()
        github_username = str(info.get("github_username") or "").strip()
        if not jira_username:
            errors.append(f"  - associate '{name}' is missing 'jira_username'")
        if not github_username:
            errors.append(f"  - associate '{name}' is missing 'github_username'")

        associates[str(name)] = Associate(
            name=str(name),
            jira_username=jira_username,
            github_username=github_username,
            full_name=str(info.get("full_name") or "").strip(),
        )

    return associates


def load_config(config_path: str = "config.yaml") -> Config:
    """Load and validate configuration from a YAML file.

    Environment variables ``JIRA_URL``, ``JIRA_TOKEN`` and ``GITHUB_TOKEN``
    override file values.

    Raises:
        ConfigurationError: If the file is missing, malformed, or required
            fields are absent. All problems are reported together.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: '{config_path}'")

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse '{config_path}': {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"'{config_path}' must be a YAML mapping at the top level.")

    jira = _section(raw, "jira")
    github = _section(raw, "github")

    jira_url = str(os.environ.get("JIRA_URL") or jira.get("url") or "").strip()
    jira_token = str(os.environ.get("JIRA_TOKEN") or jira.get("token") or "").strip()
    github_token = str(os.environ.get("GITHUB_TOKEN") or github.get("token") or "").strip()

    errors: List[str] = []
    if not jira_url:
        errors.append("  - 'jira.url' is missing (or set the JIRA_URL environment variable)")
    if not jira_token:
        errors.append("  - 'jira.token' is missing (or set the JIRA_TOKEN environment variable)")
    if not github_token:
        errors.append("  - 'github.token' is missing (or set the GITHUB_TOKEN environment variable)")

    associates = _parse_associates(raw.get("associates"), errors)

    if errors:
        raise ConfigurationError("Invalid configuration:\n" + "\n".join(errors))

    return Config(
        jira_url=jira_url.rstrip("/"),
        jira_token=jira_token,
        github_token=github_token,
        associates=associates,
        story_points_field=str(jira.get("story_points_field") or DEFAULT_STORY_POINTS_FIELD),
        github_api_url=str(github.get("api_url") or DEFAULT_API_URL),
    )


def select_associates(config: Config, name: Optional[str] = None) -> List[Associate]:
    """Return the named associate, or every configured associate in file order.

    Raises:
        ConfigurationError: If ``name`` is not present in the configuration.
    """
    if name:
        if name not in config.associates:
            available = ", ".join(config.associates) or "(none configured)"
            raise ConfigurationError(
                f"Associate '{name}' not found in config file. Available: {available}"
            )
        return [config.associates[name]]

    return list(config.associates.values())
