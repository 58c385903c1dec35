"""HTML rendering of report models."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape

from .models import ReportModel

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "report.html.j2"


def _format_date(value: Optional[datetime], fmt: str = "%Y-%m-%d") -> str:
    if value is None:
        return ""
    return value.strftime(fmt)


def _format_points(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value:.1f}"


def _build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("quarterly_connection", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["date"] = _format_date
    env.filters["points"] = _format_points
    return env


_ENVIRONMENT = _build_environment()


def report_filename(model: ReportModel) -> str:
    return f"{model.associate_name}_{model.quarter}_{model.year}.html"


def render_report(model: ReportModel) -> str:
    """Render ``model`` into a standalone HTML document."""
    template = _ENVIRONMENT.get_template(TEMPLATE_NAME)
    return template.render(report=model)


def write_report(model: ReportModel, output_dir: Union[str, Path]) -> Path:
    """Render ``model`` and write it below ``output_dir``.

    The directory is created when missing. Returns the written file path.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / report_filename(model)
    path.write_text(render_report(model), encoding="utf-8")
    logger.debug("Wrote report", extra={"path": str(path)})
    return path
