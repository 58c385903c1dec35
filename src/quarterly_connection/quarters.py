"""Calendar quarter to UTC date range resolution."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, Tuple

from .errors import InvalidQuarter
from .models import DateRange

# (start month, end month, last day of end month)
_QUARTERS: Dict[str, Tuple[int, int, int]] = {
    "Q1": (1, 3, 31),
    "Q2": (4, 6, 30),
    "Q3": (7, 9, 30),
    "Q4": (10, 12, 31),
}


def normalize_quarter(quarter: str) -> str:
    """Return the canonical quarter label (``Q1``..``Q4``).

    Raises:
        InvalidQuarter: If ``quarter`` is not a recognized label.
    """
    label = (quarter or "").strip().upper()
    if label not in _QUARTERS:
        raise InvalidQuarter(f"Invalid quarter: {quarter!r} (must be Q1, Q2, Q3, or Q4)")
    return label


def get_quarter_dates(quarter: str, year: int) -> DateRange:
    """Resolve a quarter label and year into an inclusive UTC date range.

    The range starts on the first day of the quarter at 00:00:00 and ends on
    its last day at 23:59:59. Any year is accepted.

    Raises:
        InvalidQuarter: If ``quarter`` is not one of ``Q1``..``Q4``.
    """
    start_month, end_month, end_day = _QUARTERS[normalize_quarter(quarter)]
    return DateRange(
        start=datetime(year, start_month, 1, 0, 0, 0, tzinfo=timezone.utc),
        end=datetime(year, end_month, end_day, 23, 59, 59, tzinfo=timezone.utc),
    )
