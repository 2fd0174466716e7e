# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Period arithmetic — pure date helpers.
A period is one week identified by its Monday, as ``YYYY-MM-DD``.
"""

from datetime import date, datetime, timedelta
from typing import Union

DateLike = Union[str, date, datetime]


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def period_start(value: DateLike) -> str:
    """Return the canonical Monday of the week containing ``value``."""
    d = _as_date(value)
    return (d - timedelta(days=d.weekday())).isoformat()


def add_periods(start: str, count: int) -> str:
    return (_as_date(start) + timedelta(weeks=count)).isoformat()


def visit_date(start: str, day_of_week: int) -> date:
    """Date of the visit inside a period.

    ``day_of_week`` counts from Sunday (0) so Monday (1) lands on the
    period start and Sunday lands on its last day.
    """
    offset = (day_of_week - 1) % 7
    return _as_date(start) + timedelta(days=offset)
