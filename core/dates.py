# =============================================================================
# core/dates.py  -  Shared Date Helpers
# =============================================================================
#
# Pure formatting and calendar utilities.  The important one is
# date_range(): the crowd forecaster, the synthetic weather series and the
# live weather request all build their dates through it, so the two series
# that feed the scorer always cover the same calendar days.
# =============================================================================

from datetime import date, datetime, timedelta
from typing import Optional, Union

from core.errors import InvalidArgument

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string ("2026-10-20") into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidArgument(f"Not an ISO date: {value!r}") from exc
    raise InvalidArgument(f"Cannot interpret {value!r} as a date")


def date_range(days: int, start: Optional[DateLike] = None) -> list[date]:
    """Return `days` consecutive calendar dates beginning at `start` (default today).

    A non-positive `days` yields an empty list.
    """
    first = parse_date(start) if start is not None else date.today()
    return [first + timedelta(days=i) for i in range(max(0, days))]


def day_of_week(value: DateLike, short: bool = False) -> str:
    """'Tuesday', or 'Tue' when short=True."""
    return parse_date(value).strftime("%a" if short else "%A")


def format_date(value: DateLike) -> str:
    """'Tuesday, October 20, 2026'."""
    d = parse_date(value)
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_short_date(value: DateLike) -> str:
    """'Oct 20'."""
    d = parse_date(value)
    return f"{d:%b} {d.day}"


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    return parse_date(value) == (today or date.today())


def is_weekend(value: DateLike) -> bool:
    return parse_date(value).weekday() >= 5  # Saturday=5, Sunday=6
