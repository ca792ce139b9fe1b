"""Local civil date helpers. Dates travel as fixed-width YYYY-MM-DD strings."""
import datetime as dt
from typing import Optional

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def today_local() -> dt.date:
    # date.today() reads the local wall clock, not UTC
    return dt.date.today()


def format_date(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date(value: str) -> dt.date:
    return dt.date.fromisoformat(str(value)[:10])


def add_days(d: dt.date, days: int) -> dt.date:
    return d + dt.timedelta(days=days)


def add_months(d: dt.date, months: int) -> dt.date:
    """Shift by whole calendar months; the result is always the 1st."""
    index = d.year * 12 + (d.month - 1) + months
    return dt.date(index // 12, index % 12 + 1, 1)


def month_key(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def month_label(d: dt.date) -> str:
    """e.g. 'Oct 24'."""
    return f"{_MONTH_ABBR[d.month - 1]} {d.year % 100:02d}"


def coerce_today(today: Optional[dt.date]) -> dt.date:
    return today_local() if today is None else today
