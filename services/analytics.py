"""
Statistics over the local task collection.

Everything here is pure: the functions read a sequence of tasks plus the local
civil date "today" and return fresh values. Callers recompute on every render.
"""
from __future__ import annotations

import datetime as dt
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set

from core.dates import add_days, add_months, coerce_today, format_date, month_key, month_label
from core.models import Task

STREAK_LOOKBACK_DAYS = 365
HEATMAP_DAYS = 365
MONTHS_SHOWN = 6


@dataclass(frozen=True)
class MonthBucket:
    key: str    # YYYY-MM
    label: str  # "Oct 24"
    completed: int
    missed: int
    rate: int


@dataclass(frozen=True)
class HeatmapDay:
    date: str
    level: int


@dataclass
class Dashboard:
    total: int
    completed: int
    rate: int
    streak: int
    months: List[MonthBucket] = field(default_factory=list)
    overdue: List[Task] = field(default_factory=list)
    heatmap: List[HeatmapDay] = field(default_factory=list)


def percent(part: int, total: int) -> int:
    """Integer percentage, half rounds up; 0 for an empty total."""
    if total <= 0:
        return 0
    return int(math.floor(100 * part / total + 0.5))


def completion_rate(tasks: Sequence[Task]) -> int:
    return percent(sum(1 for t in tasks if t.done), len(tasks))


def _completed_days(tasks: Iterable[Task]) -> Set[str]:
    return {t.date for t in tasks if t.done}


def streak(tasks: Sequence[Task], today: Optional[dt.date] = None) -> int:
    """
    Consecutive days with at least one completed task, walking back from today.

    An empty today is forgiven (not counted, not breaking); the first empty
    past day ends the walk.
    """
    today = coerce_today(today)
    done_days = _completed_days(tasks)
    count = 0
    for i in range(STREAK_LOOKBACK_DAYS):
        if format_date(add_days(today, -i)) in done_days:
            count += 1
        elif i == 0:
            continue
        else:
            break
    return count


def monthly_consistency(tasks: Sequence[Task], today: Optional[dt.date] = None) -> List[MonthBucket]:
    today = coerce_today(today)
    buckets = []
    for i in range(MONTHS_SHOWN - 1, -1, -1):
        month = add_months(today, -i)
        prefix = month_key(month)
        in_month = [t for t in tasks if t.date.startswith(prefix)]
        completed = sum(1 for t in in_month if t.done)
        buckets.append(MonthBucket(
            key=prefix,
            label=month_label(month),
            completed=completed,
            missed=len(in_month) - completed,
            rate=percent(completed, len(in_month)),
        ))
    return buckets


def overdue_tasks(tasks: Sequence[Task], today: Optional[dt.date] = None) -> List[Task]:
    """Open tasks dated before today, most recently overdue first."""
    today_str = format_date(coerce_today(today))
    overdue = [t for t in tasks if not t.done and t.date < today_str]
    return sorted(overdue, key=lambda t: t.date, reverse=True)


def heatmap_level(count: int) -> int:
    if count > 6:
        return 3
    if count > 3:
        return 2
    if count > 0:
        return 1
    return 0


def heatmap(tasks: Sequence[Task], today: Optional[dt.date] = None) -> List[HeatmapDay]:
    today = coerce_today(today)
    per_day = Counter(t.date for t in tasks if t.done)
    days = []
    for i in range(HEATMAP_DAYS - 1, -1, -1):
        date_str = format_date(add_days(today, -i))
        days.append(HeatmapDay(date=date_str, level=heatmap_level(per_day[date_str])))
    return days


def build_dashboard(tasks: Sequence[Task], today: Optional[dt.date] = None) -> Dashboard:
    today = coerce_today(today)
    completed = sum(1 for t in tasks if t.done)
    return Dashboard(
        total=len(tasks),
        completed=completed,
        rate=percent(completed, len(tasks)),
        streak=streak(tasks, today),
        months=monthly_consistency(tasks, today),
        overdue=overdue_tasks(tasks, today),
        heatmap=heatmap(tasks, today),
    )
