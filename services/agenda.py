"""Day view: which tasks show for a selected date and in what order."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from core.dates import add_days, coerce_today, format_date, parse_date
from core.models import Task
from services.analytics import completion_rate

PRIORITY_WEIGHT = {"high": 3, "medium": 2, "low": 1}


def shift_day(selected: str, days: int) -> str:
    return format_date(add_days(parse_date(selected), days))


def _sort_key(task: Task):
    # open first, then priority high->low, then newest id first
    return (task.done, -PRIORITY_WEIGHT.get(task.priority or "low", 1), -task.id)


def visible_tasks(tasks: Sequence[Task], selected: str, today: Optional[dt.date] = None) -> List[Task]:
    """Today also carries open tasks left over from earlier days."""
    is_today = selected == format_date(coerce_today(today))
    if is_today:
        shown = [t for t in tasks if t.date == selected or (not t.done and t.date < selected)]
    else:
        shown = [t for t in tasks if t.date == selected]
    return sorted(shown, key=_sort_key)


def day_progress(tasks: Sequence[Task], selected: str, today: Optional[dt.date] = None) -> int:
    return completion_rate(visible_tasks(tasks, selected, today))
