"""Spaced-repetition reviews: turn notes due for review into tasks for the day."""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional, Sequence

from core.dates import format_date
from core.models import Log, OpResult, Task

logger = logging.getLogger(__name__)

REVIEW_PREFIX = "Review: "


def due_reviews(logs: Sequence[Log], today: dt.date) -> List[Log]:
    today_iso = format_date(today)
    return [l for l in logs if l.next_review_date and l.next_review_date[:10] <= today_iso]


def review_title(log: Log) -> str:
    return f"{REVIEW_PREFIX}{log.title}"


def already_scheduled(log: Log, tasks: Sequence[Task]) -> bool:
    """A review task for this note exists on or after its review date."""
    title = review_title(log)
    due = (log.next_review_date or "")[:10]
    return any(t.is_system_generated and t.title == title and t.date >= due for t in tasks)


class DailyReviews:
    """Materialize today's review tasks through the controller (optimistic + rollback)."""
    def __init__(self, controller):
        self.controller = controller

    async def prepare_today(self, today: Optional[dt.date] = None) -> int:
        if today is None:
            today = self.controller.today()
        today_iso = format_date(today)
        store = self.controller.store

        created = 0
        for log in due_reviews(store.logs, today):
            # one review per review date, not one per day after it
            if already_scheduled(log, store.tasks):
                continue
            result = await self.controller.create_task(
                review_title(log), date=today_iso, is_system_generated=True
            )
            if result is OpResult.CONFIRMED:
                created += 1
        logger.info("Prepared %d review task(s) for %s", created, today_iso)
        return created
