from __future__ import annotations

import datetime as dt

import pytest

from core.models import Log, Task
from services.review_service import DailyReviews, already_scheduled, due_reviews, review_title

TODAY = dt.date(2024, 3, 15)


def test_due_reviews_include_overdue_and_today() -> None:
    logs = [
        Log(id=1, title="past", next_review_date="2024-03-01"),
        Log(id=2, title="today", next_review_date="2024-03-15"),
        Log(id=3, title="future", next_review_date="2024-03-16"),
        Log(id=4, title="never"),
    ]
    assert [l.id for l in due_reviews(logs, TODAY)] == [1, 2]


def test_review_before_the_due_date_does_not_count() -> None:
    log = Log(id=1, title="Goals", next_review_date="2024-03-15")
    earlier = Task(id=5, title="Review: Goals", done=True, date="2024-03-01", is_system_generated=True)
    manual = Task(id=6, title="Review: Goals", done=False, date="2024-03-15")
    assert not already_scheduled(log, [earlier, manual])
    later = Task(id=7, title="Review: Goals", done=False, date="2024-03-16", is_system_generated=True)
    assert already_scheduled(log, [later])


@pytest.mark.asyncio
async def test_prepare_today_creates_review_tasks_once(controller, store, remote) -> None:
    created = await DailyReviews(controller).prepare_today()
    assert created == 1

    review = store.tasks[0]
    assert review.title == review_title(store.get_log(7))
    assert review.is_system_generated is True
    assert review.date == "2024-03-15"
    assert remote.tasks[review.id].is_system_generated is True

    assert await DailyReviews(controller).prepare_today() == 0
    assert sum(1 for t in store.tasks if t.is_system_generated) == 1


@pytest.mark.asyncio
async def test_due_note_is_not_rescheduled_on_following_days(controller, store) -> None:
    reviews = DailyReviews(controller)
    for day in (15, 16, 17):
        await reviews.prepare_today(dt.date(2024, 3, day))

    scheduled = [(t.title, t.date) for t in store.tasks if t.is_system_generated]
    assert scheduled == [("Review: Goals", "2024-03-15")]


@pytest.mark.asyncio
async def test_moving_the_review_date_schedules_a_new_review(controller, store) -> None:
    reviews = DailyReviews(controller)
    await reviews.prepare_today(TODAY)
    store.replace_log(7, Log(id=7, title="Goals", next_review_date="2024-03-20"))

    assert await reviews.prepare_today(dt.date(2024, 3, 20)) == 1
    dates = sorted(t.date for t in store.tasks if t.is_system_generated)
    assert dates == ["2024-03-15", "2024-03-20"]


@pytest.mark.asyncio
async def test_prepare_today_counts_only_confirmed_tasks(controller, store, remote, notifier) -> None:
    remote.fail_on.add("create_task")
    assert await DailyReviews(controller).prepare_today() == 0
    assert not any(t.is_system_generated for t in store.tasks)
    assert notifier.errors


def test_review_service_uses_the_core_result_type() -> None:
    import controller.app_controller as app_controller
    import services.review_service as review_service
    from core.models import OpResult

    assert review_service.OpResult is OpResult
    assert app_controller.OpResult is OpResult
    assert not hasattr(review_service, "AppController")
