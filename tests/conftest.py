from __future__ import annotations

import datetime as dt

import pytest

from controller.app_controller import AppController
from core.models import Log, Task
from core.state import AppStore
from storage.local import DraftStore

from .fakes import FakeNotifier, FakeRemoteStore

TODAY = dt.date(2024, 3, 15)


@pytest.fixture()
def seed_tasks() -> list[Task]:
    return [
        Task(id=3, title="Write report", done=False, date="2024-03-15", priority="high"),
        Task(id=2, title="Gym", done=True, date="2024-03-14"),
        Task(id=1, title="Call bank", done=False, date="2024-03-10", priority="low"),
    ]


@pytest.fixture()
def seed_logs() -> list[Log]:
    return [
        Log(id=7, title="Goals", content="5 words per day", tags=["goals"],
            created_at=1_700_000_000_000, next_review_date="2024-03-15"),
    ]


@pytest.fixture()
def remote(seed_tasks, seed_logs) -> FakeRemoteStore:
    return FakeRemoteStore(seed_tasks, seed_logs)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def store(seed_tasks, seed_logs) -> AppStore:
    store = AppStore()
    store.set_tasks(list(seed_tasks))
    store.set_logs(list(seed_logs))
    return store


@pytest.fixture()
def controller(remote, store, notifier, tmp_path) -> AppController:
    return AppController(
        remote,
        store,
        notifier,
        drafts=DraftStore(tmp_path / "drafts.json"),
        today=lambda: TODAY,
    )
