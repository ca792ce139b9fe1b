"""Explicitly owned application state: the local source of truth for the UI."""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from core.models import AppData, Log, Task, UserSettings


class AppStore:
    def __init__(self, data: Optional[AppData] = None):
        data = data or AppData()
        self._tasks: List[Task] = list(data.tasks)
        self._logs: List[Log] = list(data.logs)
        self._settings: UserSettings = data.settings
        self._listeners: List[Callable[[AppStore], None]] = []

    def subscribe(self, listener: Callable[[AppStore], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---------- read ----------
    @property
    def tasks(self) -> Tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def logs(self) -> Tuple[Log, ...]:
        return tuple(self._logs)

    @property
    def settings(self) -> UserSettings:
        return self._settings

    def get_task(self, task_id: int) -> Optional[Task]:
        return next((t for t in self._tasks if t.id == task_id), None)

    def get_log(self, log_id: Optional[int]) -> Optional[Log]:
        if log_id is None:
            return None
        return next((l for l in self._logs if l.id == log_id), None)

    def snapshot(self) -> AppData:
        return AppData(
            tasks=copy.deepcopy(self._tasks),
            logs=copy.deepcopy(self._logs),
            settings=replace(self._settings),
        )

    # ---------- tasks ----------
    def set_tasks(self, tasks: List[Task]) -> None:
        self._tasks = list(tasks)
        self._changed()

    def prepend_task(self, task: Task) -> None:
        if self.get_task(task.id) is not None:
            raise ValueError(f"duplicate task id {task.id}")
        self._tasks.insert(0, task)
        self._changed()

    def replace_task(self, task_id: int, task: Task) -> bool:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                self._tasks[i] = task
                self._changed()
                return True
        return False

    def remove_task(self, task_id: int) -> Optional[Tuple[int, Task]]:
        """Remove and return (position, task), or None if absent."""
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                del self._tasks[i]
                self._changed()
                return i, t
        return None

    def insert_task_at(self, index: int, task: Task) -> None:
        self._tasks.insert(min(index, len(self._tasks)), task)
        self._changed()

    # ---------- logs ----------
    def set_logs(self, logs: List[Log]) -> None:
        self._logs = list(logs)
        self._changed()

    def prepend_log(self, log: Log) -> None:
        self._logs.insert(0, log)
        self._changed()

    def replace_log(self, log_id: int, log: Log) -> bool:
        for i, l in enumerate(self._logs):
            if l.id == log_id:
                self._logs[i] = log
                self._changed()
                return True
        return False

    # ---------- settings / bulk ----------
    def set_settings(self, settings: UserSettings) -> None:
        self._settings = settings
        self._changed()

    def load(self, data: AppData) -> None:
        self._tasks = list(data.tasks)
        self._logs = list(data.logs)
        self._settings = data.settings
        self._changed()
