"""
Ports used by the controller.

The controller depends on these Protocols, not on the Supabase client or a
particular UI, so tests can plug in in-memory fakes.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, List, Protocol

from core.models import Log, Task

logger = logging.getLogger(__name__)


class RemoteStore(Protocol):
    def logout(self) -> None: ...

    def list_tasks(self) -> List[Task]: ...
    def create_task(self, task: Task) -> Task: ...
    def update_task(self, task_id: int, **fields: Any) -> None: ...
    def delete_task(self, task_id: int) -> None: ...

    def list_logs(self) -> List[Log]: ...
    def insert_log(self, log: Log) -> Log: ...
    def update_log(self, log: Log) -> Log: ...


class Notifier(Protocol):
    """User-facing notification (synchronous, never silent)."""
    def error(self, title: str, message: str) -> None: ...
    def info(self, title: str, message: str) -> None: ...


class ConsoleNotifier:
    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    def error(self, title: str, message: str) -> None:
        logger.error("%s: %s", title, message)
        print(f"[{title}] {message}", file=self.stream)

    def info(self, title: str, message: str) -> None:
        logger.info("%s: %s", title, message)
        print(f"[{title}] {message}", file=self.stream)
