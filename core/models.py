from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

PRIORITIES = ("high", "medium", "low")
DEFAULT_PRIORITY = "medium"


class OpResult(str, Enum):
    """Outcome of an optimistic operation."""
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"
    IGNORED = "ignored"


# Server ids are small sequential integers; client ids are epoch millis.
TEMP_ID_THRESHOLD = 1_000_000_000_000


def is_temporary_id(entity_id: Optional[int]) -> bool:
    """Legacy classification for ids of unknown origin (imports, stale drafts)."""
    return entity_id is None or entity_id > TEMP_ID_THRESHOLD


def now_ms() -> int:
    return int(time.time() * 1000)


class TempIdAllocator:
    """Time-derived ids, strictly increasing within the process."""
    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            self._last = max(now_ms(), self._last + 1, TEMP_ID_THRESHOLD + 1)
            return self._last


@dataclass
class Task:
    id: int
    title: str
    done: bool
    date: str  # YYYY-MM-DD, local civil date
    is_system_generated: bool = False
    priority: str = DEFAULT_PRIORITY
    persisted: bool = True

    def __post_init__(self):
        if self.priority not in PRIORITIES:
            self.priority = DEFAULT_PRIORITY


@dataclass
class Log:
    id: Optional[int]
    title: str
    content: str = ""
    tags: List[str] = field(default_factory=list)
    folder: Optional[str] = None
    created_at: int = 0  # epoch millis, set once
    next_review_date: Optional[str] = None
    persisted: bool = True


@dataclass
class Draft:
    """Editor snapshot of the currently open, unsaved note."""
    id: Optional[int] = None
    title: str = ""
    content: str = ""
    tags: List[str] = field(default_factory=list)
    folder: str = ""
    next_review_date: str = ""

    @classmethod
    def from_log(cls, log: Log) -> Draft:
        return cls(
            id=log.id,
            title=log.title,
            content=log.content,
            tags=list(log.tags),
            folder=log.folder or "",
            next_review_date=log.next_review_date or "",
        )

    def add_tag(self, tag: str) -> bool:
        tag = tag.strip()
        if not tag or tag in self.tags:
            return False
        self.tags.append(tag)
        return True


@dataclass
class UserSettings:
    dark_mode: bool = False
    notifications: bool = True


@dataclass
class AppData:
    tasks: List[Task] = field(default_factory=list)
    logs: List[Log] = field(default_factory=list)
    settings: UserSettings = field(default_factory=UserSettings)
