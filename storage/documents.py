"""JSON document format shared by the local cache and backup files (camelCase keys)."""
from __future__ import annotations

from typing import Any, Dict

from core.exceptions import ImportDocumentError
from core.models import AppData, Draft, Log, Task, UserSettings, is_temporary_id

REQUIRED_KEYS = ("tasks", "logs", "settings")


def task_to_doc(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "done": task.done,
        "date": task.date,
        "isSystemGenerated": task.is_system_generated,
        "priority": task.priority,
    }


def task_from_doc(doc: Dict[str, Any]) -> Task:
    task_id = int(doc["id"])
    return Task(
        id=task_id,
        title=str(doc.get("title", "")),
        done=bool(doc.get("done", False)),
        date=str(doc["date"])[:10],
        is_system_generated=bool(doc.get("isSystemGenerated", False)),
        priority=doc.get("priority") or "medium",
        persisted=not is_temporary_id(task_id),
    )


def log_to_doc(log: Log) -> Dict[str, Any]:
    return {
        "id": log.id,
        "title": log.title,
        "content": log.content,
        "tags": list(log.tags),
        "folder": log.folder,
        "createdAt": log.created_at,
        "nextReviewDate": log.next_review_date,
    }


def log_from_doc(doc: Dict[str, Any]) -> Log:
    log_id = doc.get("id")
    log_id = None if log_id is None else int(log_id)
    return Log(
        id=log_id,
        title=str(doc.get("title", "")),
        content=str(doc.get("content", "")),
        tags=[str(t) for t in doc.get("tags") or []],
        folder=doc.get("folder") or None,
        created_at=int(doc.get("createdAt") or 0),
        next_review_date=doc.get("nextReviewDate") or None,
        persisted=not is_temporary_id(log_id),
    )


def settings_to_doc(settings: UserSettings) -> Dict[str, Any]:
    return {"darkMode": settings.dark_mode, "notifications": settings.notifications}


def settings_from_doc(doc: Dict[str, Any]) -> UserSettings:
    return UserSettings(
        dark_mode=bool(doc.get("darkMode", False)),
        notifications=bool(doc.get("notifications", True)),
    )


def draft_to_doc(draft: Draft) -> Dict[str, Any]:
    return {
        "id": draft.id,
        "title": draft.title,
        "content": draft.content,
        "tags": list(draft.tags),
        "folder": draft.folder,
        "nextReviewDate": draft.next_review_date,
    }


def draft_from_doc(doc: Dict[str, Any]) -> Draft:
    return Draft(
        id=doc.get("id"),
        title=doc.get("title") or "",
        content=doc.get("content") or "",
        tags=list(doc.get("tags") or []),
        folder=doc.get("folder") or "",
        next_review_date=doc.get("nextReviewDate") or "",
    )


def data_to_doc(data: AppData) -> Dict[str, Any]:
    return {
        "tasks": [task_to_doc(t) for t in data.tasks],
        "logs": [log_to_doc(l) for l in data.logs],
        "settings": settings_to_doc(data.settings),
    }


def data_from_doc(doc: Any) -> AppData:
    """Validate and decode a full snapshot. Raises ImportDocumentError."""
    if not isinstance(doc, dict):
        raise ImportDocumentError("Invalid structure: expected a JSON object")
    missing = [k for k in REQUIRED_KEYS if doc.get(k) is None]
    if missing:
        raise ImportDocumentError(f"Invalid structure: missing {', '.join(missing)}")
    if not isinstance(doc["tasks"], list) or not isinstance(doc["logs"], list) \
            or not isinstance(doc["settings"], dict):
        raise ImportDocumentError("Invalid structure: wrong section types")
    try:
        tasks = [task_from_doc(t) for t in doc["tasks"]]
        logs = [log_from_doc(l) for l in doc["logs"]]
        settings = settings_from_doc(doc["settings"])
    except (KeyError, TypeError, ValueError) as e:
        raise ImportDocumentError(f"Invalid entry: {e}") from e
    ids = [t.id for t in tasks]
    if len(ids) != len(set(ids)):
        raise ImportDocumentError("Invalid entry: duplicate task ids")
    return AppData(tasks=tasks, logs=logs, settings=settings)
