from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from core.config import REQUEST_TIMEOUT
from core.exceptions import AuthError, StoreError
from core.models import DEFAULT_PRIORITY, Log, Task

logger = logging.getLogger(__name__)

# internal attribute -> column
TASK_COLUMNS = {
    "title": "title",
    "done": "done",
    "date": "date",
    "priority": "priority",
    "is_system_generated": "is_system_generated",
}


# ---------- row mapping (only at this boundary) ----------
def task_from_row(row: Dict[str, Any]) -> Task:
    date = str(row.get("date") or "")[:10]
    if not date:
        raise ValueError(f"task {row.get('id')} has no date")
    return Task(
        id=row["id"],
        title=row.get("title") or "",
        done=bool(row.get("done")),
        date=date,
        is_system_generated=bool(row.get("is_system_generated")),
        priority=row.get("priority") or DEFAULT_PRIORITY,
    )


def task_to_row(task: Task) -> Dict[str, Any]:
    return {
        "title": task.title,
        "done": task.done,
        "date": task.date,
        "is_system_generated": task.is_system_generated,
        "priority": task.priority,
    }


def log_from_row(row: Dict[str, Any]) -> Log:
    return Log(
        id=row["id"],
        title=row.get("title") or "",
        content=row.get("content") or "",
        tags=list(row.get("tags") or []),
        folder=row.get("folder") or None,
        created_at=int(row.get("created_at_ts") or 0),
        next_review_date=row.get("next_review_date") or None,
    )


def log_to_row(log: Log) -> Dict[str, Any]:
    return {
        "title": log.title,
        "content": log.content,
        "tags": list(log.tags),
        "folder": log.folder,
        "created_at_ts": log.created_at,
        "next_review_date": log.next_review_date,
    }


class SupabaseClient:
    """Auth + PostgREST access. Ownership filtering is enforced server side (RLS)."""
    def __init__(self, base_url: str, anon_key: str, timeout: float = REQUEST_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"apikey": anon_key})
        self.token: Optional[str] = None
        self.user_id: Optional[str] = None

    def _send(self, method: str, url: str, what: str, error=StoreError, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        try:
            r = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s failed: %s", what, e)
            raise error(f"{what} failed: {e}") from e
        if not r.ok:
            logger.warning("%s failed: %s %s", what, r.status_code, r.text)
            raise error(f"{what} failed: {r.status_code} {r.text}", status=r.status_code)
        return r

    def _rest(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    # ---------- auth ----------
    def login(self, email: str, password: str) -> bool:
        r = self._send("POST", f"{self.base_url}/auth/v1/token", "Login", AuthError,
                       params={"grant_type": "password"}, json={"email": email, "password": password})
        data = r.json()
        self.token = data.get("access_token")
        self.user_id = (data.get("user") or {}).get("id")
        if not self.token or not self.user_id:
            raise AuthError("Missing token or user id in login response")
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})
        logger.info("Logged in as %s", email)
        return True

    def signup(self, email: str, password: str) -> Dict[str, Any]:
        r = self._send("POST", f"{self.base_url}/auth/v1/signup", "Signup", AuthError,
                       json={"email": email, "password": password})
        return r.json()

    def logout(self) -> None:
        try:
            if self.token:
                self._send("POST", f"{self.base_url}/auth/v1/logout", "Logout", AuthError)
        finally:
            self.token = None
            self.user_id = None
            self.session.headers.pop("Authorization", None)

    def _require_user(self) -> str:
        if not self.user_id:
            raise AuthError("Not logged in")
        return self.user_id

    # ---------- tasks ----------
    def list_tasks(self) -> List[Task]:
        r = self._send("GET", self._rest("tasks"), "List tasks",
                       params={"select": "*", "order": "id.desc"})
        tasks = []
        for row in r.json():
            try:
                tasks.append(task_from_row(row))
            except ValueError as e:
                logger.warning("Skipping task row: %s", e)
        return tasks

    def create_task(self, task: Task) -> Task:
        payload = task_to_row(task)
        payload["user_id"] = self._require_user()
        r = self._send("POST", self._rest("tasks"), "Create task",
                       json=[payload], headers={"Prefer": "return=representation"})
        try:
            return task_from_row(r.json()[0])
        except ValueError as e:
            raise StoreError(f"Create task failed: {e}") from e

    def update_task(self, task_id: int, **fields: Any) -> None:
        payload = {}
        for name, value in fields.items():
            if name not in TASK_COLUMNS:
                raise ValueError(f"unknown task field: {name}")
            payload[TASK_COLUMNS[name]] = value
        self._send("PATCH", self._rest("tasks"), "Update task",
                   params={"id": f"eq.{task_id}"}, json=payload)

    def delete_task(self, task_id: int) -> None:
        self._send("DELETE", self._rest("tasks"), "Delete task", params={"id": f"eq.{task_id}"})

    # ---------- logs ----------
    def list_logs(self) -> List[Log]:
        r = self._send("GET", self._rest("logs"), "List logs",
                       params={"select": "*", "order": "created_at_ts.desc"})
        return [log_from_row(row) for row in r.json()]

    def insert_log(self, log: Log) -> Log:
        payload = log_to_row(log)
        payload["user_id"] = self._require_user()
        r = self._send("POST", self._rest("logs"), "Insert log",
                       json=[payload], headers={"Prefer": "return=representation"})
        return log_from_row(r.json()[0])

    def update_log(self, log: Log) -> Log:
        r = self._send("PATCH", self._rest("logs"), "Update log", params={"id": f"eq.{log.id}"},
                       json=log_to_row(log), headers={"Prefer": "return=representation"})
        rows = r.json()
        if not rows:
            raise StoreError(f"Update log failed: log {log.id} not found", status=404)
        return log_from_row(rows[0])
