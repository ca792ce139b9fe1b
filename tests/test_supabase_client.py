from __future__ import annotations

from typing import Any, List

import pytest
import requests

from core.exceptions import AuthError, StoreError
from core.models import Log, Task
from storage.supabase import SupabaseClient, log_from_row, log_to_row, task_from_row, task_to_row


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Stands in for requests.Session: queued responses, recorded requests."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.requests: List[tuple] = []
        self.headers: dict = {}

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _client(*responses: Any) -> SupabaseClient:
    client = SupabaseClient("https://proj.supabase.co/", "anon-key", timeout=3)
    client.session = FakeSession(*responses)
    return client


def _logged_in(*responses: Any) -> SupabaseClient:
    client = _client(*responses)
    client.token = "tok"
    client.user_id = "user-1"
    return client


def test_task_row_mapping_renames_fields_at_the_boundary() -> None:
    task = task_from_row({"id": 4, "title": "Review: Goals", "done": False,
                          "date": "2024-03-15", "is_system_generated": True})
    assert task == Task(id=4, title="Review: Goals", done=False, date="2024-03-15",
                        is_system_generated=True, priority="medium")
    row = task_to_row(task)
    assert row["is_system_generated"] is True
    assert "isSystemGenerated" not in row and "id" not in row


def test_log_row_mapping_keeps_created_at() -> None:
    log = log_from_row({"id": 9, "title": "n", "content": "c", "tags": None,
                        "folder": "", "created_at_ts": 1700000000000, "next_review_date": None})
    assert log.tags == [] and log.folder is None and log.created_at == 1700000000000
    assert log_to_row(Log(id=9, title="n", created_at=5))["created_at_ts"] == 5


def test_login_stores_token_and_user() -> None:
    client = _client(FakeResponse(200, {"access_token": "abc", "user": {"id": "u-42"}}))
    assert client.login("me@example.com", "pw") is True
    assert client.user_id == "u-42"
    assert client.session.headers["Authorization"] == "Bearer abc"
    method, url, kwargs = client.session.requests[0]
    assert (method, url) == ("POST", "https://proj.supabase.co/auth/v1/token")
    assert kwargs["params"] == {"grant_type": "password"}
    assert kwargs["timeout"] == 3


def test_login_failure_raises_auth_error() -> None:
    client = _client(FakeResponse(400, {}, text="Invalid login credentials"))
    with pytest.raises(AuthError) as exc:
        client.login("me@example.com", "bad")
    assert exc.value.status == 400
    assert client.token is None


def test_create_task_attaches_owner_and_returns_server_entity() -> None:
    client = _logged_in(FakeResponse(201, [{"id": 12, "title": "Gym", "done": False,
                                            "date": "2024-03-15", "is_system_generated": False,
                                            "priority": "high"}]))
    saved = client.create_task(Task(id=1_710_000_000_000, title="Gym", done=False,
                                    date="2024-03-15", priority="high", persisted=False))
    assert saved.id == 12 and saved.priority == "high"
    method, url, kwargs = client.session.requests[0]
    assert (method, url) == ("POST", "https://proj.supabase.co/rest/v1/tasks")
    assert kwargs["json"][0]["user_id"] == "user-1"
    assert "id" not in kwargs["json"][0]
    assert kwargs["headers"] == {"Prefer": "return=representation"}


def test_create_task_requires_login() -> None:
    client = _client()
    with pytest.raises(AuthError):
        client.create_task(Task(id=1, title="x", done=False, date="2024-03-15"))


def test_update_task_filters_by_id() -> None:
    client = _logged_in(FakeResponse(204))
    client.update_task(5, done=True)
    method, _, kwargs = client.session.requests[0]
    assert method == "PATCH"
    assert kwargs["params"] == {"id": "eq.5"}
    assert kwargs["json"] == {"done": True}


def test_update_task_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        _logged_in().update_task(5, owner="someone")


def test_server_error_raises_store_error_with_status() -> None:
    client = _logged_in(FakeResponse(500, None, text="boom"))
    with pytest.raises(StoreError) as exc:
        client.delete_task(3)
    assert exc.value.status == 500


def test_network_error_becomes_store_error() -> None:
    client = _logged_in(requests.ConnectionError("offline"))
    with pytest.raises(StoreError):
        client.list_tasks()


def test_list_logs_orders_by_creation() -> None:
    client = _logged_in(FakeResponse(200, [{"id": 2, "title": "b", "created_at_ts": 2},
                                           {"id": 1, "title": "a", "created_at_ts": 1}]))
    logs = client.list_logs()
    assert [l.id for l in logs] == [2, 1]
    assert client.session.requests[0][2]["params"]["order"] == "created_at_ts.desc"


def test_task_row_without_date_is_rejected() -> None:
    with pytest.raises(ValueError):
        task_from_row({"id": 4, "title": "Floating", "done": False, "date": None})


def test_list_tasks_skips_rows_without_date() -> None:
    client = _logged_in(FakeResponse(200, [{"id": 3, "title": "ok", "done": False, "date": "2024-03-15"},
                                           {"id": 2, "title": "undated", "done": False, "date": ""}]))
    assert [t.id for t in client.list_tasks()] == [3]


def test_create_task_with_undated_reply_raises_store_error() -> None:
    client = _logged_in(FakeResponse(201, [{"id": 12, "title": "Gym", "done": False}]))
    with pytest.raises(StoreError):
        client.create_task(Task(id=1, title="Gym", done=False, date="2024-03-15"))


def test_update_log_of_missing_row_fails() -> None:
    client = _logged_in(FakeResponse(200, []))
    with pytest.raises(StoreError):
        client.update_log(Log(id=99, title="gone"))


def test_logout_forgets_session_even_on_failure() -> None:
    client = _logged_in(FakeResponse(500, None, text="down"))
    client.session.headers["Authorization"] = "Bearer tok"
    with pytest.raises(AuthError):
        client.logout()
    assert client.token is None and "Authorization" not in client.session.headers
