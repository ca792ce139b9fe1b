from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional

from core.dates import format_date, today_local
from core.exceptions import ImportDocumentError, StoreError
from core.models import DEFAULT_PRIORITY, PRIORITIES, Draft, Log, OpResult, Task, TempIdAllocator, now_ms
from core.ports import Notifier, RemoteStore
from core.state import AppStore
from services.backup import export_to_file, parse_document
from storage.local import DRAFT_KEY, DraftStore, LocalStorage

logger = logging.getLogger(__name__)

EDITABLE_TASK_FIELDS = ("title", "priority", "date")
DRAFT_FIELDS = ("title", "content", "folder", "next_review_date")


class AppController:
    """
    Coordinates local state with the remote store.

    Mutations are applied to the store first (optimistic) and then confirmed
    remotely. A failed call restores only the entity it touched and notifies
    the user; there are no retries.
    """
    def __init__(
        self,
        client: RemoteStore,
        store: AppStore,
        notifier: Notifier,
        drafts: Optional[DraftStore] = None,
        storage: Optional[LocalStorage] = None,
        today: Callable[[], dt.date] = today_local,
        ids: Optional[TempIdAllocator] = None,
    ):
        self.client = client
        self.store = store
        self.notifier = notifier
        self.drafts = drafts or DraftStore()
        self.storage = storage
        self.today = today
        self.ids = ids or TempIdAllocator()
        self.selected_log_id: Optional[int] = None

    async def _remote(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        # blocking HTTP call off the event loop
        return await asyncio.to_thread(fn, *args, **kwargs)

    # ---- session ----
    async def refresh(self) -> bool:
        """Fetch both collections and replace the local ones."""
        try:
            tasks, logs = await asyncio.gather(
                self._remote(self.client.list_tasks),
                self._remote(self.client.list_logs),
            )
        except StoreError as e:
            logger.error("Failed to sync with remote store: %s", e)
            self.notifier.error("Sync", f"Failed to load your data: {e}")
            return False
        self.store.set_tasks(tasks)
        self.store.set_logs(logs)
        logger.info("Loaded %d tasks and %d logs", len(tasks), len(logs))
        return True

    async def logout(self) -> None:
        try:
            await self._remote(self.client.logout)
        except StoreError as e:
            logger.warning("Logout call failed: %s", e)
        # settings stay, personal data goes
        self.store.set_tasks([])
        self.store.set_logs([])
        self.selected_log_id = None

    # ---- tasks ----
    def _editable_task(self, task_id: int) -> Optional[Task]:
        task = self.store.get_task(task_id)
        if task is None:
            logger.debug("Task %s not in local state", task_id)
            return None
        if not task.persisted:
            self.notifier.error("Tasks", "This task is still being saved, try again in a moment.")
            return None
        return task

    async def create_task(
        self,
        title: str,
        date: Optional[str] = None,
        priority: str = DEFAULT_PRIORITY,
        is_system_generated: bool = False,
    ) -> OpResult:
        title = title.strip()
        if not title:
            return OpResult.IGNORED
        temp = Task(
            id=self.ids.next_id(),
            title=title,
            done=False,
            date=date or format_date(self.today()),
            priority=priority,
            is_system_generated=is_system_generated,
            persisted=False,
        )
        self.store.prepend_task(temp)
        try:
            saved = await self._remote(self.client.create_task, temp)
        except StoreError as e:
            logger.error("Create task failed: %s", e)
            self.store.remove_task(temp.id)
            self.notifier.error("Tasks", "Failed to save task.")
            return OpResult.ROLLED_BACK
        saved = replace(saved, persisted=True)
        if not self.store.replace_task(temp.id, saved):
            logger.warning("Temporary task %s vanished before confirmation (server id %s)", temp.id, saved.id)
        return OpResult.CONFIRMED

    async def toggle_task(self, task_id: int) -> OpResult:
        task = self._editable_task(task_id)
        if task is None:
            return OpResult.IGNORED
        return await self._patch_task(task, {"done": not task.done}, "Failed to update task status.")

    async def update_task(self, task_id: int, **fields: Any) -> OpResult:
        unknown = set(fields) - set(EDITABLE_TASK_FIELDS)
        if unknown:
            raise ValueError(f"cannot edit task fields: {', '.join(sorted(unknown))}")
        if "title" in fields:
            fields["title"] = str(fields["title"]).strip()
            if not fields["title"]:
                return OpResult.IGNORED
        if "priority" in fields and fields["priority"] not in PRIORITIES:
            raise ValueError(f"unknown priority: {fields['priority']}")
        task = self._editable_task(task_id)
        if task is None or not fields:
            return OpResult.IGNORED
        return await self._patch_task(task, fields, "Failed to update task.")

    async def _patch_task(self, task: Task, changes: dict, failure_message: str) -> OpResult:
        previous = {name: getattr(task, name) for name in changes}
        self.store.replace_task(task.id, replace(task, **changes))
        try:
            await self._remote(self.client.update_task, task.id, **changes)
        except StoreError as e:
            logger.error("Update task %s failed: %s", task.id, e)
            current = self.store.get_task(task.id)
            if current is not None:
                self.store.replace_task(task.id, replace(current, **previous))
            self.notifier.error("Tasks", failure_message)
            return OpResult.ROLLED_BACK
        return OpResult.CONFIRMED

    async def delete_task(self, task_id: int) -> OpResult:
        if self._editable_task(task_id) is None:
            return OpResult.IGNORED
        position, task = self.store.remove_task(task_id)
        try:
            await self._remote(self.client.delete_task, task_id)
        except StoreError as e:
            logger.error("Delete task %s failed: %s", task_id, e)
            if self.store.get_task(task_id) is None:
                self.store.insert_task_at(position, task)
            self.notifier.error("Tasks", "Failed to delete task.")
            return OpResult.ROLLED_BACK
        return OpResult.CONFIRMED

    # ---- log editor (draft) ----
    def current_draft(self) -> Draft:
        """Pending draft, else the selected note as saved, else a blank note."""
        draft = self.drafts.get(DRAFT_KEY)
        if draft is not None:
            return draft
        selected = self.store.get_log(self.selected_log_id)
        return Draft.from_log(selected) if selected is not None else Draft()

    def select_log(self, log_id: int) -> Draft:
        log = self.store.get_log(log_id)
        if log is None:
            raise KeyError(log_id)
        draft = Draft.from_log(log)
        self.drafts.put(draft, DRAFT_KEY)
        self.selected_log_id = log_id
        return draft

    def new_log(self) -> Draft:
        self.drafts.clear(DRAFT_KEY)
        self.selected_log_id = None
        return Draft()

    def edit_draft(self, **fields: Any) -> Draft:
        unknown = set(fields) - set(DRAFT_FIELDS)
        if unknown:
            raise ValueError(f"cannot edit draft fields: {', '.join(sorted(unknown))}")
        draft = replace(self.current_draft(), **fields)
        self.drafts.put(draft, DRAFT_KEY)
        return draft

    def add_draft_tag(self, tag: str) -> Draft:
        draft = self.current_draft()
        if draft.add_tag(tag):
            self.drafts.put(draft, DRAFT_KEY)
        return draft

    def remove_draft_tag(self, tag: str) -> Draft:
        draft = self.current_draft()
        if tag in draft.tags:
            draft.tags.remove(tag)
            self.drafts.put(draft, DRAFT_KEY)
        return draft

    # ---- logs ----
    async def save_log(self, draft: Optional[Draft] = None) -> OpResult:
        draft = draft or self.current_draft()
        if not draft.title.strip():
            return OpResult.IGNORED
        existing = self.store.get_log(draft.id)
        is_update = existing is not None and existing.persisted
        log = Log(
            id=draft.id if is_update else None,
            title=draft.title,
            content=draft.content,
            tags=list(draft.tags),
            folder=draft.folder.strip() or None,
            created_at=existing.created_at if existing is not None else now_ms(),
            next_review_date=draft.next_review_date or None,
            persisted=is_update,
        )
        try:
            if is_update:
                saved = await self._remote(self.client.update_log, log)
            else:
                saved = await self._remote(self.client.insert_log, log)
        except StoreError as e:
            logger.error("Save log failed: %s", e)
            self.notifier.error("Notes", "Failed to save note. Your draft was kept.")
            return OpResult.ROLLED_BACK

        saved = replace(saved, persisted=True)
        self.drafts.clear(DRAFT_KEY)
        # an unconfirmed local note is swapped for its server copy in place
        if existing is None or not self.store.replace_log(draft.id, saved):
            self.store.prepend_log(saved)
        self.selected_log_id = saved.id
        return OpResult.CONFIRMED

    # ---- settings / backup ----
    def _persist_locally(self) -> None:
        if self.storage is not None:
            self.storage.save(self.store.snapshot())

    def update_settings(self, **fields: Any) -> None:
        self.store.set_settings(replace(self.store.settings, **fields))
        self._persist_locally()

    def export_data(self, directory: Path) -> Path:
        return export_to_file(self.store.snapshot(), directory, self.today())

    def import_data(self, text: str) -> bool:
        try:
            data = parse_document(text)
        except ImportDocumentError as e:
            logger.warning("Rejected import document: %s", e)
            self.notifier.error("Import", "Invalid JSON file. Please upload a valid DailySync backup.")
            return False
        self.store.load(data)
        self._persist_locally()
        self.notifier.info("Import", "Data imported successfully!")
        return True
