"""Local JSON files: the app-data cache and the draft side table."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from core.exceptions import ImportDocumentError
from core.models import AppData, Draft
from storage.documents import data_from_doc, data_to_doc, draft_from_doc, draft_to_doc

logger = logging.getLogger(__name__)

STORAGE_KEY = "dailysync_data_v1"
DRAFT_KEY = "dailysync_log_draft"


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp_path, path)


class LocalStorage:
    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / f"{STORAGE_KEY}.json"

    def load(self) -> AppData:
        if not self.path.exists():
            return AppData()
        try:
            return data_from_doc(json.loads(self.path.read_text("utf-8")))
        except (OSError, ValueError, ImportDocumentError):
            logger.exception("Failed to load data from %s", self.path)
            return AppData()

    def save(self, data: AppData) -> None:
        try:
            _write_json(self.path, data_to_doc(data))
        except OSError:
            logger.exception("Failed to save data to %s", self.path)


class DraftStore:
    """Keyed side table for unsaved editor drafts, backed by one JSON file."""
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._entries: Dict[str, Dict[str, Any]] = self._read()

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable draft file %s", self.path)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _flush(self) -> None:
        if self.path is None:
            return
        try:
            _write_json(self.path, self._entries)
        except OSError:
            logger.exception("Failed to write drafts to %s", self.path)

    def get(self, key: str = DRAFT_KEY) -> Optional[Draft]:
        doc = self._entries.get(key)
        return draft_from_doc(doc) if doc else None

    def put(self, draft: Draft, key: str = DRAFT_KEY) -> None:
        self._entries[key] = draft_to_doc(draft)
        self._flush()

    def clear(self, key: str = DRAFT_KEY) -> None:
        if self._entries.pop(key, None) is not None:
            self._flush()
