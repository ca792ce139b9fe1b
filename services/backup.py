"""Full-snapshot export/import ({tasks, logs, settings})."""
from __future__ import annotations

import datetime as dt
import json
import logging
from pathlib import Path
from typing import Optional

from core.dates import coerce_today, format_date
from core.exceptions import ImportDocumentError
from core.models import AppData
from storage.documents import data_from_doc, data_to_doc

logger = logging.getLogger(__name__)


def export_document(data: AppData) -> str:
    return json.dumps(data_to_doc(data), ensure_ascii=False, indent=2)


def backup_filename(today: Optional[dt.date] = None) -> str:
    return f"dailysync_backup_{format_date(coerce_today(today))}.json"


def export_to_file(data: AppData, directory: Path, today: Optional[dt.date] = None) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename(today)
    path.write_text(export_document(data), "utf-8")
    logger.info("Exported %d tasks / %d logs to %s", len(data.tasks), len(data.logs), path)
    return path


def parse_document(text: str) -> AppData:
    try:
        doc = json.loads(text)
    except ValueError as e:
        raise ImportDocumentError(f"Invalid JSON: {e}") from e
    return data_from_doc(doc)
