from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from core.models import Log


@dataclass
class FolderIndex:
    folders: List[str] = field(default_factory=list)
    groups: Dict[str, List[Log]] = field(default_factory=dict)
    uncategorized: List[Log] = field(default_factory=list)


def filter_logs(logs: Sequence[Log], query: str) -> List[Log]:
    """Case-insensitive match on title or any tag; empty query keeps all."""
    q = query.strip().lower()
    if not q:
        return list(logs)
    return [l for l in logs if q in l.title.lower() or any(q in t.lower() for t in l.tags)]


def group_by_folder(logs: Sequence[Log]) -> FolderIndex:
    index = FolderIndex()
    for log in logs:
        if log.folder:
            index.groups.setdefault(log.folder, []).append(log)
        else:
            index.uncategorized.append(log)
    index.folders = sorted(index.groups)
    return index
