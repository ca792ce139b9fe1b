"""
Console entry point.

Logs in, pulls the user's tasks and notes, materializes due review tasks,
prints the day's task list (and optionally the notes index) and the
statistics dashboard. Optional backup export/import.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from controller.app_controller import AppController
from core import config
from core.dates import format_date
from core.exceptions import AuthError
from core.logging_setup import setup_logging
from core.models import Log, Task
from core.ports import ConsoleNotifier
from core.state import AppStore
from services.agenda import day_progress, shift_day, visible_tasks
from services.analytics import Dashboard, build_dashboard
from services.notes import filter_logs, group_by_folder
from services.review_service import DailyReviews
from storage.local import DRAFT_KEY, DraftStore, LocalStorage
from storage.supabase import SupabaseClient

logger = logging.getLogger(__name__)

_HEAT = " .oO"


def format_dashboard(d: Dashboard) -> str:
    lines = [
        f"Tasks: {d.completed}/{d.total} done ({d.rate}%)",
        f"Streak: {d.streak} day(s)",
        "",
        "Last 6 months:",
    ]
    for m in d.months:
        lines.append(f"  {m.label}  done {m.completed:3d}  missed {m.missed:3d}  {m.rate:3d}%")
    if d.overdue:
        lines.append("")
        lines.append(f"Unfinished business ({len(d.overdue)}):")
        for t in d.overdue:
            lines.append(f"  {t.date}  {t.title}")
    lines.append("")
    lines.append("Activity: " + "".join(_HEAT[day.level] for day in d.heatmap[-56:]))
    return "\n".join(lines)


def format_agenda(tasks: Sequence[Task], selected: str, today) -> str:
    shown = visible_tasks(tasks, selected, today)
    lines = [f"{selected}: {day_progress(tasks, selected, today)}% done"]
    for t in shown:
        mark = "x" if t.done else " "
        late = f"  (from {t.date})" if t.date != selected else ""
        lines.append(f"  [{mark}] {t.priority:<6} {t.title}{late}")
    if not shown:
        lines.append("  nothing planned")
    return "\n".join(lines)


def format_notes(logs: Sequence[Log], query: str = "") -> str:
    index = group_by_folder(filter_logs(logs, query))
    lines = []
    for folder in index.folders:
        lines.append(f"{folder}/")
        lines.extend(f"  {l.title}" for l in index.groups[folder])
    if index.uncategorized:
        lines.append("(no folder)")
        lines.extend(f"  {l.title}" for l in index.uncategorized)
    return "\n".join(lines) or "No notes found."


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="dailysync", description="Daily tasks, notes and stats.")
    p.add_argument("--email", default=config.IDENTITY)
    p.add_argument("--password", default=config.PASSWORD)
    p.add_argument("--signup", action="store_true", help="create the account before logging in")
    p.add_argument("--export", metavar="DIR", type=Path, help="write a JSON backup into DIR")
    p.add_argument("--import", dest="import_file", metavar="FILE", type=Path,
                   help="replace local data with a JSON backup")
    p.add_argument("--day", type=int, default=0, metavar="OFFSET",
                   help="show the task list this many days from today")
    p.add_argument("--notes", nargs="?", const="", metavar="QUERY",
                   help="list notes by folder, optionally filtered by title or tag")
    return p.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    notifier = ConsoleNotifier()
    client = SupabaseClient(config.SUPABASE_URL, config.SUPABASE_ANON_KEY)
    try:
        if args.signup:
            client.signup(args.email, args.password)
            notifier.info("Account", "Registration successful! You can now log in.")
        client.login(args.email, args.password)
    except AuthError as e:
        # shown next to the login prompt, not fatal
        print(f"Login error: {e}", file=sys.stderr)
        return 1

    storage = LocalStorage(config.DATA_DIR)
    controller = AppController(
        client,
        AppStore(storage.load()),
        notifier,
        drafts=DraftStore(config.DATA_DIR / f"{DRAFT_KEY}.json"),
        storage=storage,
    )

    if args.import_file:
        controller.import_data(args.import_file.read_text("utf-8"))
    else:
        await controller.refresh()
        await DailyReviews(controller).prepare_today()

    if args.export:
        path = controller.export_data(args.export)
        notifier.info("Export", f"Backup written to {path}")

    today = controller.today()
    selected = shift_day(format_date(today), args.day)
    print(format_agenda(controller.store.tasks, selected, today))
    print()
    if args.notes is not None:
        print(format_notes(controller.store.logs, args.notes))
        print()
    print(format_dashboard(build_dashboard(controller.store.tasks, today)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(log_dir=config.LOG_DIR, console_level=config.LOG_LEVEL)
    logger.info("Starting dailysync against %s", config.SUPABASE_URL)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
