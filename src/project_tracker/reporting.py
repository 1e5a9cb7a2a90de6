"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from pathlib import Path

from .store import StateStore


class SummaryPrinter:
    """Render per-project totals in the console."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def print_summary(self) -> None:
        store = StateStore(self.db_path)
        try:
            state = store.load()
        finally:
            store.close()

        print(f"Current project: {state.current_project or 'None'}")
        print("-" * 40)
        entries = project_totals(state.tracking_data)
        if not entries:
            print("No tracking data yet. Start browsing or set a project!")
            return
        for project, ms in entries:
            print(f"  {project:<30} {format_duration(ms)}")


def project_totals(tracking_data: dict[str, int]) -> list[tuple[str, int]]:
    """Projects with tracked time, sorted by name."""
    return [(name, ms) for name, ms in sorted(tracking_data.items()) if ms > 0]


def format_duration(ms: int) -> str:
    seconds = int(ms) // 1000
    minutes, secs = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    parts = [
        f"{value}{unit}"
        for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s"))
        if value > 0
    ]
    return " ".join(parts) if parts else "0s"
