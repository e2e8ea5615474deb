"""
Text formatting helpers for timer entries.
"""
import datetime
from typing import Iterable, Mapping, Optional


def format_timestamp(dt: Optional[datetime.datetime]) -> str:
    """Format datetime for display"""
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(duration: Optional[datetime.timedelta]) -> str:
    """Format a duration as HH:MM:SS (hours may exceed 24)"""
    if duration is None:
        return ""
    total_seconds = int(duration.total_seconds())
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_entry_list(entries: Iterable[Mapping]) -> str:
    """
    Render entries as returned by the /info endpoint.

    Each entry is a mapping with ``start_time``, ``end_time``,
    ``is_running`` and ``duration_text`` keys.
    """
    lines = []
    for i, entry in enumerate(entries, 1):
        lines.append(f"Entry {i}:")
        lines.append(f"  Start: {_display_time(entry.get('start_time'))}")
        if entry.get('is_running'):
            lines.append("  Timer running")
        else:
            lines.append(f"  End: {_display_time(entry.get('end_time'))}")
            lines.append(f"  Duration: {entry.get('duration_text') or ''}")
        lines.append("")
    return "\n".join(lines)


def _display_time(value) -> str:
    if isinstance(value, datetime.datetime):
        return format_timestamp(value)
    if isinstance(value, str) and value:
        try:
            return format_timestamp(datetime.datetime.fromisoformat(value))
        except ValueError:
            return value
    return "-"
