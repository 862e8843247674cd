"""Formatting helpers for search analytics output."""

from datetime import datetime
from typing import Any


def format_metric_name(key: str) -> str:
    """'avg_execution_time' -> 'Avg Execution Time'."""
    return " ".join(part.capitalize() for part in str(key).replace("_", " ").split())


def format_metric_value(key: str, value: Any) -> str:
    name = str(key)
    if isinstance(value, dict):
        if not value:
            return "-"
        return ", ".join(f"{k}: {v}" for k, v in value.items())
    if "time" in name:
        return f"{value}ms"
    if "rate" in name:
        return f"{value}%"
    return str(value)


def format_time(timestamp: Any) -> str:
    """Render a timestamp as MM/DD HH:MM; 'N/A' when missing or unparseable."""
    if timestamp is None or timestamp == "":
        return "N/A"
    if isinstance(timestamp, datetime):
        return timestamp.strftime("%m/%d %H:%M")
    try:
        parsed = datetime.fromisoformat(str(timestamp).replace("Z", "+00:00"))
    except ValueError:
        return "N/A"
    return parsed.strftime("%m/%d %H:%M")


def resolve_cleanup_dry_run(dry_run: bool, force: bool) -> bool:
    """Cleanup stays a dry run unless --force is given."""
    return dry_run and not force
