"""Timestamp helpers for document and item metadata."""

from datetime import datetime, timezone


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string (e.g., "2026-10-18T09:15:02.118344+00:00")."""
    return datetime.now(timezone.utc).isoformat()


def format_timestamp(iso_timestamp: str) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string

    Returns:
        "YYYY-MM-DD HH:MM:SS", or the original string if it cannot be parsed

    Examples:
        format_timestamp("2025-11-13T18:45:40.572549")
        # "2025-11-13 18:45:40"
    """
    try:
        return datetime.fromisoformat(iso_timestamp).strftime("%Y-%m-%d %H:%M:%S")
    except (TypeError, ValueError):
        return iso_timestamp
