"""Conversions between YouTube API values and display values"""

import re
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
DEFAULT_AVATAR_BASE_URL = "https://api.dicebear.com/7.x/avataaars/svg"

# ISO 8601 duration as YouTube emits it (e.g. PT1H2M3S); days are not used
_DURATION_PATTERN = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?')


def format_duration(iso_duration: Optional[str]) -> str:
    """
    Convert an ISO 8601 duration into a clock string.

    ``PT1H2M3S`` becomes ``1:02:03``, ``PT5M9S`` becomes ``5:09`` and
    anything unparseable becomes ``0:00``.
    """
    match = _DURATION_PATTERN.search(iso_duration or "")
    if not match:
        return "0:00"

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def duration_to_minutes(duration: str) -> int:
    """Whole minutes of a clock string; seconds are truncated."""
    parts = (duration or "").split(":")
    try:
        if len(parts) == 3:
            return int(parts[0]) * 60 + int(parts[1])
        if len(parts) == 2:
            return int(parts[0])
    except ValueError:
        return 0
    return 0


def parse_count(value: Any) -> int:
    """Parse a statistics counter; missing or non-numeric values become 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    match = re.match(r'\s*(\d+)', str(value))
    return int(match.group(1)) if match else 0


def format_count(count: int) -> str:
    """Compact counter for display: 1.2M, 3.4K, or the plain number."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def format_time_ago(published_at: datetime, now: Optional[datetime] = None) -> str:
    """Relative age such as ``5m ago`` or ``2y ago``."""
    now = now or datetime.now(timezone.utc)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - published_at).total_seconds()))

    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 2592000:
        return f"{seconds // 86400}d ago"
    if seconds < 31536000:
        return f"{seconds // 2592000}mo ago"
    return f"{seconds // 31536000}y ago"


def watch_url(video_id: str) -> str:
    """Canonical watch page for a video id"""
    return WATCH_URL.format(video_id=quote(video_id, safe=""))


def avatar_url(channel_name: str, base_url: str = DEFAULT_AVATAR_BASE_URL) -> str:
    """Generated avatar seeded by the channel name"""
    return f"{base_url}?seed={quote(channel_name or 'channel', safe='')}"


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse an RFC 3339 timestamp; missing or unparseable values default to now (UTC)."""
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (TypeError, ValueError):
        return datetime.now(timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
