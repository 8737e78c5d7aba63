from datetime import datetime, timezone
from typing import Optional

def _as_utc(value: datetime) -> datetime:
    # Naive timestamps come straight from the database and are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def format_post_date(created_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Short relative timestamp for a post card.

    "now" under a minute, then "5m", "3h", "2d" up to a week, then the
    calendar date ("Mar 4"), with the year once it is not the current one.
    """
    created = _as_utc(created_at)
    current = _as_utc(now) if now else datetime.now(timezone.utc)

    seconds = int((current - created).total_seconds())
    if seconds < 60:
        return "now"
    if seconds < 60 * 60:
        return f"{seconds // 60}m"
    if seconds < 60 * 60 * 24:
        return f"{seconds // 3600}h"
    if seconds < 60 * 60 * 24 * 7:
        return f"{seconds // 86400}d"

    label = f"{created.strftime('%b')} {created.day}"
    if created.year != current.year:
        label = f"{label}, {created.year}"
    return label
