# mcsrboard/formatting.py

from datetime import datetime, timezone
from typing import Any, Optional

TIMELINE_LABELS = {
    'enter_nether': 'Entered Nether',
    'enter_bastion': 'Entered Bastion',
    'enter_fortress': 'Entered Fortress',
    'first_portal': 'First Portal',
    'second_portal': 'Second Portal',
    'enter_stronghold': 'Entered Stronghold',
    'enter_end': 'Entered End',
    'finish': 'Finished',
}


def format_time(ms: Optional[float]) -> str:
    """Milliseconds as m:ss.mmm."""
    if not ms:
        return 'N/A'
    try:
        ms = int(ms)
    except (ValueError, OverflowError):
        return 'N/A'
    mins, rest = divmod(ms, 60_000)
    secs, millis = divmod(rest, 1000)
    return f'{mins}:{secs:02d}.{millis:03d}'


def format_date(timestamp: Optional[int]) -> str:
    if not timestamp:
        return 'N/A'
    try:
        dt = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return 'N/A'
    return dt.strftime('%Y-%m-%d %H:%M')


def format_rate(value: Any) -> str:
    if value is None:
        return 'N/A'
    return f'{float(value):.1f}%'


def format_change(change: Optional[int]) -> str:
    value = change or 0
    return f'+{value}' if value >= 0 else str(value)


def timeline_label(kind: str) -> str:
    return TIMELINE_LABELS.get(kind, kind)
