from __future__ import annotations
from datetime import datetime, timedelta, timezone as dt_tz


def as_utc(dt: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)


def elapsed(started_at: datetime | None, completed_at: datetime | None, now: datetime) -> timedelta | None:
    """Wall-clock time on the hunt; frozen at completion."""
    start = as_utc(started_at)
    if start is None:
        return None
    end = as_utc(completed_at) or as_utc(now)
    return max(end - start, timedelta(0))


def effective(elapsed_td: timedelta, adjustment_minutes: int) -> timedelta:
    """
    Elapsed time plus the express-pass adjustment (negative minutes are savings).

    >>> effective(timedelta(minutes=30), -5)
    datetime.timedelta(seconds=1500)
    """
    return elapsed_td + timedelta(minutes=adjustment_minutes)


def format_elapsed(td: timedelta) -> str:
    """
    "X hr Y min Z sec", omitting zero hour/minute parts; negative clamps to zero.

    >>> format_elapsed(timedelta(hours=1, minutes=23, seconds=45))
    '1 hr 23 min 45 sec'
    >>> format_elapsed(timedelta(seconds=30))
    '30 sec'
    """
    total = max(int(td.total_seconds()), 0)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    parts: list[str] = []
    if h > 0:
        parts.append(f"{h} hr")
    if m > 0:
        parts.append(f"{m} min")
    parts.append(f"{s} sec")
    return " ".join(parts)
