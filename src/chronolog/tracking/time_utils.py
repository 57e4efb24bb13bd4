"""Duration and calendar-period helpers. All periods are UTC."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Literal

Period = Literal["day", "week", "month", "year"]
PERIODS: tuple[str, ...] = ("day", "week", "month", "year")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds between two instants, truncated toward zero."""
    return int((as_utc(end) - as_utc(start)).total_seconds())


def format_duration(total_seconds: int) -> str:
    """Human readable duration: '2h 5m', '4m 10s' or '42s'."""
    hours, remainder = divmod(max(total_seconds, 0), 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def get_period_range(period: Period, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` of the calendar period containing ``now``.

    Weeks start on Monday (ISO).
    """
    if now is None:
        now = utcnow()
    today = as_utc(now).date()

    if period == "day":
        start = today
        end = today + timedelta(days=1)
    elif period == "week":
        start = today - timedelta(days=today.weekday())
        end = start + timedelta(weeks=1)
    elif period == "month":
        start = today.replace(day=1)
        end = date(start.year + 1, 1, 1) if start.month == 12 else date(start.year, start.month + 1, 1)
    elif period == "year":
        start = date(today.year, 1, 1)
        end = date(today.year + 1, 1, 1)
    else:
        msg = f"Invalid period '{period}'. Use: {', '.join(PERIODS)}"
        raise ValueError(msg)

    return _midnight(start), _midnight(end)
