"""Aggregation of completed time entries into per-activity totals."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.db.models import TimeEntry
from chronolog.tracking.time_utils import as_utc, elapsed_seconds


class TimeEntryIntegrityError(ValueError):
    """A stored entry ends before it starts."""

    def __init__(self, entry_id: int | None, start: datetime, end: datetime) -> None:
        self.entry_id = entry_id
        super().__init__(f"Time entry {entry_id} ends before it starts ({end.isoformat()} < {start.isoformat()})")


@dataclass(frozen=True)
class TimeStats:
    total_seconds: int = 0
    entry_count: int = 0


def aggregate_time_entries(entries: Iterable[TimeEntry]) -> TimeStats:
    """Sum whole seconds over completed entries.

    Running entries (no end time) are skipped and not counted. An entry with
    ``end < start`` raises ``TimeEntryIntegrityError``.
    """
    total = 0
    count = 0
    for entry in entries:
        if entry.end_time is None:
            continue
        if as_utc(entry.end_time) < as_utc(entry.start_time):
            raise TimeEntryIntegrityError(entry.id, entry.start_time, entry.end_time)
        total += elapsed_seconds(entry.start_time, entry.end_time)
        count += 1
    return TimeStats(total_seconds=total, entry_count=count)


async def list_completed_entries(db: AsyncSession, activity_id: int) -> list[TimeEntry]:
    """All stopped entries for an activity."""
    result = await db.execute(
        select(TimeEntry).where(
            TimeEntry.activity_id == activity_id,
            TimeEntry.end_time.is_not(None),
        )
    )
    return list(result.scalars().all())


async def get_activity_stats(db: AsyncSession, activity_id: int) -> TimeStats:
    """Total completed seconds and entry count for one activity."""
    return aggregate_time_entries(await list_completed_entries(db, activity_id))


async def get_last_tracked(db: AsyncSession, activity_id: int) -> datetime | None:
    """End time of the most recent completed entry, if any."""
    result = await db.execute(
        select(func.max(TimeEntry.end_time)).where(
            TimeEntry.activity_id == activity_id,
            TimeEntry.end_time.is_not(None),
        )
    )
    last = result.scalar_one_or_none()
    return as_utc(last) if last is not None else None
