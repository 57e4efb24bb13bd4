"""Period summary: top activities by completed time in the current period."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.db.models import Activity, Category, TimeEntry
from chronolog.tracking.time_service import TimeEntryIntegrityError
from chronolog.tracking.time_utils import Period, elapsed_seconds, get_period_range

TOP_ACTIVITIES = 3


@dataclass
class ActivityResume:
    activity_id: int
    activity_name: str
    category_name: str
    total_seconds: int = 0
    entry_count: int = 0
    percentage: float = 0.0


@dataclass
class Resume:
    period: str
    start: datetime
    end: datetime
    total_seconds: int = 0
    activities: list[ActivityResume] = field(default_factory=list)


async def get_resume(
    db: AsyncSession,
    user_id: int,
    period: Period,
    now: datetime | None = None,
    limit: int = TOP_ACTIVITIES,
) -> Resume:
    """Summarize completed entries that started inside the current ``period``.

    ``total_seconds`` covers every non-deleted activity; only the top ``limit``
    activities are listed, each with its share of that total.
    """
    start, end = get_period_range(period, now)
    result = await db.execute(
        select(TimeEntry.activity_id, TimeEntry.start_time, TimeEntry.end_time, Activity.name, Category.name)
        .join(Activity, Activity.id == TimeEntry.activity_id)
        .join(Category, Category.id == Activity.main_category_id)
        .where(
            TimeEntry.user_id == user_id,
            TimeEntry.end_time.is_not(None),
            TimeEntry.start_time >= start,
            TimeEntry.start_time < end,
            Activity.deleted_at.is_(None),
        )
    )

    by_activity: dict[int, ActivityResume] = {}
    overall = 0
    for activity_id, started, ended, activity_name, category_name in result.all():
        seconds = elapsed_seconds(started, ended)
        if seconds < 0:
            raise TimeEntryIntegrityError(None, started, ended)
        row = by_activity.setdefault(
            activity_id,
            ActivityResume(activity_id=activity_id, activity_name=activity_name, category_name=category_name),
        )
        row.total_seconds += seconds
        row.entry_count += 1
        overall += seconds

    top = sorted(by_activity.values(), key=lambda r: (-r.total_seconds, r.activity_id))[:limit]
    for row in top:
        row.percentage = row.total_seconds / overall * 100 if overall else 0.0

    return Resume(period=period, start=start, end=end, total_seconds=overall, activities=top)
