"""Start/stop timer logic. A user has at most one running entry."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.activities.service import get_user_activity
from chronolog.db.models import Activity, TimeEntry
from chronolog.tracking.time_utils import utcnow

logger = structlog.get_logger()


class ActivityNotFound(LookupError):
    """Activity missing, deleted, or owned by someone else."""


class NoActiveTimer(LookupError):
    """The user has no running time entry."""


class TimeEntryNotFound(LookupError):
    """Time entry missing or owned by someone else."""


@dataclass
class TimerStart:
    started: TimeEntry
    activity: Activity
    stopped_previous: TimeEntry | None = None


async def get_active_entry(db: AsyncSession, user_id: int) -> TimeEntry | None:
    """The user's running entry, with its activity eagerly loaded."""
    result = await db.execute(
        select(TimeEntry)
        .where(TimeEntry.user_id == user_id, TimeEntry.end_time.is_(None))
        .order_by(TimeEntry.start_time.desc())
        .limit(1)
    )
    return result.scalars().first()


async def start_timer(db: AsyncSession, user_id: int, activity_id: int) -> TimerStart:
    """Start a timer on ``activity_id``, stopping whichever timer was running.

    Raises:
        ActivityNotFound: If the activity does not belong to the user.
    """
    activity = await get_user_activity(db, user_id, activity_id)
    if activity is None:
        raise ActivityNotFound(activity_id)

    now = utcnow()
    previous = await get_active_entry(db, user_id)
    if previous is not None:
        previous.end_time = now
        logger.info("timer_auto_stopped", entry_id=previous.id, activity_id=previous.activity_id)

    entry = TimeEntry(user_id=user_id, activity_id=activity.id, start_time=now)
    db.add(entry)
    await db.commit()
    logger.info("timer_started", entry_id=entry.id, activity_id=activity.id)
    return TimerStart(started=entry, activity=activity, stopped_previous=previous)


async def stop_timer(db: AsyncSession, user_id: int) -> TimeEntry:
    """Stop the running timer.

    Raises:
        NoActiveTimer: If nothing is running.
    """
    entry = await get_active_entry(db, user_id)
    if entry is None:
        raise NoActiveTimer(user_id)

    entry.end_time = utcnow()
    await db.commit()
    logger.info("timer_stopped", entry_id=entry.id, activity_id=entry.activity_id)
    return entry


async def delete_time_entry(db: AsyncSession, user_id: int, entry_id: int) -> None:
    """Hard-delete an entry (corrections)."""
    result = await db.execute(select(TimeEntry).where(TimeEntry.id == entry_id, TimeEntry.user_id == user_id))
    entry = result.scalars().first()
    if entry is None:
        raise TimeEntryNotFound(entry_id)
    await db.delete(entry)
    await db.commit()
    logger.info("time_entry_deleted", entry_id=entry_id)
