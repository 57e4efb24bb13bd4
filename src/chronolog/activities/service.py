"""Activity CRUD and per-activity time summaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.db.models import Activity, TimeEntry
from chronolog.taxonomy.service import find_or_create_category, find_or_create_tag
from chronolog.tracking.time_service import (
    TimeEntryIntegrityError,
    TimeStats,
    get_activity_stats,
    get_last_tracked,
)

logger = structlog.get_logger()

ACTIVITY_NAME_MAX = 200


class ActivityValidationError(ValueError):
    """Rejected activity input (bad name or missing main category)."""


@dataclass
class ActivityWithStats:
    activity: Activity
    stats: TimeStats
    last_tracked: datetime | None = None


def _validate(name: str, main_category_name: str | None, *, require_category: bool) -> str:
    """Return the trimmed activity name, or raise ActivityValidationError."""
    name = name.strip()
    if not 1 <= len(name) <= ACTIVITY_NAME_MAX:
        msg = f"Activity name must be 1-{ACTIVITY_NAME_MAX} characters"
        raise ActivityValidationError(msg)
    if require_category and not (main_category_name and main_category_name.strip()):
        msg = "Main category is required"
        raise ActivityValidationError(msg)
    return name


async def _resolve_tags(db: AsyncSession, tag_names: Sequence[str]) -> list:
    tags = []
    seen: set[int] = set()
    for tag_name in tag_names:
        if not tag_name.strip():
            continue
        tag = await find_or_create_tag(db, tag_name)
        if tag.id not in seen:
            seen.add(tag.id)
            tags.append(tag)
    return tags


async def get_user_activity(db: AsyncSession, user_id: int, activity_id: int) -> Activity | None:
    """A live activity owned by ``user_id``, or None."""
    result = await db.execute(
        select(Activity).where(
            Activity.id == activity_id,
            Activity.user_id == user_id,
            Activity.deleted_at.is_(None),
        )
    )
    return result.scalars().first()


async def list_user_activities(db: AsyncSession, user_id: int) -> list[Activity]:
    """The user's live activities, newest first."""
    result = await db.execute(
        select(Activity)
        .where(Activity.user_id == user_id, Activity.deleted_at.is_(None))
        .order_by(Activity.created_at.desc(), Activity.id.desc())
    )
    return list(result.scalars().all())


async def create_activity(
    db: AsyncSession,
    user_id: int,
    name: str,
    main_category_name: str,
    sub_category_name: str | None = None,
    tag_names: Sequence[str] = (),
) -> Activity:
    """Create an activity, finding or creating its categories and tags.

    Raises:
        ActivityValidationError: Bad name or missing main category.
    """
    name = _validate(name, main_category_name, require_category=True)

    main_category = await find_or_create_category(db, main_category_name)
    sub_category = None
    if sub_category_name and sub_category_name.strip():
        sub_category = await find_or_create_category(db, sub_category_name)

    activity = Activity(
        user_id=user_id,
        name=name,
        main_category=main_category,
        sub_category=sub_category,
        tags=await _resolve_tags(db, tag_names),
    )
    db.add(activity)
    await db.commit()
    logger.info("activity_created", activity_id=activity.id, user_id=user_id)
    return activity


async def update_activity(
    db: AsyncSession,
    activity: Activity,
    name: str,
    main_category_name: str | None = None,
    sub_category_name: str | None = None,
    tag_names: Sequence[str] | None = None,
) -> Activity:
    """Full update of an activity.

    The main category is kept when not given. The sub category is cleared
    when not given. Tags are replaced only when ``tag_names`` is not None.
    """
    name = _validate(name, main_category_name, require_category=False)

    activity.name = name
    if main_category_name and main_category_name.strip():
        activity.main_category = await find_or_create_category(db, main_category_name)
    if sub_category_name and sub_category_name.strip():
        activity.sub_category = await find_or_create_category(db, sub_category_name)
    else:
        activity.sub_category = None
    if tag_names is not None:
        activity.tags = await _resolve_tags(db, tag_names)

    await db.commit()
    logger.info("activity_updated", activity_id=activity.id)
    return activity


async def soft_delete_activity(db: AsyncSession, activity: Activity) -> None:
    """Hide an activity. Its entries and rewards are kept."""
    activity.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("activity_deleted", activity_id=activity.id)


async def list_activities_with_stats(db: AsyncSession, user_id: int) -> list[ActivityWithStats]:
    """Live activities with their completed totals. Inconsistent ones are logged and skipped."""
    result = []
    for activity in await list_user_activities(db, user_id):
        try:
            stats = await get_activity_stats(db, activity.id)
        except TimeEntryIntegrityError as e:
            logger.warning("activity_stats_skipped", activity_id=activity.id, error=str(e))
            continue
        last = await get_last_tracked(db, activity.id)
        result.append(ActivityWithStats(activity=activity, stats=stats, last_tracked=last))
    return result


async def list_activity_entries(db: AsyncSession, activity_id: int) -> list[TimeEntry]:
    """Every entry of the activity, running ones included, newest first."""
    result = await db.execute(
        select(TimeEntry).where(TimeEntry.activity_id == activity_id).order_by(TimeEntry.start_time.desc())
    )
    return list(result.scalars().all())
