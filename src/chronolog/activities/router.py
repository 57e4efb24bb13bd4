"""Activity endpoints: /api/v1/activities/*."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.activities.schemas import (
    ActivityListResponse,
    ActivityResponse,
    ActivityStatsListResponse,
    ActivityStatsResponse,
    ActivityTimeResponse,
    CreateActivityRequest,
    EntryWithDuration,
    MessageResponse,
    UpdateActivityRequest,
)
from chronolog.activities.service import (
    ActivityValidationError,
    create_activity,
    get_user_activity,
    list_activities_with_stats,
    list_activity_entries,
    list_user_activities,
    soft_delete_activity,
    update_activity,
)
from chronolog.auth.dependencies import get_current_user
from chronolog.database import get_session
from chronolog.db.models import Activity, User
from chronolog.tracking.time_service import TimeEntryIntegrityError, aggregate_time_entries
from chronolog.tracking.time_utils import elapsed_seconds, format_duration

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/activities", tags=["Activities"])


async def _get_or_404(db: AsyncSession, user: User, activity_id: int) -> Activity:
    activity = await get_user_activity(db, user.id, activity_id)
    if activity is None:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


@router.post("", response_model=ActivityResponse, status_code=201)
async def create(
    body: CreateActivityRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityResponse:
    """Create an activity. Unknown categories and tags are created on the fly."""
    try:
        activity = await create_activity(
            db,
            user.id,
            name=body.name,
            main_category_name=body.main_category_name,
            sub_category_name=body.sub_category_name,
            tag_names=body.tag_names,
        )
    except ActivityValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ActivityResponse.model_validate(activity)


@router.get("", response_model=ActivityListResponse)
async def list_activities(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityListResponse:
    activities = await list_user_activities(db, user.id)
    return ActivityListResponse(activities=[ActivityResponse.model_validate(a) for a in activities])


@router.get("/stats", response_model=ActivityStatsListResponse)
async def list_with_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityStatsListResponse:
    """All live activities with total tracked time and last tracked instant."""
    rows = await list_activities_with_stats(db, user.id)
    return ActivityStatsListResponse(
        activities=[
            ActivityStatsResponse(
                **ActivityResponse.model_validate(row.activity).model_dump(),
                total_seconds=row.stats.total_seconds,
                total_formatted=format_duration(row.stats.total_seconds),
                entry_count=row.stats.entry_count,
                last_tracked=row.last_tracked,
            )
            for row in rows
        ]
    )


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(
    activity_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityResponse:
    return ActivityResponse.model_validate(await _get_or_404(db, user, activity_id))


@router.put("/{activity_id}", response_model=ActivityResponse)
async def update(
    activity_id: int,
    body: UpdateActivityRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityResponse:
    activity = await _get_or_404(db, user, activity_id)
    try:
        await update_activity(
            db,
            activity,
            name=body.name,
            main_category_name=body.main_category_name,
            sub_category_name=body.sub_category_name,
            tag_names=body.tag_names,
        )
    except ActivityValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ActivityResponse.model_validate(activity)


@router.delete("/{activity_id}", response_model=MessageResponse)
async def delete(
    activity_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    activity = await _get_or_404(db, user, activity_id)
    await soft_delete_activity(db, activity)
    return MessageResponse(message="Activity deleted successfully")


@router.get("/{activity_id}/time", response_model=ActivityTimeResponse)
async def activity_time(
    activity_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityTimeResponse:
    """Every entry of the activity, newest first, plus completed totals."""
    activity = await _get_or_404(db, user, activity_id)
    entries = await list_activity_entries(db, activity.id)
    try:
        stats = aggregate_time_entries(entries)
    except TimeEntryIntegrityError as e:
        logger.error("activity_time_integrity_error", activity_id=activity.id, error=str(e))
        raise HTTPException(status_code=500, detail="Stored time entries are inconsistent") from e
    return ActivityTimeResponse(
        activity_id=activity.id,
        activity_name=activity.name,
        total_seconds=stats.total_seconds,
        total_formatted=format_duration(stats.total_seconds),
        entry_count=stats.entry_count,
        entries=[
            EntryWithDuration(
                id=e.id,
                start_time=e.start_time,
                end_time=e.end_time,
                duration_seconds=elapsed_seconds(e.start_time, e.end_time) if e.end_time is not None else None,
                notes=e.notes,
            )
            for e in entries
        ],
    )
