"""Timer and resume endpoints.

/api/v1/time-entries/*: start, stop, inspect and delete time entries.
/api/v1/resume: top activities of the current day/week/month/year.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.auth.dependencies import get_current_user
from chronolog.database import get_session
from chronolog.db.models import TimeEntry, User
from chronolog.tracking.resume_service import get_resume
from chronolog.tracking.schemas import (
    ActiveTimer,
    ActiveTimerResponse,
    MessageResponse,
    ResumeActivity,
    ResumeResponse,
    StartedEntry,
    StartTimerRequest,
    StartTimerResponse,
    StopTimerResponse,
    StoppedEntry,
)
from chronolog.tracking.time_service import TimeEntryIntegrityError
from chronolog.tracking.time_utils import PERIODS, elapsed_seconds, format_duration, utcnow
from chronolog.tracking.timer_service import (
    ActivityNotFound,
    NoActiveTimer,
    TimeEntryNotFound,
    delete_time_entry,
    get_active_entry,
    start_timer,
    stop_timer,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/time-entries", tags=["Time Entries"])
resume_router = APIRouter(prefix="/api/v1/resume", tags=["Resume"])


def _stopped(entry: TimeEntry) -> StoppedEntry:
    return StoppedEntry(
        id=entry.id,
        activity_id=entry.activity_id,
        activity_name=entry.activity.name,
        start_time=entry.start_time,
        end_time=entry.end_time,
        duration_seconds=elapsed_seconds(entry.start_time, entry.end_time),
    )


@router.post("/start", response_model=StartTimerResponse, status_code=201)
async def start(
    body: StartTimerRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StartTimerResponse:
    """Start a timer; a timer already running is stopped first."""
    try:
        result = await start_timer(db, user.id, body.activity_id)
    except ActivityNotFound as e:
        raise HTTPException(status_code=404, detail="Activity not found") from e

    entry = result.started
    return StartTimerResponse(
        started_new=StartedEntry(
            id=entry.id,
            activity_id=entry.activity_id,
            activity_name=result.activity.name,
            start_time=entry.start_time,
        ),
        stopped_previous=_stopped(result.stopped_previous) if result.stopped_previous else None,
    )


@router.post("/stop", response_model=StopTimerResponse)
async def stop(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StopTimerResponse:
    try:
        entry = await stop_timer(db, user.id)
    except NoActiveTimer as e:
        raise HTTPException(status_code=404, detail="No active timer found") from e

    stopped = _stopped(entry)
    return StopTimerResponse(**stopped.model_dump(), duration=format_duration(stopped.duration_seconds))


@router.get("/active", response_model=ActiveTimerResponse)
async def active(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActiveTimerResponse:
    """The running timer with its elapsed time, or ``active_timer: null``."""
    entry = await get_active_entry(db, user.id)
    if entry is None:
        return ActiveTimerResponse(active_timer=None)

    elapsed = elapsed_seconds(entry.start_time, utcnow())
    return ActiveTimerResponse(
        active_timer=ActiveTimer(
            id=entry.id,
            activity_id=entry.activity_id,
            activity_name=entry.activity.name,
            start_time=entry.start_time,
            elapsed_seconds=elapsed,
            elapsed=format_duration(elapsed),
        )
    )


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete(
    entry_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    try:
        await delete_time_entry(db, user.id, entry_id)
    except TimeEntryNotFound as e:
        raise HTTPException(status_code=404, detail="Time entry not found") from e
    return MessageResponse(message="Time entry deleted successfully")


@resume_router.get("", response_model=ResumeResponse)
async def resume(
    period: str = Query("week"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ResumeResponse:
    """Top activities by completed time in the current UTC calendar period."""
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail=f"Invalid period '{period}'. Use: {', '.join(PERIODS)}")

    try:
        summary = await get_resume(db, user.id, period)  # type: ignore[arg-type]
    except TimeEntryIntegrityError as e:
        logger.error("resume_integrity_error", user_id=user.id, error=str(e))
        raise HTTPException(status_code=500, detail="Stored time entries are inconsistent") from e

    return ResumeResponse(
        period=summary.period,
        start_date=summary.start,
        end_date=summary.end,
        total_seconds=summary.total_seconds,
        total_formatted=format_duration(summary.total_seconds),
        activities=[
            ResumeActivity(
                activity_id=row.activity_id,
                activity_name=row.activity_name,
                category_name=row.category_name,
                total_seconds=row.total_seconds,
                total_formatted=format_duration(row.total_seconds),
                entry_count=row.entry_count,
                percentage=round(row.percentage, 2),
            )
            for row in summary.activities
        ],
    )
