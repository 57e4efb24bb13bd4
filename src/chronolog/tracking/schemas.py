"""Schemas for timer and resume endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class StartTimerRequest(BaseModel):
    activity_id: int


class StartedEntry(BaseModel):
    id: int
    activity_id: int
    activity_name: str
    start_time: datetime
    end_time: datetime | None = None
    status: Literal["running"] = "running"


class StoppedEntry(BaseModel):
    id: int
    activity_id: int
    activity_name: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int


class StartTimerResponse(BaseModel):
    started_new: StartedEntry
    stopped_previous: StoppedEntry | None = None


class StopTimerResponse(StoppedEntry):
    duration: str
    status: Literal["stopped"] = "stopped"


class ActiveTimer(BaseModel):
    id: int
    activity_id: int
    activity_name: str
    start_time: datetime
    elapsed_seconds: int
    elapsed: str
    status: Literal["running"] = "running"


class ActiveTimerResponse(BaseModel):
    active_timer: ActiveTimer | None = None


class MessageResponse(BaseModel):
    message: str


class ResumeActivity(BaseModel):
    activity_id: int
    activity_name: str
    category_name: str
    total_seconds: int
    total_formatted: str
    entry_count: int
    percentage: float


class ResumeResponse(BaseModel):
    period: str
    start_date: datetime
    end_date: datetime
    total_seconds: int
    total_formatted: str
    activities: list[ResumeActivity]
