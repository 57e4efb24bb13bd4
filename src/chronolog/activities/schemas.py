"""Request/response schemas for activity endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from chronolog.taxonomy.schemas import NamedResponse


class CreateActivityRequest(BaseModel):
    name: str = Field(..., max_length=200)
    main_category_name: str = ""
    sub_category_name: str | None = None
    tag_names: list[str] = Field(default_factory=list)


class UpdateActivityRequest(BaseModel):
    """Full replacement. Omitting ``tag_names`` keeps the current tags."""

    name: str = Field(..., max_length=200)
    main_category_name: str | None = None
    sub_category_name: str | None = None
    tag_names: list[str] | None = None


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    main_category_id: int
    main_category: NamedResponse
    sub_category_id: int | None = None
    sub_category: NamedResponse | None = None
    tags: list[NamedResponse] = []
    intervals_rewarded: int
    created_at: datetime
    updated_at: datetime


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]


class ActivityStatsResponse(ActivityResponse):
    total_seconds: int
    total_formatted: str
    entry_count: int
    last_tracked: datetime | None = None


class ActivityStatsListResponse(BaseModel):
    activities: list[ActivityStatsResponse]


class EntryWithDuration(BaseModel):
    id: int
    start_time: datetime
    end_time: datetime | None = None
    duration_seconds: int | None = None
    notes: str | None = None


class ActivityTimeResponse(BaseModel):
    activity_id: int
    activity_name: str
    total_seconds: int
    total_formatted: str
    entry_count: int
    entries: list[EntryWithDuration]


class MessageResponse(BaseModel):
    message: str
