"""Request/response schemas for reward endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ClaimRequest(BaseModel):
    activity_id: int


class ClaimedReward(BaseModel):
    id: int
    reward_type: str
    external_id: str
    name: str
    image_url: str
    rarity: str
    is_duplicate: bool
    mastery_level: int
    created_at: datetime


class ClaimResponse(BaseModel):
    reward: ClaimedReward
    intervals_remaining: int
    total_minutes: int


class NothingToClaimResponse(BaseModel):
    detail: str
    next_reward_progress: float


class ActivityStatus(BaseModel):
    activity_id: int
    activity_name: str
    total_minutes: int
    intervals_rewarded: int
    claimable: int
    progress_to_next: float


class RewardStatusResponse(BaseModel):
    total_claimable: int
    activities: list[ActivityStatus]


class RewardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    activity_id: int | None = None
    reward_type: str
    external_id: str
    name: str
    image_url: str
    rarity: str
    created_at: datetime


class MasteryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    champion_id: str
    champion_name: str
    image_url: str
    mastery_level: int
    times_obtained: int


class CollectionStats(BaseModel):
    total_rewards: int
    champions_collected: int
    max_mastery_champions: int


class CollectionResponse(BaseModel):
    rewards: list[RewardResponse]
    champion_mastery: list[MasteryResponse]
    stats: CollectionStats
