"""Reward endpoints: /api/v1/rewards/*."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.auth.dependencies import get_current_user
from chronolog.catalog.router import get_catalog_store
from chronolog.catalog.store import CatalogStore
from chronolog.database import get_session
from chronolog.db.models import User
from chronolog.randomness import RandomSource, get_random_source
from chronolog.rewards.errors import (
    ActivityNotFoundError,
    GenerationUnavailableError,
    NothingToClaimError,
    StorageFailureError,
)
from chronolog.rewards.schemas import (
    ActivityStatus,
    ClaimedReward,
    ClaimRequest,
    ClaimResponse,
    CollectionResponse,
    CollectionStats,
    MasteryResponse,
    NothingToClaimResponse,
    RewardResponse,
    RewardStatusResponse,
)
from chronolog.rewards.service import claim_reward, get_collection, get_reward_status
from chronolog.tracking.time_service import TimeEntryIntegrityError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/rewards", tags=["Rewards"])


@router.post(
    "/claim",
    response_model=ClaimResponse,
    responses={400: {"model": NothingToClaimResponse}},
)
async def claim(
    body: ClaimRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    store: CatalogStore = Depends(get_catalog_store),
    rng: RandomSource = Depends(get_random_source),
) -> ClaimResponse:
    """Spend one earned interval on a roulette spin."""
    try:
        result = await claim_reward(db, user.id, body.activity_id, store.snapshot, rng)
    except ActivityNotFoundError as e:
        raise HTTPException(status_code=404, detail="Activity not found") from e
    except NothingToClaimError as e:
        raise HTTPException(
            status_code=400,
            detail={"detail": e.message, "next_reward_progress": e.progress},
        ) from e
    except GenerationUnavailableError as e:
        logger.warning("reward_generation_unavailable", reward_type=e.reward_type)
        raise HTTPException(status_code=503, detail=str(e)) from e
    except (StorageFailureError, TimeEntryIntegrityError) as e:
        raise HTTPException(status_code=500, detail="Failed to claim reward") from e

    reward = result.reward
    return ClaimResponse(
        reward=ClaimedReward(
            id=reward.id,
            reward_type=reward.reward_type,
            external_id=reward.external_id,
            name=reward.name,
            image_url=reward.image_url,
            rarity=reward.rarity,
            is_duplicate=result.is_duplicate,
            mastery_level=result.mastery_level,
            created_at=reward.created_at,
        ),
        intervals_remaining=result.intervals_remaining,
        total_minutes=result.total_minutes,
    )


@router.get("/status", response_model=RewardStatusResponse)
async def status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> RewardStatusResponse:
    """Claimable rewards and progress per activity."""
    summary = await get_reward_status(db, user.id)
    return RewardStatusResponse(
        total_claimable=summary.total_claimable,
        activities=[
            ActivityStatus(
                activity_id=row.activity_id,
                activity_name=row.activity_name,
                total_minutes=row.eligibility.total_minutes,
                intervals_rewarded=row.eligibility.intervals_rewarded,
                claimable=row.eligibility.claimable,
                progress_to_next=row.eligibility.progress,
            )
            for row in summary.activities
        ],
    )


@router.get("", response_model=CollectionResponse)
async def collection(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CollectionResponse:
    """Everything the user has won, plus champion mastery."""
    result = await get_collection(db, user.id)
    return CollectionResponse(
        rewards=[RewardResponse.model_validate(r) for r in result.rewards],
        champion_mastery=[MasteryResponse.model_validate(m) for m in result.mastery],
        stats=CollectionStats(
            total_rewards=len(result.rewards),
            champions_collected=result.champions_collected,
            max_mastery_champions=result.max_mastery_champions,
        ),
    )
