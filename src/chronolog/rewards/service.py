"""Reward claiming, status and collection queries."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.catalog.snapshot import CatalogSnapshot
from chronolog.db.models import Activity, ChampionMastery, UserReward
from chronolog.randomness import RandomSource
from chronolog.rewards.eligibility import Eligibility, eligibility_for
from chronolog.rewards.errors import ActivityNotFoundError, NothingToClaimError, RewardError, StorageFailureError
from chronolog.rewards.mastery import MAX_MASTERY_LEVEL, record_champion_draw
from chronolog.rewards.roulette import RewardType, draw_reward
from chronolog.tracking.time_service import TimeEntryIntegrityError

logger = structlog.get_logger()


@dataclass
class ClaimResult:
    reward: UserReward
    intervals_remaining: int
    total_minutes: int
    is_duplicate: bool = False
    mastery_level: int = 0


@dataclass
class ActivityRewardStatus:
    activity_id: int
    activity_name: str
    eligibility: Eligibility


@dataclass
class RewardStatus:
    total_claimable: int = 0
    activities: list[ActivityRewardStatus] = field(default_factory=list)


@dataclass
class Collection:
    rewards: list[UserReward]
    mastery: list[ChampionMastery]

    @property
    def champions_collected(self) -> int:
        return len(self.mastery)

    @property
    def max_mastery_champions(self) -> int:
        return sum(1 for m in self.mastery if m.mastery_level >= MAX_MASTERY_LEVEL)


def locked_activity_query(user_id: int, activity_id: int) -> Select[tuple[Activity]]:
    """SELECT ... FOR UPDATE of one live activity owned by the user."""
    return (
        select(Activity)
        .where(
            Activity.id == activity_id,
            Activity.user_id == user_id,
            Activity.deleted_at.is_(None),
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def _lock_activity(db: AsyncSession, user_id: int, activity_id: int) -> Activity:
    """Load the activity row FOR UPDATE so concurrent claims queue behind us."""
    result = await db.execute(locked_activity_query(user_id, activity_id))
    activity = result.scalars().first()
    if activity is None:
        raise ActivityNotFoundError(activity_id)
    return activity


async def claim_reward(
    db: AsyncSession,
    user_id: int,
    activity_id: int,
    snapshot: CatalogSnapshot,
    rng: RandomSource,
) -> ClaimResult:
    """Spend one claimable interval on a roulette spin.

    Everything (reward row, mastery bump, interval counter) is committed in
    one transaction; on any failure nothing is written.

    Raises:
        ActivityNotFoundError: Activity missing, deleted or not the user's.
        NothingToClaimError: No full interval is waiting.
        GenerationUnavailableError: The catalog bucket drawn is empty.
        StorageFailureError: The database rejected the writes.
    """
    try:
        activity = await _lock_activity(db, user_id, activity_id)
        eligibility = await eligibility_for(db, activity)
        if eligibility.claimable == 0:
            raise NothingToClaimError(eligibility.progress)

        drawn = draw_reward(snapshot, eligibility.total_minutes, rng)

        is_duplicate = False
        mastery_level = 0
        if drawn.reward_type is RewardType.CHAMPION and drawn.champion is not None:
            outcome = await record_champion_draw(db, user_id, drawn.champion, drawn.image_url)
            is_duplicate = outcome.is_duplicate
            mastery_level = outcome.mastery_level

        reward = UserReward(
            user_id=user_id,
            activity_id=activity.id,
            reward_type=drawn.reward_type.value,
            external_id=drawn.external_id,
            name=drawn.name,
            image_url=drawn.image_url,
            rarity=drawn.rarity.value,
        )
        db.add(reward)
        activity.intervals_rewarded += 1
        await db.commit()
    except (RewardError, TimeEntryIntegrityError):
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("reward_claim_storage_failed", user_id=user_id, activity_id=activity_id)
        msg = "Failed to save reward"
        raise StorageFailureError(msg) from e

    logger.info(
        "reward_claimed",
        user_id=user_id,
        activity_id=activity_id,
        reward_type=reward.reward_type,
        external_id=reward.external_id,
        catalog_version=snapshot.version,
    )
    return ClaimResult(
        reward=reward,
        intervals_remaining=eligibility.claimable - 1,
        total_minutes=eligibility.total_minutes,
        is_duplicate=is_duplicate,
        mastery_level=mastery_level,
    )


async def get_reward_status(db: AsyncSession, user_id: int) -> RewardStatus:
    """Claimable intervals across every live activity of the user.

    Activities with neither a claimable interval nor partial progress are
    left out of the list. Activities whose entries fail integrity checks are
    logged and skipped.
    """
    result = await db.execute(
        select(Activity).where(Activity.user_id == user_id, Activity.deleted_at.is_(None)).order_by(Activity.id)
    )
    status = RewardStatus()
    for activity in result.scalars().all():
        try:
            eligibility = await eligibility_for(db, activity)
        except TimeEntryIntegrityError as e:
            logger.warning("reward_status_skipped", activity_id=activity.id, error=str(e))
            continue
        status.total_claimable += eligibility.claimable
        if eligibility.claimable > 0 or eligibility.progress > 0:
            status.activities.append(
                ActivityRewardStatus(activity_id=activity.id, activity_name=activity.name, eligibility=eligibility)
            )
    return status


async def get_collection(db: AsyncSession, user_id: int) -> Collection:
    """The user's rewards (newest first) and champion mastery records."""
    rewards = await db.execute(
        select(UserReward)
        .where(UserReward.user_id == user_id)
        .order_by(UserReward.created_at.desc(), UserReward.id.desc())
    )
    mastery = await db.execute(
        select(ChampionMastery)
        .where(ChampionMastery.user_id == user_id)
        .order_by(ChampionMastery.mastery_level.desc(), ChampionMastery.times_obtained.desc())
    )
    return Collection(rewards=list(rewards.scalars().all()), mastery=list(mastery.scalars().all()))
