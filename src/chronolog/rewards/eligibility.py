"""Claimable-interval arithmetic.

Every full 15 minutes of completed time on an activity earns one roulette
spin. ``intervals_rewarded`` counts spins already taken.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.db.models import Activity
from chronolog.rewards.errors import ActivityNotFoundError
from chronolog.tracking.time_service import get_activity_stats

REWARD_INTERVAL_SECONDS = 15 * 60


@dataclass(frozen=True)
class Eligibility:
    total_seconds: int
    total_intervals: int
    intervals_rewarded: int
    claimable: int
    progress: float
    total_minutes: int


def compute_eligibility(total_seconds: int, intervals_rewarded: int) -> Eligibility:
    """Pure claimable/progress computation.

    ``progress`` is the fraction of the current partial interval and does not
    depend on whether earlier intervals have been claimed.
    """
    total_intervals = total_seconds // REWARD_INTERVAL_SECONDS
    return Eligibility(
        total_seconds=total_seconds,
        total_intervals=total_intervals,
        intervals_rewarded=intervals_rewarded,
        claimable=max(0, total_intervals - intervals_rewarded),
        progress=(total_seconds % REWARD_INTERVAL_SECONDS) / REWARD_INTERVAL_SECONDS,
        total_minutes=total_seconds // 60,
    )


async def eligibility_for(db: AsyncSession, activity: Activity) -> Eligibility:
    stats = await get_activity_stats(db, activity.id)
    return compute_eligibility(stats.total_seconds, activity.intervals_rewarded)


async def calculate_claimable(db: AsyncSession, activity_id: int) -> Eligibility:
    """Eligibility of a live activity.

    Raises:
        ActivityNotFoundError: If the activity does not exist or is deleted.
    """
    activity = await db.get(Activity, activity_id)
    if activity is None or activity.deleted_at is not None:
        raise ActivityNotFoundError(activity_id)
    return await eligibility_for(db, activity)
