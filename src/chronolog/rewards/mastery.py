"""Champion mastery: repeat champion draws level up instead of stacking."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.catalog.snapshot import Champion
from chronolog.db.models import ChampionMastery

logger = structlog.get_logger()

MAX_MASTERY_LEVEL = 7


def mastery_level_for(times_obtained: int) -> int:
    return min(times_obtained, MAX_MASTERY_LEVEL)


@dataclass(frozen=True)
class MasteryOutcome:
    is_duplicate: bool
    mastery_level: int


async def get_mastery(db: AsyncSession, user_id: int, champion_id: str) -> ChampionMastery | None:
    result = await db.execute(
        select(ChampionMastery).where(
            ChampionMastery.user_id == user_id,
            ChampionMastery.champion_id == champion_id,
        )
    )
    return result.scalar_one_or_none()


async def record_champion_draw(
    db: AsyncSession,
    user_id: int,
    champion: Champion,
    image_url: str,
) -> MasteryOutcome:
    """Create or bump the user's mastery record for ``champion``.

    Flushes but does not commit; the claim commits everything at once.
    """
    mastery = await get_mastery(db, user_id, champion.id)
    if mastery is None:
        db.add(
            ChampionMastery(
                user_id=user_id,
                champion_id=champion.id,
                champion_name=champion.name,
                image_url=image_url,
                times_obtained=1,
                mastery_level=1,
            )
        )
        await db.flush()
        return MasteryOutcome(is_duplicate=False, mastery_level=1)

    mastery.times_obtained += 1
    mastery.mastery_level = mastery_level_for(mastery.times_obtained)
    await db.flush()
    logger.info(
        "champion_mastery_up",
        user_id=user_id,
        champion_id=champion.id,
        times_obtained=mastery.times_obtained,
        mastery_level=mastery.mastery_level,
    )
    return MasteryOutcome(is_duplicate=True, mastery_level=mastery.mastery_level)
