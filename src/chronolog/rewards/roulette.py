"""Reward roulette: drop-rate tiers, bucket selection and catalog draws.

Longer-tracked activities shift the odds away from items toward skins.
These tiers MUST stay in sync with the odds shown by the web client.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from chronolog.catalog.snapshot import CatalogSnapshot, Champion
from chronolog.randomness import RandomSource
from chronolog.rewards.errors import GenerationUnavailableError


class RewardType(str, enum.Enum):
    ITEM = "item"
    CHAMPION = "champion"
    SKIN = "skin"
    ICON = "icon"


class Rarity(str, enum.Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"


@dataclass(frozen=True)
class DropRates:
    """Percentages per reward type; always sum to 100."""

    item: int
    champion: int
    skin: int
    icon: int

    def buckets(self) -> tuple[tuple[RewardType, int], ...]:
        # Fixed order: ties at a boundary go to the earlier type.
        return (
            (RewardType.ITEM, self.item),
            (RewardType.CHAMPION, self.champion),
            (RewardType.SKIN, self.skin),
            (RewardType.ICON, self.icon),
        )


# (minimum total minutes, rates), highest threshold first.
DROP_RATE_TIERS: tuple[tuple[int, DropRates], ...] = (
    (120, DropRates(item=10, champion=25, skin=55, icon=10)),
    (60, DropRates(item=15, champion=30, skin=40, icon=15)),
    (45, DropRates(item=25, champion=35, skin=25, icon=15)),
    (30, DropRates(item=30, champion=50, skin=10, icon=10)),
    (0, DropRates(item=60, champion=25, skin=5, icon=10)),
)

RARITY_BY_TYPE: dict[RewardType, Rarity] = {
    RewardType.ITEM: Rarity.COMMON,
    RewardType.CHAMPION: Rarity.COMMON,
    RewardType.SKIN: Rarity.RARE,
    RewardType.ICON: Rarity.EPIC,
}


def get_drop_rates(total_minutes: int) -> DropRates:
    for threshold, rates in DROP_RATE_TIERS:
        if total_minutes >= threshold:
            return rates
    return DROP_RATE_TIERS[-1][1]


def pick_reward_type(rates: DropRates, roll: int) -> RewardType:
    """Map a roll in ``[0, 100)`` onto cumulative half-open buckets."""
    upper = 0
    for reward_type, weight in rates.buckets():
        upper += weight
        if roll < upper:
            return reward_type
    msg = f"Roll {roll} outside [0, {upper})"
    raise ValueError(msg)


def spin_roulette(total_minutes: int, rng: RandomSource) -> RewardType:
    return pick_reward_type(get_drop_rates(total_minutes), rng.randrange(100))


def rarity_for(reward_type: RewardType) -> Rarity:
    return RARITY_BY_TYPE[reward_type]


@dataclass(frozen=True)
class DrawnReward:
    """A concrete collectible chosen by the roulette, not yet persisted."""

    reward_type: RewardType
    external_id: str
    name: str
    image_url: str
    rarity: Rarity
    champion: Champion | None = None


def draw_reward(snapshot: CatalogSnapshot, total_minutes: int, rng: RandomSource) -> DrawnReward:
    """Spin for a reward type, then pick uniformly from that collection.

    The caller passes one snapshot so the type and instance come from the
    same catalog version.

    Raises:
        GenerationUnavailableError: The chosen collection is empty.
    """
    reward_type = spin_roulette(total_minutes, rng)
    rarity = rarity_for(reward_type)

    if reward_type is RewardType.CHAMPION:
        champion = snapshot.random_champion(rng)
        if champion is None:
            raise GenerationUnavailableError(reward_type.value)
        return DrawnReward(
            reward_type=reward_type,
            external_id=champion.id,
            name=champion.name,
            image_url=snapshot.champion_image_url(champion.id),
            rarity=rarity,
            champion=champion,
        )

    if reward_type is RewardType.ITEM:
        item = snapshot.random_item(rng)
        if item is None:
            raise GenerationUnavailableError(reward_type.value)
        return DrawnReward(
            reward_type=reward_type,
            external_id=item.id,
            name=item.name,
            image_url=snapshot.item_image_url(item.id),
            rarity=rarity,
        )

    if reward_type is RewardType.SKIN:
        skin = snapshot.random_skin(rng)
        if skin is None:
            raise GenerationUnavailableError(reward_type.value)
        return DrawnReward(
            reward_type=reward_type,
            external_id=skin.external_id,
            name=skin.name,
            image_url=snapshot.skin_image_url(skin.champion_id, skin.skin_num),
            rarity=rarity,
        )

    icon = snapshot.random_icon(rng)
    if icon is None:
        raise GenerationUnavailableError(reward_type.value)
    return DrawnReward(
        reward_type=reward_type,
        external_id=icon.id,
        name=f"Icon #{icon.id}",
        image_url=snapshot.icon_image_url(icon.id),
        rarity=rarity,
    )
