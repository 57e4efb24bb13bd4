"""Immutable catalog snapshot of Data Dragon collectibles.

A snapshot is built in full by the catalog client and never mutated
afterwards; refreshing the catalog means building a new snapshot and
swapping it into the ``CatalogStore``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from chronolog.randomness import RandomSource

DATA_DRAGON_BASE_URL = "https://ddragon.leagueoflegends.com"

T = TypeVar("T")


@dataclass(frozen=True)
class Champion:
    id: str
    name: str
    title: str = ""


@dataclass(frozen=True)
class Item:
    id: str
    name: str


@dataclass(frozen=True)
class Icon:
    id: str


@dataclass(frozen=True)
class Skin:
    champion_id: str
    champion_name: str
    skin_num: int
    name: str

    @property
    def external_id(self) -> str:
        """Stable id used for reward records, e.g. ``Ahri_1``."""
        return f"{self.champion_id}_{self.skin_num}"


def _pick(entries: Sequence[T], rng: RandomSource) -> T | None:
    if not entries:
        return None
    return entries[rng.randrange(len(entries))]


@dataclass(frozen=True)
class CatalogSnapshot:
    """A consistent, read-only view of every collectible for one game version."""

    version: str = ""
    champions: tuple[Champion, ...] = ()
    items: tuple[Item, ...] = ()
    icons: tuple[Icon, ...] = ()
    skins: tuple[Skin, ...] = ()
    base_url: str = field(default=DATA_DRAGON_BASE_URL, compare=False)

    # --- Uniform selection ---

    def random_champion(self, rng: RandomSource) -> Champion | None:
        return _pick(self.champions, rng)

    def random_item(self, rng: RandomSource) -> Item | None:
        return _pick(self.items, rng)

    def random_icon(self, rng: RandomSource) -> Icon | None:
        return _pick(self.icons, rng)

    def random_skin(self, rng: RandomSource) -> Skin | None:
        return _pick(self.skins, rng)

    # --- Image URLs (consumed by the web client, keep the shapes exact) ---

    def champion_image_url(self, champion_id: str) -> str:
        return f"{self.base_url}/cdn/{self.version}/img/champion/{champion_id}.png"

    def item_image_url(self, item_id: str) -> str:
        return f"{self.base_url}/cdn/{self.version}/img/item/{item_id}.png"

    def icon_image_url(self, icon_id: str) -> str:
        return f"{self.base_url}/cdn/{self.version}/img/profileicon/{icon_id}.png"

    def skin_image_url(self, champion_id: str, skin_num: int) -> str:
        """Splash art is not versioned on Data Dragon."""
        return f"{self.base_url}/cdn/img/champion/splash/{champion_id}_{skin_num}.jpg"

    def stats(self) -> dict[str, int]:
        return {
            "champions": len(self.champions),
            "items": len(self.items),
            "icons": len(self.icons),
            "skins": len(self.skins),
        }


EMPTY_SNAPSHOT = CatalogSnapshot()
