"""Data Dragon HTTP client that builds complete catalog snapshots."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from chronolog.catalog.snapshot import CatalogSnapshot, Champion, Icon, Item, Skin
from chronolog.config import Settings

logger = structlog.get_logger()


class CatalogFetchError(RuntimeError):
    """Raised when a required Data Dragon document cannot be fetched or parsed."""


class DataDragonClient:
    """Fetches versions, champions, items, icons and skins from Data Dragon.

    Skins need one request per champion; those run concurrently up to
    ``concurrency`` at a time, and a champion whose detail document fails is
    skipped rather than failing the whole refresh.
    """

    def __init__(
        self,
        base_url: str,
        locale: str = "en_US",
        concurrency: int = 8,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.locale = locale
        self.concurrency = concurrency
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> DataDragonClient:
        return cls(
            base_url=settings.datadragon_base_url,
            locale=settings.datadragon_locale,
            concurrency=settings.catalog_fetch_concurrency,
            timeout=settings.catalog_request_timeout_seconds,
        )

    async def fetch_snapshot(self) -> CatalogSnapshot:
        """Download everything and return a fully populated snapshot."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as http:
            version = await self._fetch_version(http)
            champions = await self._fetch_champions(http, version)
            items = await self._fetch_items(http, version)
            icons = await self._fetch_icons(http, version)
            skins = await self._fetch_skins(http, version, champions)

        return CatalogSnapshot(
            version=version,
            champions=tuple(champions),
            items=tuple(items),
            icons=tuple(icons),
            skins=tuple(skins),
            base_url=self.base_url,
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def _get_json(self, http: httpx.AsyncClient, path: str) -> Any:  # noqa: ANN401
        try:
            response = await http.get(path)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            msg = f"Failed to fetch {path}: {e}"
            raise CatalogFetchError(msg) from e

    def _data_path(self, version: str, document: str) -> str:
        return f"/cdn/{version}/data/{self.locale}/{document}"

    async def _fetch_version(self, http: httpx.AsyncClient) -> str:
        versions = await self._get_json(http, "/api/versions.json")
        if not versions:
            msg = "No versions found"
            raise CatalogFetchError(msg)
        return str(versions[0])

    async def _fetch_champions(self, http: httpx.AsyncClient, version: str) -> list[Champion]:
        payload = await self._get_json(http, self._data_path(version, "champion.json"))
        return [
            Champion(id=champ["id"], name=champ["name"], title=champ.get("title", ""))
            for champ in payload.get("data", {}).values()
        ]

    async def _fetch_items(self, http: httpx.AsyncClient, version: str) -> list[Item]:
        payload = await self._get_json(http, self._data_path(version, "item.json"))
        return [Item(id=item_id, name=item["name"]) for item_id, item in payload.get("data", {}).items()]

    async def _fetch_icons(self, http: httpx.AsyncClient, version: str) -> list[Icon]:
        payload = await self._get_json(http, self._data_path(version, "profileicon.json"))
        return [Icon(id=icon_id) for icon_id in payload.get("data", {})]

    async def _fetch_skins(
        self,
        http: httpx.AsyncClient,
        version: str,
        champions: list[Champion],
    ) -> list[Skin]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(champion: Champion) -> list[Skin]:
            async with semaphore:
                try:
                    payload = await self._get_json(http, self._data_path(version, f"champion/{champion.id}.json"))
                except CatalogFetchError:
                    logger.warning("champion_skins_skipped", champion_id=champion.id, exc_info=True)
                    return []

            skins: list[Skin] = []
            for detail in payload.get("data", {}).values():
                for skin in detail.get("skins", []):
                    # Skin 0 is the base model, not a collectible.
                    if skin["num"] == 0:
                        continue
                    skins.append(
                        Skin(
                            champion_id=champion.id,
                            champion_name=champion.name,
                            skin_num=int(skin["num"]),
                            name=skin["name"],
                        )
                    )
            return skins

        per_champion = await asyncio.gather(*(_one(c) for c in champions))
        return [skin for skins in per_champion for skin in skins]
