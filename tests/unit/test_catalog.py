"""Catalog snapshot, store and Data Dragon client."""

import asyncio

import httpx
import pytest

from chronolog.catalog.client import CatalogFetchError, DataDragonClient
from chronolog.catalog.snapshot import EMPTY_SNAPSHOT, CatalogSnapshot, Champion, Skin
from chronolog.catalog.store import CatalogStore
from tests.conftest import ScriptedRandom, make_snapshot

BASE = "https://ddragon.leagueoflegends.com"

DOCUMENTS = {
    "/api/versions.json": ["14.2.1", "14.1.1"],
    "/cdn/14.2.1/data/en_US/champion.json": {
        "data": {
            "Ahri": {"id": "Ahri", "name": "Ahri", "title": "the Nine-Tailed Fox"},
            "Garen": {"id": "Garen", "name": "Garen", "title": "The Might of Demacia"},
            "Zed": {"id": "Zed", "name": "Zed", "title": "the Master of Shadows"},
        }
    },
    "/cdn/14.2.1/data/en_US/item.json": {"data": {"1001": {"name": "Boots"}, "3078": {"name": "Trinity Force"}}},
    "/cdn/14.2.1/data/en_US/profileicon.json": {"data": {"29": {"id": 29}, "4644": {"id": 4644}}},
    "/cdn/14.2.1/data/en_US/champion/Ahri.json": {
        "data": {
            "Ahri": {
                "skins": [
                    {"num": 0, "name": "default"},
                    {"num": 1, "name": "Dynasty Ahri"},
                    {"num": 2, "name": "Midnight Ahri"},
                ]
            }
        }
    },
    "/cdn/14.2.1/data/en_US/champion/Garen.json": {
        "data": {"Garen": {"skins": [{"num": 0, "name": "default"}, {"num": 2, "name": "Desert Trooper Garen"}]}}
    },
    # Zed detail is missing: that champion's skins are skipped.
}


def _transport(documents: dict, requested: list[str] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if requested is not None:
            requested.append(request.url.path)
        body = documents.get(request.url.path)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


def _client(documents: dict = DOCUMENTS, requested: list[str] | None = None) -> DataDragonClient:
    return DataDragonClient(base_url=BASE, concurrency=2, transport=_transport(documents, requested))


class TestSnapshot:
    def test_image_urls(self):
        snapshot = make_snapshot()
        assert snapshot.champion_image_url("Ahri") == f"{BASE}/cdn/14.1.1/img/champion/Ahri.png"
        assert snapshot.item_image_url("1001") == f"{BASE}/cdn/14.1.1/img/item/1001.png"
        assert snapshot.icon_image_url("29") == f"{BASE}/cdn/14.1.1/img/profileicon/29.png"
        assert snapshot.skin_image_url("Ahri", 1) == f"{BASE}/cdn/img/champion/splash/Ahri_1.jpg"

    def test_skin_external_id(self):
        assert Skin("Ahri", "Ahri", 12, "Spirit Blossom Ahri").external_id == "Ahri_12"

    def test_random_pick_uses_source(self):
        snapshot = make_snapshot()
        rng = ScriptedRandom([1])
        assert snapshot.random_champion(rng) == Champion("Garen", "Garen", "The Might of Demacia")
        assert rng.calls == [2]

    def test_empty_collections_return_none(self):
        rng = ScriptedRandom([])
        assert EMPTY_SNAPSHOT.random_champion(rng) is None
        assert EMPTY_SNAPSHOT.random_item(rng) is None
        assert EMPTY_SNAPSHOT.random_icon(rng) is None
        assert EMPTY_SNAPSHOT.random_skin(rng) is None

    def test_snapshot_is_immutable(self):
        snapshot = make_snapshot()
        with pytest.raises(AttributeError):
            snapshot.version = "15.0.0"  # type: ignore[misc]


class TestStore:
    def test_starts_empty(self):
        store = CatalogStore()
        assert store.snapshot is EMPTY_SNAPSHOT
        assert store.last_refreshed is None

    def test_swap_leaves_captured_snapshot_untouched(self):
        """A reader holding the old snapshot keeps a consistent view after a swap."""
        old = make_snapshot()
        store = CatalogStore(old)
        captured = store.snapshot

        new = make_snapshot(version="14.2.1", champions=())
        previous = store.swap(new)

        assert previous is old
        assert store.snapshot is new
        assert captured.version == "14.1.1"
        assert len(captured.champions) == 2
        assert store.last_refreshed is not None

    @pytest.mark.asyncio
    async def test_refresh_swaps_in_fetched_snapshot(self):
        store = CatalogStore()
        snapshot = await store.refresh(_client())
        assert store.snapshot is snapshot
        assert snapshot.version == "14.2.1"

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_current(self):
        current = make_snapshot()
        store = CatalogStore(current)
        with pytest.raises(CatalogFetchError):
            await store.refresh(_client({}))
        assert store.snapshot is current

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_serialize(self):
        active = 0
        peak = 0

        class SlowClient:
            async def fetch_snapshot(self) -> CatalogSnapshot:
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return make_snapshot()

        store = CatalogStore()
        await asyncio.gather(*(store.refresh(SlowClient()) for _ in range(3)))  # type: ignore[arg-type]
        assert peak == 1


class TestDataDragonClient:
    @pytest.mark.asyncio
    async def test_fetch_snapshot(self):
        snapshot = await _client().fetch_snapshot()

        assert snapshot.version == "14.2.1"
        assert {c.id for c in snapshot.champions} == {"Ahri", "Garen", "Zed"}
        assert {i.id for i in snapshot.items} == {"1001", "3078"}
        assert {i.id for i in snapshot.icons} == {"29", "4644"}
        assert snapshot.stats() == {"champions": 3, "items": 2, "icons": 2, "skins": 3}

    @pytest.mark.asyncio
    async def test_skips_base_skin_and_failed_champions(self):
        snapshot = await _client().fetch_snapshot()
        assert {s.external_id for s in snapshot.skins} == {"Ahri_1", "Ahri_2", "Garen_2"}
        assert all(s.skin_num != 0 for s in snapshot.skins)

    @pytest.mark.asyncio
    async def test_uses_latest_version_and_locale(self):
        requested: list[str] = []
        client = DataDragonClient(base_url=BASE, locale="en_US", transport=_transport(DOCUMENTS, requested))
        await client.fetch_snapshot()
        assert requested[0] == "/api/versions.json"
        assert "/cdn/14.2.1/data/en_US/item.json" in requested
        assert not any("14.1.1" in path for path in requested)

    @pytest.mark.asyncio
    async def test_missing_versions_raises(self):
        with pytest.raises(CatalogFetchError):
            await _client({}).fetch_snapshot()

    @pytest.mark.asyncio
    async def test_empty_version_list_raises(self):
        with pytest.raises(CatalogFetchError, match="No versions"):
            await _client({"/api/versions.json": []}).fetch_snapshot()

    @pytest.mark.asyncio
    async def test_missing_item_document_raises(self):
        documents = {k: v for k, v in DOCUMENTS.items() if not k.endswith("item.json")}
        with pytest.raises(CatalogFetchError):
            await _client(documents).fetch_snapshot()
