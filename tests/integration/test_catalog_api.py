"""Catalog stats and refresh endpoints."""

from __future__ import annotations

import httpx
import pytest
from httpx import AsyncClient

from chronolog.catalog.client import DataDragonClient


def _client_for(documents: dict) -> DataDragonClient:
    def handler(request: httpx.Request) -> httpx.Response:
        body = documents.get(request.url.path)
        return httpx.Response(200, json=body) if body is not None else httpx.Response(404)

    return DataDragonClient(base_url="https://ddragon.leagueoflegends.com", transport=httpx.MockTransport(handler))


class TestCatalogApi:
    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient):
        response = await client.get("/api/v1/catalog/stats")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "14.1.1"
        assert (data["champions"], data["items"], data["icons"], data["skins"]) == (2, 2, 2, 2)

    @pytest.mark.asyncio
    async def test_refresh_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/catalog/refresh")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_swaps_snapshot(self, app, authed_client: AsyncClient):
        app.state.catalog_client = _client_for(
            {
                "/api/versions.json": ["15.1.1"],
                "/cdn/15.1.1/data/en_US/champion.json": {"data": {"Lux": {"id": "Lux", "name": "Lux"}}},
                "/cdn/15.1.1/data/en_US/item.json": {"data": {"1001": {"name": "Boots"}}},
                "/cdn/15.1.1/data/en_US/profileicon.json": {"data": {"1": {}}},
                "/cdn/15.1.1/data/en_US/champion/Lux.json": {
                    "data": {"Lux": {"skins": [{"num": 0, "name": "default"}, {"num": 7, "name": "Elementalist Lux"}]}}
                },
            }
        )
        response = await authed_client.post("/api/v1/catalog/refresh")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "15.1.1"
        assert data["skins"] == 1
        assert data["last_refreshed"] is not None
        assert app.state.catalog.snapshot.version == "15.1.1"

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_catalog(self, app, authed_client: AsyncClient):
        app.state.catalog_client = _client_for({})
        response = await authed_client.post("/api/v1/catalog/refresh")
        assert response.status_code == 502
        assert app.state.catalog.snapshot.version == "14.1.1"
