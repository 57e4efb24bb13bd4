"""Catalog endpoints: inspect and refresh the in-memory collectible catalog."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from chronolog.auth.dependencies import get_current_user
from chronolog.catalog.client import CatalogFetchError, DataDragonClient
from chronolog.catalog.schemas import CatalogStatsResponse
from chronolog.catalog.store import CatalogStore
from chronolog.db.models import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/catalog", tags=["Catalog"])


def get_catalog_store(request: Request) -> CatalogStore:
    """Return the CatalogStore attached to the application."""
    return request.app.state.catalog


def get_catalog_client(request: Request) -> DataDragonClient:
    return request.app.state.catalog_client


def _stats(store: CatalogStore) -> CatalogStatsResponse:
    snapshot = store.snapshot
    return CatalogStatsResponse(
        version=snapshot.version,
        last_refreshed=store.last_refreshed,
        **snapshot.stats(),
    )


@router.get("/stats", response_model=CatalogStatsResponse)
async def catalog_stats(store: CatalogStore = Depends(get_catalog_store)) -> CatalogStatsResponse:
    """Catalog version and collection sizes."""
    return _stats(store)


@router.post("/refresh", response_model=CatalogStatsResponse)
async def refresh_catalog(
    _user: User = Depends(get_current_user),
    store: CatalogStore = Depends(get_catalog_store),
    client: DataDragonClient = Depends(get_catalog_client),
) -> CatalogStatsResponse:
    """Re-fetch the catalog from Data Dragon and swap it in."""
    try:
        await store.refresh(client)
    except CatalogFetchError as e:
        logger.warning("catalog_refresh_failed", error=str(e))
        raise HTTPException(status_code=502, detail="Catalog source unavailable") from e
    return _stats(store)
