"""Response schemas for catalog endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CatalogStatsResponse(BaseModel):
    version: str
    champions: int
    items: int
    icons: int
    skins: int
    last_refreshed: datetime | None = None
