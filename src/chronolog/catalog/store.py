"""Holder for the current catalog snapshot.

Readers take ``store.snapshot`` once and work against that object; a refresh
builds a complete replacement first and then rebinds a single attribute, so a
reader sees either the old catalog or the new one, never a mix.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from chronolog.catalog.snapshot import EMPTY_SNAPSHOT, CatalogSnapshot

if TYPE_CHECKING:
    from chronolog.catalog.client import DataDragonClient

logger = structlog.get_logger()


class CatalogStore:
    """Owns the active ``CatalogSnapshot`` and serializes refreshes."""

    def __init__(self, snapshot: CatalogSnapshot = EMPTY_SNAPSHOT) -> None:
        self._snapshot = snapshot
        self._refresh_lock = asyncio.Lock()
        self.last_refreshed: datetime | None = None

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def swap(self, snapshot: CatalogSnapshot) -> CatalogSnapshot:
        """Install ``snapshot`` and return the one it replaced."""
        previous = self._snapshot
        self._snapshot = snapshot
        self.last_refreshed = datetime.now(timezone.utc)
        return previous

    async def refresh(self, client: DataDragonClient) -> CatalogSnapshot:
        """Fetch a fresh snapshot and swap it in.

        Concurrent callers queue on the lock; a failed fetch raises and leaves
        the current snapshot untouched.
        """
        async with self._refresh_lock:
            snapshot = await client.fetch_snapshot()
            previous = self.swap(snapshot)
        logger.info(
            "catalog_refreshed",
            version=snapshot.version,
            previous_version=previous.version or None,
            **snapshot.stats(),
        )
        return snapshot
