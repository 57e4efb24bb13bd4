"""Lookup-or-create and maintenance for categories and tags.

Both are shared, soft-deleted name tables; names match case-insensitively
after trimming. Names stay unique across deleted rows too, so asking for a
deleted name brings the old row back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TypeVar

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.db.models import Category, Tag

logger = structlog.get_logger()

NamedT = TypeVar("NamedT", Category, Tag)

CATEGORY_NAME_MAX = 50
TAG_NAME_MAX = 30


class NameConflictError(ValueError):
    """Another category or tag already uses the name."""


async def _find_by_name(db: AsyncSession, model: type[NamedT], name: str) -> NamedT | None:
    """Case-insensitive match, deleted rows included."""
    result = await db.execute(select(model).where(func.lower(model.name) == name.lower()))
    return result.scalars().first()


async def _find_or_create(db: AsyncSession, model: type[NamedT], name: str) -> NamedT:
    name = name.strip()
    if not name:
        msg = f"{model.__name__} name is required"
        raise ValueError(msg)

    existing = await _find_by_name(db, model, name)
    if existing is not None:
        if existing.deleted_at is not None:
            existing.deleted_at = None
            logger.info("taxonomy_restored", kind=model.__tablename__, id=existing.id)
        return existing

    row = model(name=name)
    db.add(row)
    await db.flush()
    logger.info("taxonomy_created", kind=model.__tablename__, id=row.id, name=name)
    return row


async def find_or_create_category(db: AsyncSession, name: str) -> Category:
    """Return the category called ``name``, creating it if needed."""
    return await _find_or_create(db, Category, name)


async def find_or_create_tag(db: AsyncSession, name: str) -> Tag:
    """Return the tag called ``name``, creating it if needed."""
    return await _find_or_create(db, Tag, name)


async def list_live(db: AsyncSession, model: type[NamedT]) -> list[NamedT]:
    result = await db.execute(select(model).where(model.deleted_at.is_(None)).order_by(model.name))
    return list(result.scalars().all())


async def get_live(db: AsyncSession, model: type[NamedT], row_id: int) -> NamedT | None:
    result = await db.execute(select(model).where(model.id == row_id, model.deleted_at.is_(None)))
    return result.scalars().first()


async def rename(db: AsyncSession, row: NamedT, name: str, max_length: int) -> NamedT:
    """Rename a category or tag.

    Raises:
        ValueError: Empty or too long name.
        NameConflictError: The name belongs to a different row.
    """
    name = name.strip()
    if not 1 <= len(name) <= max_length:
        msg = f"{type(row).__name__} name must be 1-{max_length} characters"
        raise ValueError(msg)

    clash = await _find_by_name(db, type(row), name)
    if clash is not None and clash.id != row.id:
        msg = f"{type(row).__name__} '{name}' already exists"
        raise NameConflictError(msg)

    row.name = name
    await db.commit()
    return row


async def soft_delete(db: AsyncSession, row: NamedT) -> None:
    row.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("taxonomy_deleted", kind=row.__tablename__, id=row.id)
