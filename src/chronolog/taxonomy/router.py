"""Category and tag endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from chronolog.auth.dependencies import get_current_user
from chronolog.database import get_session
from chronolog.db.models import Category, Tag, User
from chronolog.taxonomy.schemas import (
    CategoryListResponse,
    MessageResponse,
    NamedResponse,
    RenameRequest,
    TagListResponse,
)
from chronolog.taxonomy.service import (
    CATEGORY_NAME_MAX,
    TAG_NAME_MAX,
    NameConflictError,
    get_live,
    list_live,
    rename,
    soft_delete,
)

categories_router = APIRouter(prefix="/api/v1/categories", tags=["Categories"])
tags_router = APIRouter(prefix="/api/v1/tags", tags=["Tags"])


# ── Categories ──


@categories_router.get("", response_model=CategoryListResponse)
async def list_categories(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_live(db, Category)
    return CategoryListResponse(categories=[NamedResponse.model_validate(r) for r in rows])


@categories_router.get("/{category_id}", response_model=NamedResponse)
async def get_category(
    category_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Category, category_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return NamedResponse.model_validate(row)


@categories_router.put("/{category_id}", response_model=NamedResponse)
async def update_category(
    category_id: int,
    body: RenameRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Category, category_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Category not found")
    try:
        await rename(db, row, body.name, CATEGORY_NAME_MAX)
    except NameConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return NamedResponse.model_validate(row)


@categories_router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Category, category_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Category not found")
    await soft_delete(db, row)
    return MessageResponse(message="Category deleted successfully")


# ── Tags ──


@tags_router.get("", response_model=TagListResponse)
async def list_tags(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_live(db, Tag)
    return TagListResponse(tags=[NamedResponse.model_validate(r) for r in rows])


@tags_router.get("/{tag_id}", response_model=NamedResponse)
async def get_tag(
    tag_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Tag, tag_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return NamedResponse.model_validate(row)


@tags_router.put("/{tag_id}", response_model=NamedResponse)
async def update_tag(
    tag_id: int,
    body: RenameRequest,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Tag, tag_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    try:
        await rename(db, row, body.name, TAG_NAME_MAX)
    except NameConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return NamedResponse.model_validate(row)


@tags_router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(
    tag_id: int,
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    row = await get_live(db, Tag, tag_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    await soft_delete(db, row)
    return MessageResponse(message="Tag deleted successfully")
