"""Schemas for category and tag endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class NamedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CategoryListResponse(BaseModel):
    categories: list[NamedResponse]


class TagListResponse(BaseModel):
    tags: list[NamedResponse]


class RenameRequest(BaseModel):
    name: str


class MessageResponse(BaseModel):
    message: str
