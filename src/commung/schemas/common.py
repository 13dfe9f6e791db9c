"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """The ``{"data": ...}`` envelope every successful response uses."""

    data: T


class OffsetPage(BaseModel, Generic[T]):
    """A page of results fetched with ``limit``/``offset``."""

    data: list[T]
    limit: int
    offset: int
    total: int


class ImageOut(BaseModel):
    id: str
    url: str
    filename: str
    content_type: str
    size_bytes: int

    model_config = ConfigDict(from_attributes=True)

