"""Data models for the food manager."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _current_utc() -> datetime:
    """Return a timezone-aware UTC timestamp."""

    return datetime.now(timezone.utc)


def _new_food_id() -> str:
    return uuid4().hex


class FoodType(str, Enum):
    UPH = "uph"
    FRESH = "fresh"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class FoodInput(BaseModel):
    """Normalized create/update payload produced by validation."""

    name: str
    ingredients: str
    description: str
    type: FoodType
    image_url: Optional[str] = None


class Food(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=_new_food_id)
    name: str = Field(..., min_length=1)
    ingredients: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    type: FoodType
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    created_at: datetime = Field(default_factory=_current_utc, alias="createdAt")
    updated_at: datetime = Field(default_factory=_current_utc, alias="updatedAt")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    limit: int
    offset: int
    has_more: bool = Field(..., alias="hasMore")


class FoodPage(BaseModel):
    foods: List[Food] = Field(default_factory=list)
    pagination: Pagination

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class SessionUser(BaseModel):
    id: int
    email: str
    name: str
