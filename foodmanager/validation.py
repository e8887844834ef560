"""Checks and normalization for incoming food payloads.

Everything here is side-effect free so both the JSON API and the HTML form
routes run the same rules.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from urllib.parse import urlsplit

from .errors import (
    InvalidFoodTypeError,
    InvalidImageUrlError,
    InvalidPayloadError,
    MissingFieldsError,
)
from .models import FoodInput, FoodType

REQUIRED_FIELDS = ["name", "ingredients", "description", "type"]
ALLOWED_URL_SCHEMES = {"http", "https"}


def _clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _is_missing(field: str, value: Any) -> bool:
    # A non-string type is reported by the enum check instead.
    if field == "type" and value is not None and not isinstance(value, str):
        return False
    return not _clean_text(value)


def _missing_fields(payload: Mapping[str, Any]) -> List[str]:
    return [field for field in REQUIRED_FIELDS if _is_missing(field, payload.get(field))]


def normalize_image_url(raw: Any) -> Optional[str]:
    """Trim an optional image URL, mapping blank values to ``None``."""

    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidImageUrlError(raw)
    cleaned = raw.strip()
    if not cleaned:
        return None
    parts = urlsplit(cleaned)
    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES or not parts.netloc:
        raise InvalidImageUrlError(raw)
    return cleaned


def validate_food_payload(payload: Any) -> FoodInput:
    """Return a normalized ``FoodInput`` or raise a ``ValidationError``.

    Required fields are checked before the food type, so a payload with a
    missing name and a bogus type reports the missing name.
    """

    if not isinstance(payload, Mapping):
        raise InvalidPayloadError()

    missing = _missing_fields(payload)
    if missing:
        raise MissingFieldsError(REQUIRED_FIELDS, missing)

    # Matched as sent; padding around an enum value is not trimmed.
    raw_type = payload.get("type")
    if raw_type not in FoodType.values():
        raise InvalidFoodTypeError(FoodType.values(), raw_type)

    return FoodInput(
        name=_clean_text(payload.get("name")),
        ingredients=_clean_text(payload.get("ingredients")),
        description=_clean_text(payload.get("description")),
        type=FoodType(raw_type),
        image_url=normalize_image_url(payload.get("imageUrl")),
    )


def validate_food_type_filter(value: Optional[str]) -> Optional[FoodType]:
    """Map a list filter to a ``FoodType``; unknown values are ignored."""

    if value is None:
        return None
    cleaned = value.strip()
    if cleaned not in FoodType.values():
        return None
    return FoodType(cleaned)
