"""Foods and auth JSON API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Query, Response, status
from pydantic import BaseModel

from . import storage
from .auth import authenticate, clear_auth_cookie, start_session
from .config import get_settings
from .errors import AuthError, NotFoundError, PersistenceError
from .models import FoodPage, Pagination
from .validation import validate_food_payload, validate_food_type_filter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


def _failed(message: str, exc: PersistenceError) -> PersistenceError:
    logger.error("%s: %s", message, exc.detail)
    return PersistenceError(message, detail=exc.detail)


@router.get("/health", tags=["Health"])
def health() -> dict:
    return {"status": "ok"}


@router.get("/foods", tags=["Foods"], summary="List foods")
def list_foods(
    food_type: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=0, le=storage.MAX_SQLITE_INTEGER),
    offset: int = Query(0, ge=0, le=storage.MAX_SQLITE_INTEGER),
) -> dict:
    page_size = limit if limit is not None else get_settings().default_page_size
    try:
        foods, total = storage.list_foods(
            food_type=validate_food_type_filter(food_type),
            search=search,
            limit=page_size,
            offset=offset,
        )
    except PersistenceError as exc:
        raise _failed("Failed to fetch foods", exc) from exc

    page = FoodPage(
        foods=foods,
        pagination=Pagination(
            total=total,
            limit=page_size,
            offset=offset,
            has_more=offset + page_size < total,
        ),
    )
    return page.to_json()


@router.post("/foods", tags=["Foods"], status_code=status.HTTP_201_CREATED, summary="Create a food")
def create_food(payload: Any = Body(None)) -> dict:
    data = validate_food_payload(payload)
    try:
        food = storage.add_food(data)
    except PersistenceError as exc:
        raise _failed("Failed to create food", exc) from exc

    logger.info("Created food %s (%s)", food.id, food.name)
    return food.to_json()


@router.get("/foods/{food_id}", tags=["Foods"], summary="Get a food")
def read_food(food_id: str) -> dict:
    try:
        food = storage.get_food(food_id)
    except PersistenceError as exc:
        raise _failed("Failed to fetch food", exc) from exc

    if food is None:
        raise NotFoundError()
    return food.to_json()


@router.put("/foods/{food_id}", tags=["Foods"], summary="Replace a food")
def replace_food(food_id: str, payload: Any = Body(None)) -> dict:
    data = validate_food_payload(payload)
    try:
        if not storage.food_exists(food_id):
            raise NotFoundError()
        food = storage.update_food(food_id, data)
    except PersistenceError as exc:
        raise _failed("Failed to update food", exc) from exc

    # Deleted between the existence check and the write.
    if food is None:
        raise NotFoundError()
    logger.info("Updated food %s", food_id)
    return food.to_json()


@router.delete("/foods/{food_id}", tags=["Foods"], summary="Delete a food")
def remove_food(food_id: str) -> dict:
    try:
        if not storage.food_exists(food_id):
            raise NotFoundError()
        deleted = storage.delete_food(food_id)
    except PersistenceError as exc:
        raise _failed("Failed to delete food", exc) from exc

    if not deleted:
        raise NotFoundError()
    logger.info("Deleted food %s", food_id)
    return {"message": "Food deleted successfully"}


@router.post("/auth/login", tags=["Auth"], summary="Login")
def login(request: LoginRequest, response: Response) -> dict:
    settings = get_settings()
    user = authenticate(request.email, request.password, settings)
    if user is None:
        logger.warning("Failed login attempt")
        raise AuthError()

    start_session(response, user, settings)
    return {"message": "Login successful", "user": user.model_dump()}


@router.post("/auth/logout", tags=["Auth"], summary="Logout")
def logout(response: Response) -> dict:
    clear_auth_cookie(response)
    return {"message": "Logout successful"}
