from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Dict, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Form, Query, Request, status
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from . import storage
from .api import router as api_router
from .app_logging import configure_logging
from .auth import AuthGateMiddleware, authenticate, clear_auth_cookie, start_session
from .config import get_settings
from .errors import FoodManagerError, PersistenceError, ValidationError
from .models import FoodType
from .validation import validate_food_payload, validate_food_type_filter

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"
# Keeps the page offset inside the range SQLite can bind.
MAX_PAGE = 10**9

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

TYPE_BADGE_CLASSES = {
    FoodType.FRESH.value: "bg-success-subtle text-success",
    FoodType.UPH.value: "bg-primary-subtle text-primary",
}


def _food_type_badge_class(food_type: FoodType | str) -> str:
    """Return the Bootstrap badge classes for a food type."""

    value = food_type.value if isinstance(food_type, FoodType) else str(food_type)
    return TYPE_BADGE_CLASSES.get(value, "bg-secondary-subtle text-secondary")


templates.env.filters["food_type_badge_class"] = _food_type_badge_class


def _format_food_timestamp(value: datetime | str) -> str:
    """Render timestamps in the server's local timezone."""

    if isinstance(value, str):
        parsed = datetime.fromisoformat(value)
    else:
        parsed = value
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    local_dt = parsed.astimezone()
    return local_dt.strftime("%b %d, %Y %I:%M %p")


templates.env.filters["format_food_timestamp"] = _format_food_timestamp


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    storage.init_db()
    yield


app = FastAPI(title="Food Manager", lifespan=lifespan)
app.add_middleware(AuthGateMiddleware)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
app.include_router(api_router)


@app.exception_handler(FoodManagerError)
async def _handle_food_manager_error(request: Request, exc: FoodManagerError) -> JSONResponse:
    include_detail = not get_settings().is_production
    return JSONResponse(exc.to_payload(include_detail=include_detail), status_code=exc.status_code)


def _error_message(exc: FoodManagerError) -> str:
    payload = exc.to_payload()
    missing = payload.get("missing")
    if missing:
        return f"{exc.error}: {', '.join(missing)}"
    valid_types = payload.get("validTypes")
    if valid_types:
        return f"{exc.error}. Choose one of: {', '.join(valid_types)}"
    return exc.error


def _form_values(**fields: Optional[str]) -> Dict[str, str]:
    return {key: value or "" for key, value in fields.items()}


def _render_error(request: Request, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message},
        status_code=status_code,
    )


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> FileResponse:
    return FileResponse(STATIC_DIR / "favicon.svg", media_type="image/svg+xml")


@app.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    search: str = "",
    food_type_filter: str = Query("", alias="type"),
    page: int = Query(1, le=MAX_PAGE),
) -> HTMLResponse:
    settings = get_settings()
    page_size = settings.default_page_size
    page = max(page, 1)
    search_query = search.strip()
    food_type = validate_food_type_filter(food_type_filter)

    try:
        foods, total = storage.list_foods(
            food_type=food_type,
            search=search_query or None,
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        counts = storage.count_foods_by_type()
    except PersistenceError:
        logger.exception("Failed to load the food list")
        return _render_error(request, "Failed to fetch foods", status.HTTP_500_INTERNAL_SERVER_ERROR)

    base_params = {"search": search_query, "type": food_type.value if food_type else ""}
    has_more = page * page_size < total
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "foods": foods,
            "total": total,
            "counts": counts,
            "total_count": sum(counts.values()),
            "search_query": search_query,
            "selected_type": base_params["type"],
            "food_types": FoodType.values(),
            "page": page,
            "prev_url": f"/?{urlencode({**base_params, 'page': page - 1})}" if page > 1 else None,
            "next_url": f"/?{urlencode({**base_params, 'page': page + 1})}" if has_more else None,
        },
    )


@app.get("/create", response_class=HTMLResponse)
def create_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "create.html",
        {
            "food_types": FoodType.values(),
            "values": _form_values(type=FoodType.UPH.value),
            "error": None,
        },
    )


@app.post("/create", response_model=None)
def create_submission(
    request: Request,
    name: str = Form(""),
    ingredients: str = Form(""),
    description: str = Form(""),
    food_type: str = Form("", alias="type"),
    image_url: str = Form(""),
) -> Response:
    values = _form_values(
        name=name,
        ingredients=ingredients,
        description=description,
        type=food_type,
        image_url=image_url,
    )
    try:
        data = validate_food_payload(
            {
                "name": name,
                "ingredients": ingredients,
                "description": description,
                "type": food_type,
                "imageUrl": image_url,
            }
        )
        food = storage.add_food(data)
    except ValidationError as exc:
        return templates.TemplateResponse(
            request,
            "create.html",
            {"food_types": FoodType.values(), "values": values, "error": _error_message(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    except PersistenceError:
        logger.exception("Failed to create food from form")
        return _render_error(request, "Failed to create food", status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info("Created food %s (%s)", food.id, food.name)
    return RedirectResponse(url=request.url_for("home"), status_code=status.HTTP_303_SEE_OTHER)


@app.get("/foods/{food_id}", response_class=HTMLResponse)
def food_detail(request: Request, food_id: str) -> HTMLResponse:
    try:
        food = storage.get_food(food_id)
    except PersistenceError:
        logger.exception("Failed to load food %s", food_id)
        return _render_error(request, "Failed to fetch food", status.HTTP_500_INTERNAL_SERVER_ERROR)
    if food is None:
        return _render_error(request, "Food not found", status.HTTP_404_NOT_FOUND)

    return templates.TemplateResponse(
        request,
        "food_detail.html",
        {
            "food": food,
            "food_types": FoodType.values(),
            "values": _form_values(
                name=food.name,
                ingredients=food.ingredients,
                description=food.description,
                type=food.type.value,
                image_url=food.image_url,
            ),
            "error": None,
        },
    )


@app.post("/foods/{food_id}", response_model=None)
def food_edit_submit(
    request: Request,
    food_id: str,
    name: str = Form(""),
    ingredients: str = Form(""),
    description: str = Form(""),
    food_type: str = Form("", alias="type"),
    image_url: str = Form(""),
) -> Response:
    try:
        data = validate_food_payload(
            {
                "name": name,
                "ingredients": ingredients,
                "description": description,
                "type": food_type,
                "imageUrl": image_url,
            }
        )
    except ValidationError as exc:
        return _render_edit_error(
            request,
            food_id,
            _form_values(
                name=name,
                ingredients=ingredients,
                description=description,
                type=food_type,
                image_url=image_url,
            ),
            _error_message(exc),
        )

    try:
        if not storage.food_exists(food_id):
            return _render_error(request, "Food not found", status.HTTP_404_NOT_FOUND)
        updated = storage.update_food(food_id, data)
    except PersistenceError:
        logger.exception("Failed to update food %s from form", food_id)
        return _render_error(request, "Failed to update food", status.HTTP_500_INTERNAL_SERVER_ERROR)

    if updated is None:
        return _render_error(request, "Food not found", status.HTTP_404_NOT_FOUND)
    logger.info("Updated food %s", food_id)
    return RedirectResponse(
        url=request.url_for("food_detail", food_id=food_id),
        status_code=status.HTTP_303_SEE_OTHER,
    )


def _render_edit_error(request: Request, food_id: str, values: Dict[str, str], message: str) -> HTMLResponse:
    """Re-render the edit form with a validation message."""

    try:
        food = storage.get_food(food_id)
    except PersistenceError:
        logger.exception("Failed to load food %s", food_id)
        return _render_error(request, "Failed to fetch food", status.HTTP_500_INTERNAL_SERVER_ERROR)
    # No record to re-render; validation still decides the status.
    if food is None:
        return _render_error(request, message, status.HTTP_400_BAD_REQUEST)

    return templates.TemplateResponse(
        request,
        "food_detail.html",
        {"food": food, "food_types": FoodType.values(), "values": values, "error": message},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@app.post("/foods/{food_id}/delete", response_model=None)
def food_delete_action(request: Request, food_id: str) -> Response:
    try:
        if not storage.food_exists(food_id):
            return _render_error(request, "Food not found", status.HTTP_404_NOT_FOUND)
        deleted = storage.delete_food(food_id)
    except PersistenceError:
        logger.exception("Failed to delete food %s from form", food_id)
        return _render_error(request, "Failed to delete food", status.HTTP_500_INTERNAL_SERVER_ERROR)
    if not deleted:
        return _render_error(request, "Food not found", status.HTTP_404_NOT_FOUND)

    logger.info("Deleted food %s", food_id)
    return RedirectResponse(url=request.url_for("home"), status_code=status.HTTP_303_SEE_OTHER)


@app.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "login.html", {"email": "", "error": None})


@app.post("/login", response_model=None)
def login_submission(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
) -> Response:
    settings = get_settings()
    user = authenticate(email, password, settings)
    if user is None:
        logger.warning("Failed login attempt")
        return templates.TemplateResponse(
            request,
            "login.html",
            {"email": email, "error": "Invalid email or password"},
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = RedirectResponse(url=request.url_for("home"), status_code=status.HTTP_303_SEE_OTHER)
    start_session(response, user, settings)
    return response


@app.post("/logout", response_model=None)
def logout_action(request: Request) -> Response:
    response = RedirectResponse(url=request.url_for("login_form"), status_code=status.HTTP_303_SEE_OTHER)
    clear_auth_cookie(response)
    return response
