"""SQLite-backed persistence for food records."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import get_settings
from .errors import PersistenceError
from .models import Food, FoodInput, FoodType

logger = logging.getLogger(__name__)

FOOD_COLUMNS = "id, name, ingredients, description, type, image_url, created_at, updated_at"
# Largest value SQLite accepts for a bound integer parameter.
MAX_SQLITE_INTEGER = 2**63 - 1


def _db_path() -> Path:
    return get_settings().database_path


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def _get_connection() -> sqlite3.Connection:
    path = _db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def _connect() -> Iterator[sqlite3.Connection]:
    """Open a connection that commits on success and always closes."""

    try:
        conn = _get_connection()
    except sqlite3.Error as exc:
        raise PersistenceError(detail=str(exc)) from exc
    try:
        with conn:
            yield conn
    except sqlite3.Error as exc:
        raise PersistenceError(detail=str(exc)) from exc
    finally:
        conn.close()


def init_db() -> None:
    """Create the foods table and its indexes if they do not exist."""

    with _connect() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS foods (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                ingredients TEXT NOT NULL,
                description TEXT NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('uph', 'fresh')),
                image_url TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_foods_type_created_at
            ON foods (type, created_at)
            """
        )
    logger.info("Database ready at %s", _db_path())


def _format_timestamp(value: datetime) -> str:
    # Fixed-width ISO strings keep ORDER BY on the text column chronological.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_food(row: sqlite3.Row) -> Food:
    return Food(
        id=row["id"],
        name=row["name"],
        ingredients=row["ingredients"],
        description=row["description"],
        type=row["type"],
        image_url=row["image_url"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_filters(food_type: Optional[FoodType], search: Optional[str]) -> Tuple[str, List[str]]:
    clauses: List[str] = []
    params: List[str] = []
    if food_type is not None:
        clauses.append("type = ?")
        params.append(food_type.value)
    if search:
        pattern = f"%{_escape_like(search.casefold())}%"
        clauses.append(
            "("
            "casefold(name) LIKE ? ESCAPE '\\' OR "
            "casefold(description) LIKE ? ESCAPE '\\' OR "
            "casefold(ingredients) LIKE ? ESCAPE '\\'"
            ")"
        )
        params.extend([pattern, pattern, pattern])
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def list_foods(
    food_type: Optional[FoodType] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Food], int]:
    """Return one page of matching foods, newest first, and the match count."""

    where, params = _build_filters(food_type, search)
    with _connect() as conn:
        rows = conn.execute(
            f"""
            SELECT {FOOD_COLUMNS}
            FROM foods
            {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        ).fetchall()
        total = conn.execute(
            f"SELECT COUNT(*) AS count FROM foods {where}",
            tuple(params),
        ).fetchone()["count"]
    return [_row_to_food(row) for row in rows], total


def count_foods_by_type() -> dict:
    """Return ``{"uph": n, "fresh": n}`` for the dashboard counters."""

    counts = {value: 0 for value in FoodType.values()}
    with _connect() as conn:
        rows = conn.execute("SELECT type, COUNT(*) AS count FROM foods GROUP BY type").fetchall()
    for row in rows:
        counts[row["type"]] = row["count"]
    return counts


def get_food(food_id: str) -> Optional[Food]:
    with _connect() as conn:
        row = conn.execute(
            f"SELECT {FOOD_COLUMNS} FROM foods WHERE id = ?",
            (food_id,),
        ).fetchone()
    return _row_to_food(row) if row else None


def food_exists(food_id: str) -> bool:
    with _connect() as conn:
        row = conn.execute("SELECT 1 FROM foods WHERE id = ?", (food_id,)).fetchone()
    return row is not None


def add_food(data: FoodInput) -> Food:
    now = datetime.now(timezone.utc)
    food = Food(
        name=data.name,
        ingredients=data.ingredients,
        description=data.description,
        type=data.type,
        image_url=data.image_url,
        created_at=now,
        updated_at=now,
    )
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO foods (
                id,
                name,
                ingredients,
                description,
                type,
                image_url,
                created_at,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                food.id,
                food.name,
                food.ingredients,
                food.description,
                food.type.value,
                food.image_url,
                _format_timestamp(food.created_at),
                _format_timestamp(food.updated_at),
            ),
        )
    return food


def update_food(food_id: str, data: FoodInput) -> Optional[Food]:
    """Replace every editable field; returns ``None`` if the row is gone."""

    updated_at = _format_timestamp(datetime.now(timezone.utc))
    with _connect() as conn:
        cursor = conn.execute(
            """
            UPDATE foods
            SET name = ?,
                ingredients = ?,
                description = ?,
                type = ?,
                image_url = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                data.name,
                data.ingredients,
                data.description,
                data.type.value,
                data.image_url,
                updated_at,
                food_id,
            ),
        )
        if cursor.rowcount == 0:
            return None
        row = conn.execute(
            f"SELECT {FOOD_COLUMNS} FROM foods WHERE id = ?",
            (food_id,),
        ).fetchone()
    return _row_to_food(row)


def delete_food(food_id: str) -> bool:
    with _connect() as conn:
        cursor = conn.execute("DELETE FROM foods WHERE id = ?", (food_id,))
    return cursor.rowcount > 0
