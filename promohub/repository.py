"""SQLite-backed storage of promotions."""

from __future__ import annotations

import os
import sqlite3
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from promohub.exceptions import PromotionIDNotFoundError
from promohub.models import ZERO_TIME, Promotion

TABLE_NAME = "promotion_table"

_COLUMNS = (
    "promotion_id",
    "promotion_name",
    "discount_type",
    "discount_value",
    "promotion_start_date",
    "promotion_end_date",
    "created_at",
    "updated_at",
    "deleted_at",
)

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    promotion_id TEXT,
    promotion_name TEXT NOT NULL,
    discount_type TEXT NOT NULL,
    discount_value REAL NOT NULL,
    promotion_start_date TEXT NOT NULL,
    promotion_end_date TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT,
    deleted_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_deleted_at ON {TABLE_NAME} (deleted_at);
"""

_INSERT = (
    f"INSERT INTO {TABLE_NAME} (id, {', '.join(_COLUMNS)}) "
    f"VALUES (?, {', '.join('?' for _ in _COLUMNS)})"
)
_UPDATE = (
    f"UPDATE {TABLE_NAME} SET {', '.join(f'{column} = ?' for column in _COLUMNS)} "
    "WHERE id = ?"
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _values(promo: Promotion) -> tuple:
    return (
        promo.promotion_id,
        promo.promotion_name,
        promo.discount_type,
        promo.discount_value,
        promo.promotion_start_date.isoformat(),
        promo.promotion_end_date.isoformat(),
        promo.created_at.isoformat(),
        promo.updated_at.isoformat(),
        promo.deleted_at.isoformat() if promo.deleted_at is not None else None,
    )


def _time(text: str | None) -> datetime:
    return datetime.fromisoformat(text) if text else ZERO_TIME


def _from_row(row: sqlite3.Row) -> Promotion:
    return Promotion(
        id=row["id"],
        promotion_id=row["promotion_id"] or "",
        promotion_name=row["promotion_name"],
        discount_type=row["discount_type"],
        discount_value=float(row["discount_value"]),
        promotion_start_date=_time(row["promotion_start_date"]),
        promotion_end_date=_time(row["promotion_end_date"]),
        created_at=_time(row["created_at"]),
        updated_at=_time(row["updated_at"]),
        deleted_at=datetime.fromisoformat(row["deleted_at"]) if row["deleted_at"] else None,
    )


class PromotionRepository:
    """Stores promotions in a SQLite database.

    Lookups and deletions see soft-deleted rows as well; the existence check
    before an update does not.
    """

    def __init__(
        self,
        database: str | os.PathLike[str] = ":memory:",
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._conn = sqlite3.connect(database)
        self._conn.row_factory = sqlite3.Row
        self._clock = clock
        with self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> PromotionRepository:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _insert(self, promo: Promotion) -> Promotion:
        now = self._clock()
        if promo.created_at == ZERO_TIME:
            promo = replace(promo, created_at=now)
        if promo.updated_at == ZERO_TIME:
            promo = replace(promo, updated_at=now)
        cursor = self._conn.execute(_INSERT, (promo.id or None, *_values(promo)))
        return replace(promo, id=cursor.lastrowid)

    def create_promotion(self, promo: Promotion) -> Promotion:
        """Insert a promotion and return it with its ID and timestamps filled in."""
        with self._conn:
            return self._insert(promo)

    def get_all_promotions(self) -> list[Promotion]:
        """Return every stored promotion, ordered by ID."""
        rows = self._conn.execute(f"SELECT * FROM {TABLE_NAME} ORDER BY id")
        return [_from_row(row) for row in rows]

    def get_promotion_by_promotion_id(self, promotion_id: str) -> Promotion:
        """Return the promotion with this promotion ID or raise PromotionIDNotFoundError."""
        row = self._conn.execute(
            f"SELECT * FROM {TABLE_NAME} WHERE promotion_id = ? LIMIT 1", (promotion_id,)
        ).fetchone()
        if row is None:
            raise PromotionIDNotFoundError("promotion not found", promotion_id)
        return _from_row(row)

    def update_promotion_by_promotion_id(self, promo: Promotion) -> Promotion:
        """Save a promotion whose promotion ID names a live record.

        All fields are written; a promotion without a row ID is inserted anew.
        """
        with self._conn:
            existing = self._conn.execute(
                f"SELECT id FROM {TABLE_NAME} "
                "WHERE promotion_id = ? AND deleted_at IS NULL ORDER BY id LIMIT 1",
                (promo.promotion_id,),
            ).fetchone()
            if existing is None:
                raise PromotionIDNotFoundError("record not found", promo.promotion_id)
            promo = replace(promo, updated_at=self._clock())
            if promo.id:
                cursor = self._conn.execute(_UPDATE, (*_values(promo), promo.id))
                if cursor.rowcount:
                    return promo
            return self._insert(promo)

    def delete_promotion_by_promotion_id(self, promotion_id: str) -> int:
        """Remove every row with this promotion ID and return how many went."""
        with self._conn:
            cursor = self._conn.execute(
                f"DELETE FROM {TABLE_NAME} WHERE promotion_id = ?", (promotion_id,)
            )
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()