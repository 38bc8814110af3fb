"""Persist picture records in SQLite."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from pathlib import Path
from threading import Lock

from ...errors import ConflictError
from ...infra.storage import SQLiteManager
from ...models import PictureRecord
from .base import BaseStore

_COLUMNS = (
    "date, description, short_description, credit, image_url, "
    "original_image, dithered_image, created_at"
)


class SQLiteStore(BaseStore):
    """SQLite-backed store; the UNIQUE date column is the duplicate-day backstop."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        self._conn = self.manager.connect(db_path)

    def find_by_date(self, day: date) -> PictureRecord | None:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM picture_of_the_day WHERE date = ?", (day.isoformat(),)
        )

    def find_by_canonical_url(self, url: str) -> PictureRecord | None:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM picture_of_the_day WHERE image_url = ? "
            "ORDER BY date DESC LIMIT 1",
            (url,),
        )

    def find_latest(self) -> PictureRecord | None:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM picture_of_the_day ORDER BY date DESC LIMIT 1", ()
        )

    def insert(self, record: PictureRecord) -> PictureRecord:
        with self._lock:
            try:
                # Single-statement transaction: readers see the whole row or nothing.
                with self._conn:
                    self._conn.execute(
                        f"INSERT INTO picture_of_the_day({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            record.date.isoformat(),
                            record.description,
                            record.short_description,
                            record.credit,
                            record.canonical_image_url,
                            sqlite3.Binary(record.original_image),
                            sqlite3.Binary(record.dithered_image),
                            record.created_at.isoformat(),
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                if "picture_of_the_day.date" in str(exc):
                    raise ConflictError(record.date) from exc
                raise
        return record

    def list_recent(self, limit: int = 20) -> list[PictureRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM picture_of_the_day ORDER BY date DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._to_record(row) for row in rows]

    def close(self) -> None:
        self.manager.release(self.db_path)

    # ------------------------------------------------------------------
    def _fetch_one(self, sql: str, params: tuple) -> PictureRecord | None:
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return self._to_record(row) if row is not None else None

    @staticmethod
    def _to_record(row: sqlite3.Row) -> PictureRecord:
        return PictureRecord(
            date=date.fromisoformat(row["date"]),
            description=row["description"],
            short_description=row["short_description"],
            credit=row["credit"],
            canonical_image_url=row["image_url"],
            original_image=bytes(row["original_image"]),
            dithered_image=bytes(row["dithered_image"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )


__all__ = ["SQLiteStore"]
