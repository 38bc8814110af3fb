"""In-process record store with the same insert-or-reject semantics."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from threading import Lock

from ...errors import ConflictError
from ...models import PictureRecord
from .base import BaseStore


class InMemoryStore(BaseStore):
    """Lock-guarded dictionary keyed by date."""

    def __init__(self) -> None:
        self._records: dict[date, PictureRecord] = {}
        self._lock = Lock()

    def find_by_date(self, day: date) -> PictureRecord | None:
        with self._lock:
            return self._records.get(day)

    def find_by_canonical_url(self, url: str) -> PictureRecord | None:
        with self._lock:
            matches = [r for r in self._records.values() if r.canonical_image_url == url]
        return max(matches, key=lambda r: r.date) if matches else None

    def find_latest(self) -> PictureRecord | None:
        with self._lock:
            if not self._records:
                return None
            return self._records[max(self._records)]

    def insert(self, record: PictureRecord) -> PictureRecord:
        stored = replace(record)
        with self._lock:
            if stored.date in self._records:
                raise ConflictError(stored.date)
            self._records[stored.date] = stored
        return stored

    def list_recent(self, limit: int = 20) -> list[PictureRecord]:
        with self._lock:
            ordered = sorted(self._records.values(), key=lambda r: r.date, reverse=True)
        return ordered[:limit]


__all__ = ["InMemoryStore"]
