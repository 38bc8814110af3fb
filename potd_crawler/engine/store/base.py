"""Record store contract consumed by the orchestrator and renditions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ...models import PictureRecord


class BaseStore(ABC):
    """Uniform store contract: three lookups and one atomic insert."""

    @abstractmethod
    def find_by_date(self, day: date) -> PictureRecord | None:
        """Return the record for ``day`` if one exists."""

    @abstractmethod
    def find_by_canonical_url(self, url: str) -> PictureRecord | None:
        """Return the most recent record sharing ``url``, any date."""

    @abstractmethod
    def find_latest(self) -> PictureRecord | None:
        """Return the record with the most recent date."""

    @abstractmethod
    def insert(self, record: PictureRecord) -> PictureRecord:
        """Persist ``record`` whole, or raise ``ConflictError`` if its date is taken."""

    @abstractmethod
    def list_recent(self, limit: int = 20) -> list[PictureRecord]:
        """Return up to ``limit`` records, newest date first."""

    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BaseStore"]
