"""Records and run results exchanged between pipeline components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class PictureRecord:
    """One persisted picture of the day; never updated once stored."""

    date: date
    description: str
    short_description: str
    credit: str
    canonical_image_url: str
    original_image: bytes
    dithered_image: bytes
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class AcquiredAssets:
    """Everything the guarded fetch-to-transform span produces for a run."""

    description: str
    credit: str
    canonical_image_url: str
    original_image: bytes
    dithered_image: bytes
    # Populated only when the assets were copied from an earlier record.
    reused_from: PictureRecord | None = None

    @property
    def reused(self) -> bool:
        return self.reused_from is not None


class RunOutcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class RunResult:
    """Summary of one orchestrator invocation."""

    outcome: RunOutcome
    run_date: date
    reason: str | None = None
    canonical_url: str | None = None
    reused: bool = False
    record: PictureRecord | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not RunOutcome.FAILED


__all__ = ["AcquiredAssets", "PictureRecord", "RunOutcome", "RunResult"]
