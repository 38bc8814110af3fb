"""Read-side access to stored pictures and their on-demand renditions."""

from __future__ import annotations

from datetime import date
from typing import Callable

import structlog

from .config import DisplayConfig
from .engine import BaseStore, ImageTransformer
from .models import PictureRecord


class RenditionService:
    """Look up stored records and derive the image variants served to clients."""

    def __init__(
        self,
        store: BaseStore,
        transformer: ImageTransformer | None = None,
        display_config: DisplayConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.transformer = transformer or ImageTransformer()
        self.display_config = display_config or DisplayConfig()
        self._today = today
        self.logger = structlog.get_logger("potd_crawler.renditions")

    def picture_for(self, day: date | None = None) -> PictureRecord | None:
        """Return the record for ``day``; without a date, today's or else the latest."""

        if day is not None:
            return self.store.find_by_date(day)
        record = self.store.find_by_date(self._today())
        if record is None:
            record = self.store.find_latest()
            if record is not None:
                self.logger.info("rendition_fallback_latest", date=record.date.isoformat())
        return record

    def original(
        self, day: date | None, width: int | None = None, height: int | None = None
    ) -> bytes | None:
        record = self.picture_for(day)
        if record is None or not record.original_image:
            return None
        return self.transformer.scale(record.original_image, width, height)

    def dithered(
        self, day: date | None, width: int | None = None, height: int | None = None
    ) -> bytes | None:
        """Return the stored 1-bit image, resized when a width or height is given.

        Resizing resamples bicubically into RGB, so a scaled rendition carries
        grey pixels and is no longer strictly two-level. Use ``display`` for
        panel output.
        """

        record = self.picture_for(day)
        if record is None or not record.dithered_image:
            return None
        return self.transformer.scale(record.dithered_image, width, height)

    def display(self, day: date | None = None) -> bytes | None:
        """Cover-fit and dither the original for the fixed-resolution panel."""

        record = self.picture_for(day)
        if record is None or not record.original_image:
            return None
        return self.transformer.render_display(
            record.original_image, self.display_config.width, self.display_config.height
        )


__all__ = ["RenditionService"]
