from __future__ import annotations

import io
from datetime import date

from PIL import Image

from potd_crawler.config import DisplayConfig
from potd_crawler.engine import ImageTransformer, InMemoryStore
from potd_crawler.renditions import RenditionService

TODAY = date(2024, 5, 10)


def _size(data: bytes) -> tuple[int, int]:
    return Image.open(io.BytesIO(data)).size


def _service(store: InMemoryStore, **kwargs) -> RenditionService:
    return RenditionService(store, ImageTransformer(seed=2), today=lambda: TODAY, **kwargs)


def test_picture_for_prefers_today_then_latest(memory_store: InMemoryStore, record_factory) -> None:
    service = _service(memory_store)
    assert service.picture_for() is None

    memory_store.insert(record_factory(date(2024, 5, 7)))
    memory_store.insert(record_factory(date(2024, 5, 8)))
    assert service.picture_for().date == date(2024, 5, 8)

    memory_store.insert(record_factory(TODAY))
    assert service.picture_for().date == TODAY
    assert service.picture_for(date(2024, 5, 7)).date == date(2024, 5, 7)
    assert service.picture_for(date(2024, 5, 1)) is None


def test_original_and_dithered_variants(memory_store: InMemoryStore, record_factory, png_factory) -> None:
    record = record_factory(TODAY, original_image=png_factory(width=200, height=100))
    memory_store.insert(record)
    service = _service(memory_store)

    assert service.original(TODAY) == record.original_image
    assert _size(service.original(TODAY, width=50)) == (50, 25)
    assert _size(service.dithered(TODAY, 10, 10)) == (10, 10)
    assert service.original(date(2024, 1, 1)) is None
    assert service.dithered(date(2024, 1, 1)) is None


def test_display_uses_configured_panel_size(memory_store: InMemoryStore, record_factory, png_factory) -> None:
    memory_store.insert(record_factory(date(2024, 5, 9), original_image=png_factory(width=90, height=300)))
    service = _service(memory_store, display_config=DisplayConfig(width=160, height=96))

    panel = Image.open(io.BytesIO(service.display()))
    assert panel.size == (160, 96)
    assert panel.mode == "1"
    assert service.display(date(2024, 1, 1)) is None


def test_dithered_is_stored_bytes_until_resized(memory_store: InMemoryStore, record_factory) -> None:
    record = record_factory(TODAY)
    memory_store.insert(record)
    service = _service(memory_store)

    assert service.dithered(TODAY) == record.dithered_image
    assert Image.open(io.BytesIO(service.dithered(TODAY))).mode == "1"
    assert Image.open(io.BytesIO(service.dithered(TODAY, width=20))).mode == "RGB"
