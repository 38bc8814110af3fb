"""Shared fixtures for the potd-crawler test suite."""

from __future__ import annotations

import io
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest
from PIL import Image

from potd_crawler.config import AppConfig, ConfigLocator, ConfigRepository, ResilienceConfig
from potd_crawler.engine import InMemoryStore
from potd_crawler.models import PictureRecord

PAGE_TEMPLATE = """
<html><body>
<div id="mp-tfp">
  <a href="/wiki/File:Example.jpg"><img src="{src}" width="300" height="200"></a>
  <p>{description}</p>
  <p><small>{credit}</small></p>
</div>
</body></html>
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep config, logs and the database out of the working tree."""

    monkeypatch.setenv("POTD_CRAWLER_HOME", str(tmp_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return tmp_path


@pytest.fixture
def app_config() -> AppConfig:
    # One-shot resilience settings: no real sleeping and no rate limiting between runs.
    return AppConfig(
        resilience=ResilienceConfig(
            max_retries=1,
            retry_delay=0,
            rate_limit=100,
            rate_window=1,
            request_volume_threshold=4,
        )
    )


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> Iterable[ConfigRepository]:
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)


@pytest.fixture
def png_factory() -> Callable[..., bytes]:
    def _builder(
        width: int = 40, height: int = 30, color: Any = (128, 128, 128), mode: str = "RGB"
    ) -> bytes:
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color).save(buffer, format="PNG")
        return buffer.getvalue()

    return _builder


@pytest.fixture
def page_factory() -> Callable[..., str]:
    def _builder(
        src: str = "//upload.wikimedia.org/wikipedia/commons/thumb/a/a4/Example.jpg/300px-Example.jpg",
        description: str = "A red fox resting in the snow near a frozen lake.",
        credit: str = "Photograph credit: Jane Doe",
    ) -> str:
        return PAGE_TEMPLATE.format(src=src, description=description, credit=credit)

    return _builder


@pytest.fixture
def record_factory(png_factory) -> Callable[..., PictureRecord]:
    def _builder(day: date, **overrides: Any) -> PictureRecord:
        base: dict[str, Any] = {
            "date": day,
            "description": f"Description for {day.isoformat()}",
            "short_description": f"Summary for {day.isoformat()}",
            "credit": "Jane Doe",
            "canonical_image_url": f"https://upload.wikimedia.org/{day.isoformat()}.png",
            "original_image": png_factory(),
            "dithered_image": png_factory(mode="1", color=1),
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        base.update(overrides)
        return PictureRecord(**base)

    return _builder


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
