"""Pydantic models describing the acquisition pipeline configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_PAGE_URL = "https://en.wikipedia.org/wiki/Main_Page"
DEFAULT_USER_AGENT = "potd-crawler/0.1 (picture of the day mirror; contact: ops@example.com)"


class ScheduleType(str, Enum):
    """Scheduler modes understood by the APScheduler adapter."""

    CRON = "cron"
    INTERVAL = "interval"
    ONCE = "once"


class ScheduleConfig(BaseModel):
    """When the daily acquisition job should be triggered."""

    type: ScheduleType = Field(default=ScheduleType.CRON)
    value: Any = Field(
        default="0 * * * *",
        description="Cron expression, interval seconds or ISO datetime, depending on type.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL and not isinstance(self.value, (int, float, dict)):
            raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
        if (
            self.type is ScheduleType.ONCE
            and self.value is not None
            and not isinstance(self.value, str)
        ):
            raise ValueError("Once schedule expects ISO datetime string or null")
        return self


class SourceConfig(BaseModel):
    """Where the daily picture is published and how to recognise it."""

    page_url: str = DEFAULT_PAGE_URL
    user_agent: str = DEFAULT_USER_AGENT
    content_selector: str = "#mp-tfp"
    credit_markers: list[str] = Field(
        default_factory=lambda: ["Photograph credit:", "Photograph:"]
    )
    timeout: float = 20.0

    @field_validator("user_agent", "content_selector", "page_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("value cannot be empty")
        return value.strip()

    @field_validator("credit_markers")
    @classmethod
    def _markers_present(cls, value: list[str]) -> list[str]:
        markers = [marker for marker in value if marker and marker.strip()]
        if not markers:
            raise ValueError("credit_markers requires at least one marker")
        return markers

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


class DisplayConfig(BaseModel):
    """Fixed resolution of the low-colour e-ink display."""

    width: int = 800
    height: int = 480

    @model_validator(mode="after")
    def _validate_size(self) -> "DisplayConfig":
        if self.width < 1 or self.height < 1:
            raise ValueError("display dimensions must be >= 1")
        return self


class SummarizerConfig(BaseModel):
    """Settings for the short-description summarizer."""

    enabled: bool = True
    model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    placeholder: str = "Description unavailable"
    system_prompt: str = "You are a helpful assistant that summarizes text."
    user_prompt: str = (
        "Shorten the following paragraph into a short 12 word or so sentence summary: {text}"
    )

    @field_validator("user_prompt")
    @classmethod
    def _has_text_slot(cls, value: str) -> str:
        if "{text}" not in value:
            raise ValueError("user_prompt must contain a {text} placeholder")
        return value


class ResilienceConfig(BaseModel):
    """Retry, circuit breaker and rate limit parameters for one acquisition run."""

    max_retries: int = 3
    retry_delay: float = 10.0
    failure_ratio_threshold: float = 0.5
    request_volume_threshold: int = 4
    cooldown: float = 3600.0
    rate_window: float = 600.0
    rate_limit: int = 1

    @model_validator(mode="after")
    def _validate_ranges(self) -> "ResilienceConfig":
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if not 0 < self.failure_ratio_threshold <= 1:
            raise ValueError("failure_ratio_threshold must be within (0, 1]")
        if self.request_volume_threshold < 1:
            raise ValueError("request_volume_threshold must be >= 1")
        if self.cooldown < 0:
            raise ValueError("cooldown must be >= 0")
        if self.rate_window <= 0:
            raise ValueError("rate_window must be > 0")
        if self.rate_limit < 1:
            raise ValueError("rate_limit must be >= 1")
        return self


class AppConfig(BaseModel):
    """Root configuration document (``data/config.yaml``)."""

    source: SourceConfig = Field(default_factory=SourceConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    summarizer: SummarizerConfig = Field(default_factory=SummarizerConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    storage_path: Path = Field(default=Path("data/potd.db"))
    thread_pool_workers: int = 4

    @field_validator("storage_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("thread_pool_workers")
    @classmethod
    def _positive_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("thread_pool_workers must be >= 1")
        return value

    def resolved_storage_path(self, base_dir: Path) -> Path:
        """Return the record database path relative to the project root."""

        if not self.storage_path.is_absolute():
            return (base_dir / self.storage_path).resolve()
        return self.storage_path


__all__ = [
    "AppConfig",
    "DisplayConfig",
    "ResilienceConfig",
    "ScheduleConfig",
    "ScheduleType",
    "SourceConfig",
    "SummarizerConfig",
]
