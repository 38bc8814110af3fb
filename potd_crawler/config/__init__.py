"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    AppConfig,
    DisplayConfig,
    ResilienceConfig,
    ScheduleConfig,
    ScheduleType,
    SourceConfig,
    SummarizerConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DisplayConfig",
    "ResilienceConfig",
    "ScheduleConfig",
    "ScheduleType",
    "SourceConfig",
    "SummarizerConfig",
]
