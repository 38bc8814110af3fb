"""Scheduler integration."""

from .apsched_adapter import DAILY_JOB_ID, APSchedulerAdapter

__all__ = ["APSchedulerAdapter", "DAILY_JOB_ID"]
