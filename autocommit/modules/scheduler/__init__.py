"""Interval scheduling built on APScheduler."""

from autocommit.modules.scheduler.service import ScheduledTask, SchedulerService

__all__ = ["ScheduledTask", "SchedulerService"]
