"""Interval scheduler for the repeating auto-commit action."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, Callable, Coroutine, Optional
from uuid import uuid4

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MAX_INSTANCES, EVENT_JOB_MISSED
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from autocommit.logging_config import get_logger

logger = get_logger(__name__)

AsyncTask = Callable[..., Coroutine[Any, Any, Any]]


class ScheduledTask:
    """Metadata about a scheduled task."""

    def __init__(self, task_id: str, name: str, interval_seconds: int) -> None:
        self.task_id = task_id
        self.name = name
        self.interval_seconds = interval_seconds
        self.last_run: Optional[dt.datetime] = None
        self.run_count: int = 0


class SchedulerService:
    """Owns one AsyncIOScheduler and the interval jobs registered on it."""

    def __init__(self) -> None:
        self._scheduler = AsyncIOScheduler(
            job_defaults={
                "misfire_grace_time": 30,
                "coalesce": True,
                "max_instances": 1,  # a slow tick never overlaps the next one
            },
        )
        self._scheduler.add_listener(
            self._on_job_event,
            EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED | EVENT_JOB_MAX_INSTANCES,
        )
        self._tasks: dict[str, ScheduledTask] = {}

    @property
    def running(self) -> bool:
        return self._scheduler.running

    async def start(self) -> None:
        """Start the scheduler (idempotent — safe to call multiple times)."""
        if self._scheduler.running:
            return
        self._scheduler.start()
        logger.info("scheduler_started")

    @staticmethod
    def _on_job_event(event) -> None:
        """Log APScheduler job events for diagnostics."""
        job_id = getattr(event, "job_id", "?")
        if event.code == EVENT_JOB_EXECUTED:
            logger.debug("apscheduler_job_executed", job_id=job_id)
        elif event.code == EVENT_JOB_ERROR:
            logger.error("apscheduler_job_error", job_id=job_id, error=str(getattr(event, "exception", "")))
        elif event.code == EVENT_JOB_MISSED:
            logger.warning("apscheduler_job_missed", job_id=job_id)
        elif event.code == EVENT_JOB_MAX_INSTANCES:
            logger.warning("apscheduler_job_skipped_busy", job_id=job_id)

    async def stop(self) -> None:
        """Shut down the scheduler without waiting for running jobs."""
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=False)
        # AsyncIOScheduler defers shutdown to the loop; let it run.
        await asyncio.sleep(0)
        self._tasks.clear()
        logger.info("scheduler_stopped")

    def schedule_interval(self, name: str, func: AsyncTask, seconds: int) -> str:
        """Run ``func`` every ``seconds``, first firing one interval from now.

        Exceptions escaping ``func`` are logged and swallowed so a failing run
        never removes the job.
        """
        task_id = str(uuid4())

        async def _wrapper():
            try:
                await func()
                logger.debug("interval_task_executed", task_id=task_id, name=name)
            except Exception as exc:
                logger.error("interval_task_failed", task_id=task_id, name=name, error=str(exc))
            finally:
                meta = self._tasks.get(task_id)
                if meta:
                    meta.last_run = dt.datetime.now(dt.UTC)
                    meta.run_count += 1

        self._scheduler.add_job(
            _wrapper,
            trigger=IntervalTrigger(seconds=seconds),
            id=task_id,
            name=name,
        )
        self._tasks[task_id] = ScheduledTask(task_id=task_id, name=name, interval_seconds=seconds)
        logger.info("task_scheduled_interval", task_id=task_id, name=name, interval_seconds=seconds)
        return task_id

    def cancel_task(self, task_id: str) -> bool:
        """Remove a scheduled job. Returns False if it was not known."""
        task = self._tasks.pop(task_id, None)
        if task is None:
            return False
        try:
            self._scheduler.remove_job(task_id)
        except JobLookupError:
            logger.debug("task_already_removed", task_id=task_id)
        logger.info("task_cancelled", task_id=task_id, name=task.name)
        return True

    def get_task(self, task_id: str) -> Optional[ScheduledTask]:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[ScheduledTask]:
        """List all registered tasks."""
        return list(self._tasks.values())
