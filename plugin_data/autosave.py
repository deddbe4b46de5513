from __future__ import annotations

import contextlib
import inspect
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

ErrorHook = Callable[[BaseException], None]


def report_autosave_error(name: str, exc: BaseException, on_error: ErrorHook | None) -> None:
    """
    Surface an autosave failure: always logged, then handed to the host hook.
    A failing hook is logged and otherwise ignored.
    """
    logger.warning("AUTOSAVE %s: save failed, autosave stopped: %r", name, exc, exc_info=exc)
    if on_error is None:
        return
    try:
        on_error(exc)
    except Exception:
        logger.exception("AUTOSAVE %s: error hook raised", name)


class AutoSaver:
    """
    Runs ``save`` as an APScheduler interval job, first right away and then
    every ``interval`` seconds.

    ``save`` may be a plain function (use a BackgroundScheduler, the default) or
    a coroutine function (pass an AsyncIOScheduler). The first failing save
    removes the job for good (fail-stop); there is no retry.
    ``stop()`` is meant for host teardown.
    """

    def __init__(
        self,
        save: Callable[[], Any],
        interval: float,
        *,
        on_error: ErrorHook | None = None,
        name: str = "autosave",
        scheduler: BaseScheduler | None = None,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._save = save
        self._interval = float(interval)
        self._on_error = on_error
        self._name = name

        self._scheduler = scheduler if scheduler is not None else BackgroundScheduler(timezone=timezone.utc)
        self._owns_scheduler = False
        self._job_id: str | None = None
        self._halted = threading.Event()
        self._start_lock = threading.Lock()

        self.runs = 0
        self.failed = False
        self.last_error: BaseException | None = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._job_id is not None and not self._halted.is_set()

    def start(self) -> "AutoSaver":
        with self._start_lock:
            if self._job_id is not None:
                return self
            job = self._run_async if inspect.iscoroutinefunction(self._save) else self._run
            self._scheduler.add_listener(self._on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
            self._scheduler.add_job(
                job,
                trigger=IntervalTrigger(seconds=self._interval, timezone=timezone.utc),
                id=self._name,
                name=self._name,
                replace_existing=True,
                next_run_time=datetime.now(timezone.utc),
                max_instances=1,
                coalesce=True,
            )
            self._job_id = self._name
            if not self._scheduler.running:
                self._scheduler.start()
                self._owns_scheduler = True
        logger.debug("AUTOSAVE %s: every %ss", self._name, self._interval)
        return self

    def stop(self, wait: bool = True) -> None:
        self._halted.set()
        self._remove_job()
        self._scheduler.remove_listener(self._on_job_event)
        if self._owns_scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=wait)

    # The halted check covers the gap between a failed run and its error event.
    def _run(self) -> None:
        if self._halted.is_set():
            return
        try:
            self._save()
        except Exception:
            self._halted.set()
            raise

    async def _run_async(self) -> None:
        if self._halted.is_set():
            return
        try:
            await self._save()
        except Exception:
            self._halted.set()
            raise

    def _remove_job(self) -> None:
        if self._job_id is None:
            return
        with contextlib.suppress(JobLookupError):
            self._scheduler.remove_job(self._job_id)

    def _on_job_event(self, event: JobExecutionEvent) -> None:
        if event.job_id != self._job_id:
            return
        if event.exception is None:
            if not self._halted.is_set():
                self.runs += 1
            return
        self._halted.set()
        self.failed = True
        self.last_error = event.exception
        self._remove_job()
        report_autosave_error(self._name, event.exception, self._on_error)
