"""APScheduler-based scheduler for periodic menu imports.

Provides helpers to schedule and manage periodic import jobs.
"""
from __future__ import annotations

from datetime import timedelta
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from menusync.sync.importer import MenuImporter


class ImportScheduler:
    """Schedules periodic runs of `MenuImporter.import_menus` using AsyncIOScheduler."""

    def __init__(self) -> None:
        self._scheduler = AsyncIOScheduler()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        """Start the underlying scheduler if not already started.

        Must be called from a running event loop.
        """
        if not self._started:
            self._scheduler.start(paused=False)
            self._started = True

    def shutdown(self, *, wait: bool = True) -> None:
        """Shut down the scheduler."""
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False

    def job_ids(self) -> List[str]:
        return [job.id for job in self._scheduler.get_jobs()]

    def schedule_import(
        self,
        importer: MenuImporter,
        endpoint: str,
        *,
        collection_name: Optional[str] = None,
        interval: timedelta = timedelta(minutes=15),
        job_id: Optional[str] = None,
        replace_existing: bool = True,
    ) -> str:
        """Schedule periodic execution of `importer.import_menus(endpoint, collection_name)`.

        Parameters
        ----------
        importer: MenuImporter
            The importer to run.
        endpoint: str
            Remote menu endpoint.
        collection_name: Optional[str]
            Target collection; derived from the endpoint when omitted.
        interval: timedelta
            How often to run the import job (default 15 minutes).
        job_id: Optional[str]
            Explicit job id to allow replacing/canceling. Defaults to
            ``menu-import:<endpoint>``.
        replace_existing: bool
            If True, replace any existing job with the same id.

        Returns the job id.
        """
        job_id = job_id or f"menu-import:{endpoint}"

        async def _job() -> None:
            outcome = await importer.import_menus(endpoint, collection_name)
            if not outcome.ok:
                logger.bind(component="scheduler").warning(
                    "Scheduled import {} did not complete", job_id
                )

        trigger = IntervalTrigger(seconds=int(interval.total_seconds()))
        # max_instances=1 keeps runs of the same job from overlapping
        self._scheduler.add_job(
            _job,
            trigger=trigger,
            id=job_id,
            replace_existing=replace_existing,
            max_instances=1,
            coalesce=True,
        )
        return job_id
