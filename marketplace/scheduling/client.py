"""Scheduler clients.

``SchedulerClient`` is the seam the registrar talks to. The pg_cron
implementation delegates to SQL functions shipped in
``supabase/migrations`` so that no job SQL is assembled in Python.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from supabase._async.client import AsyncClient

from marketplace.logging import get_logger

from .jobs import ScheduledJob

logger = get_logger(__name__)

SCHEDULE_HTTP_JOBS_RPC = "schedule_http_jobs"
UNSCHEDULE_JOB_RPC = "unschedule_job"


class SchedulerClient(ABC):
    """Named-job scheduler. Implementations must replace, never duplicate, by name."""

    @abstractmethod
    async def upsert_jobs(self, jobs: Sequence[ScheduledJob]) -> dict[str, Optional[int]]:
        """
        Create or replace every job in one all-or-nothing operation.

        Returns the scheduler's id for each job name. When this raises, no
        job has been changed.
        """

    @abstractmethod
    async def unschedule(self, name: str) -> bool:
        """Remove the job. Returns False when no job had that name."""


class PgCronSchedulerClient(SchedulerClient):
    """Schedules ``net.http_post`` calls through pg_cron."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def upsert_jobs(self, jobs: Sequence[ScheduledJob]) -> dict[str, Optional[int]]:
        # schedule_http_jobs() runs inside the RPC's transaction
        payload: list[dict[str, Any]] = [
            {
                "job_name": job.name,
                "schedule": job.cron_expression,
                "target_url": job.target.url,
                "headers": job.target.headers,
                "body": job.target.body,
            }
            for job in jobs
        ]
        result = await self.client.rpc(SCHEDULE_HTTP_JOBS_RPC, {"jobs": payload}).execute()
        returned = result.data if isinstance(result.data, dict) else {}

        job_ids: dict[str, Optional[int]] = {}
        for job in jobs:
            job_id = returned.get(job.name)
            job_ids[job.name] = job_id if isinstance(job_id, int) else None
        logger.debug(f"pg_cron job ids: {job_ids}")
        return job_ids

    async def unschedule(self, name: str) -> bool:
        result = await self.client.rpc(UNSCHEDULE_JOB_RPC, {"job_name": name}).execute()
        return bool(result.data)
