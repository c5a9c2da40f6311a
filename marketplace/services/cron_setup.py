"""
Scheduler Registrar

Installs the recurring jobs that drive the maintenance workers. Meant to
run once per deployment (HTTP endpoint or ``scripts/setup_cron.py``).
Jobs are upserted by name, so running it again replaces the definitions
instead of adding duplicates.
"""
from dataclasses import dataclass, field
from typing import Sequence

from marketplace.config import Settings
from marketplace.errors import SchedulerRegistrationError, error_message
from marketplace.logging import get_logger
from marketplace.models import utcnow_iso
from marketplace.observability import ErrorReporter
from marketplace.scheduling import HttpTarget, ScheduledJob, SchedulerClient

logger = get_logger(__name__)

COMPONENT = "setup-cron"

EXPIRE_ORDERS_JOB = "expire-orders-hourly"
EXPIRE_ORDERS_FUNCTION = "expire-orders"
CLEANUP_CONVERSATIONS_JOB = "cleanup-deleted-conversations-daily"
CLEANUP_CONVERSATIONS_FUNCTION = "cleanup-deleted-conversations"

REGISTERED_MESSAGE = "Cron job for order expiration set up successfully"


def build_expire_orders_job(settings: Settings) -> ScheduledJob:
    return ScheduledJob(
        name=EXPIRE_ORDERS_JOB,
        cron_expression=settings.expire_orders_cron,
        target=HttpTarget.with_bearer(
            settings.function_url(EXPIRE_ORDERS_FUNCTION),
            settings.scheduled_call_token,
        ),
    )


def build_cleanup_job(settings: Settings) -> ScheduledJob:
    return ScheduledJob(
        name=CLEANUP_CONVERSATIONS_JOB,
        cron_expression=settings.cleanup_cron,
        target=HttpTarget.with_bearer(
            settings.function_url(CLEANUP_CONVERSATIONS_FUNCTION),
            settings.scheduled_call_token,
        ),
    )


def default_jobs(settings: Settings) -> list[ScheduledJob]:
    """
    Jobs installed by a plain registration run.

    The expiration job always comes first so its schedule is the one
    reported back to the caller.
    """
    jobs = [build_expire_orders_job(settings)]
    if settings.register_cleanup_job:
        jobs.append(build_cleanup_job(settings))
    return jobs


@dataclass
class RegistrationResult:
    schedule: str
    jobs: list[str]
    message: str = REGISTERED_MESSAGE
    timestamp: str = field(default_factory=utcnow_iso)


class SchedulerRegistrar:
    """Upserts job definitions into a SchedulerClient."""

    def __init__(self, scheduler: SchedulerClient, reporter: ErrorReporter) -> None:
        self.scheduler = scheduler
        self.reporter = reporter

    async def register(self, jobs: Sequence[ScheduledJob]) -> RegistrationResult:
        """
        Upsert all jobs in a single scheduler call.

        Either every job gets its new definition or none does; a failure
        leaves the previously registered jobs untouched.

        Raises:
            SchedulerRegistrationError: the scheduler rejected the batch
        """
        if not jobs:
            raise SchedulerRegistrationError("No cron jobs to register")

        names = [job.name for job in jobs]
        logger.info(f"Setting up cron jobs: {', '.join(names)}")
        try:
            job_ids = await self.scheduler.upsert_jobs(jobs)
        except Exception as e:
            self.reporter.report(COMPONENT, "upsert_jobs", e, context={"jobs": names}, fatal=True)
            raise SchedulerRegistrationError(
                f"Failed to register cron jobs {', '.join(names)}: {error_message(e)}"
            ) from e

        for job in jobs:
            logger.info(f"Cron job {job.name} registered: {job.describe()} (id={job_ids.get(job.name)})")

        logger.info("Cron jobs created successfully")
        return RegistrationResult(
            schedule=jobs[0].describe(),
            jobs=names,
        )

    async def remove(self, name: str) -> bool:
        """Unschedule a job by name. Returns False if it was not registered."""
        try:
            removed = await self.scheduler.unschedule(name)
        except Exception as e:
            self.reporter.report(COMPONENT, "unschedule", e, context={"job": name}, fatal=True)
            raise SchedulerRegistrationError(
                f"Failed to remove cron job {name}: {error_message(e)}"
            ) from e

        if removed:
            logger.info(f"Cron job {name} removed")
        else:
            logger.info(f"Cron job {name} was not registered")
        return removed
