"""Cron job definitions and scheduler clients."""
from .client import PgCronSchedulerClient, SchedulerClient
from .jobs import HttpTarget, ScheduledJob, describe_cron, validate_cron_expression

__all__ = [
    "HttpTarget",
    "PgCronSchedulerClient",
    "ScheduledJob",
    "SchedulerClient",
    "describe_cron",
    "validate_cron_expression",
]
