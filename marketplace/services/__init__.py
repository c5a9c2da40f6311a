"""Maintenance workers and the cron registrar."""
from .conversation_cleanup import CleanupResult, ConversationCleanupWorker
from .cron_setup import RegistrationResult, SchedulerRegistrar, default_jobs
from .expiration import ExpirationResult, ExpirationWorker

__all__ = [
    "CleanupResult",
    "ConversationCleanupWorker",
    "ExpirationResult",
    "ExpirationWorker",
    "RegistrationResult",
    "SchedulerRegistrar",
    "default_jobs",
]
