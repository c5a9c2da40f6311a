"""
Error constants and exception types.

Message strings live here to avoid duplicating literals across routers
and services.
"""

# Auth errors
ERROR_UNAUTHORIZED = "Unauthorized"

# Configuration errors
ERROR_SUPABASE_NOT_CONFIGURED = "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
ERROR_CRON_TOKEN_NOT_CONFIGURED = "SUPABASE_ANON_KEY or CRON_SECRET must be set to register cron jobs"
ERROR_CRON_TARGET_NOT_CONFIGURED = "CRON_TARGET_BASE_URL or VERCEL_PROJECT_PRODUCTION_URL must be set to register cron jobs"

# Job errors
ERROR_INVALID_CRON_EXPRESSION = "Cron expression must have exactly five fields"


class MarketplaceError(Exception):
    """Base class for errors raised by this service."""


class ConfigurationError(MarketplaceError):
    """Required environment configuration is missing or invalid."""


class OrderExpirationError(MarketplaceError):
    """The mark_expired_orders procedure failed."""


class OrderStatsError(MarketplaceError):
    """The order statistics query failed."""


class SchedulerRegistrationError(MarketplaceError):
    """A cron job could not be upserted or removed."""


class ConversationCleanupError(MarketplaceError):
    """A mandatory step of the conversation purge failed."""


def error_message(exc: BaseException) -> str:
    """
    Human-readable message for an exception.

    PostgREST's APIError carries the useful text in ``.message``;
    everything else falls back to ``str()``.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or exc.__class__.__name__
