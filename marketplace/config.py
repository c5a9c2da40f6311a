"""Service configuration read from the environment."""
import os
from dataclasses import dataclass
from typing import Optional

from marketplace.errors import (
    ConfigurationError,
    ERROR_CRON_TARGET_NOT_CONFIGURED,
    ERROR_CRON_TOKEN_NOT_CONFIGURED,
    ERROR_SUPABASE_NOT_CONFIGURED,
)

DEFAULT_EXPIRE_ORDERS_CRON = "0 * * * *"
DEFAULT_CLEANUP_CRON = "0 3 * * *"
DEFAULT_CLEANUP_RETENTION_DAYS = 7
MIN_CLEANUP_RETENTION_DAYS = 1

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    """Integer from the environment; unparsable or below-minimum values give the default."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


@dataclass(frozen=True)
class Settings:
    """
    Environment-derived settings.

    Values are captured once per call to ``from_env()``; the registrar bakes
    the bearer token into the job definition at registration time, so a
    rotated credential only takes effect after registering again.
    """

    supabase_url: str = ""
    service_role_key: str = ""
    anon_key: str = ""
    cron_secret: str = ""
    cron_target_base_url: str = ""
    deployment_host: str = ""
    expire_orders_cron: str = DEFAULT_EXPIRE_ORDERS_CRON
    cleanup_cron: str = DEFAULT_CLEANUP_CRON
    register_cleanup_job: bool = True
    cleanup_retention_days: int = DEFAULT_CLEANUP_RETENTION_DAYS

    @classmethod
    def from_env(cls) -> "Settings":
        supabase_url = os.environ.get("SUPABASE_URL", "").rstrip("/")
        return cls(
            supabase_url=supabase_url,
            service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            anon_key=os.environ.get("SUPABASE_ANON_KEY", ""),
            cron_secret=os.environ.get("CRON_SECRET", ""),
            cron_target_base_url=os.environ.get("CRON_TARGET_BASE_URL", "").rstrip("/"),
            deployment_host=os.environ.get("VERCEL_PROJECT_PRODUCTION_URL", "").strip().rstrip("/"),
            expire_orders_cron=os.environ.get("EXPIRE_ORDERS_CRON", "").strip()
            or DEFAULT_EXPIRE_ORDERS_CRON,
            cleanup_cron=os.environ.get("CLEANUP_CONVERSATIONS_CRON", "").strip()
            or DEFAULT_CLEANUP_CRON,
            register_cleanup_job=_env_bool("CRON_REGISTER_CLEANUP", True),
            cleanup_retention_days=_env_int(
                "CLEANUP_RETENTION_DAYS", DEFAULT_CLEANUP_RETENTION_DAYS, minimum=MIN_CLEANUP_RETENTION_DAYS
            ),
        )

    def require_supabase(self) -> None:
        """Raise ConfigurationError unless the privileged backend credentials are set."""
        if not self.supabase_url or not self.service_role_key:
            raise ConfigurationError(ERROR_SUPABASE_NOT_CONFIGURED)

    @property
    def target_base_url(self) -> str:
        """
        Base URL the scheduled HTTP calls are sent to.

        CRON_TARGET_BASE_URL wins; otherwise the cron router of the Vercel
        production deployment is used.

        Raises:
            ConfigurationError: neither value is available
        """
        if self.cron_target_base_url:
            return self.cron_target_base_url
        if self.deployment_host:
            return f"https://{self.deployment_host}/api/cron"
        raise ConfigurationError(ERROR_CRON_TARGET_NOT_CONFIGURED)

    def function_url(self, name: str) -> str:
        return f"{self.target_base_url}/{name}"

    @property
    def scheduled_call_token(self) -> str:
        """
        Bearer token embedded in scheduled calls.

        CRON_SECRET wins when set because the endpoints then require it;
        otherwise the public anon key is sent.
        """
        token = self.cron_secret or self.anon_key
        if not token:
            raise ConfigurationError(ERROR_CRON_TOKEN_NOT_CONFIGURED)
        return token

    @property
    def required_bearer(self) -> Optional[str]:
        """Bearer the cron endpoints demand, or None when auth is left to the gateway."""
        return self.cron_secret or None
