"""Cron secret validation."""
import hmac
from typing import Optional

from marketplace.config import Settings


def is_authorized(authorization: Optional[str], settings: Settings) -> bool:
    """
    Check the Authorization header of a cron call.

    Without CRON_SECRET the endpoints rely on the gateway in front of them
    and every request passes.
    """
    required = settings.required_bearer
    if required is None:
        return True
    if not authorization:
        return False
    return hmac.compare_digest(authorization, f"Bearer {required}")
