"""HTTP routers."""
from .cron import CORS_ALLOW_HEADERS, router as cron_router

__all__ = ["CORS_ALLOW_HEADERS", "cron_router"]
