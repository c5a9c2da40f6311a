"""
Expire Orders Cron Job
Schedule: 0 * * * * (every hour, installed by /api/cron/setup-cron)

Standalone Vercel function for the cron routes, so the hourly job does
not cold-start the full application. Serves expire-orders, setup-cron
and cleanup-deleted-conversations under /api/cron.
"""
import sys
from pathlib import Path

# Add project root to path for imports BEFORE any marketplace.* imports
_base_path = Path(__file__).parent.parent.parent
if str(_base_path) not in sys.path:
    sys.path.insert(0, str(_base_path))

from fastapi import FastAPI

from marketplace.routers import cron_router

# ASGI app (only export app to Vercel)
app = FastAPI()
app.include_router(cron_router, prefix="/api/cron")
