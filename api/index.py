"""
Marketplace cron service - Main FastAPI Application

Single entry point for the maintenance endpoints. The cron routes are
mounted twice: under /api/cron, where setup-cron points the scheduled jobs,
and under /functions/v1 for callers still using edge-function style paths.
"""
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Vercel runs this file from api/; make the project root importable
_base_path = Path(__file__).parent.parent
if str(_base_path) not in sys.path:
    sys.path.insert(0, str(_base_path))

from marketplace import __version__
from marketplace.models import utcnow_iso
from marketplace.routers import CORS_ALLOW_HEADERS, cron_router

app = FastAPI(
    title="Marketplace Cron Service",
    description="Order expiration and scheduled maintenance for the marketplace",
    version=__version__,
)

# Browser pre-flights (Origin + Access-Control-Request-Method)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)

app.include_router(cron_router, prefix="/api/cron")
app.include_router(cron_router, prefix="/functions/v1")


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "version": __version__, "timestamp": utcnow_iso()}
