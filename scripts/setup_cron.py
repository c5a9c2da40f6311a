"""
Register (or remove) the pg_cron jobs that drive the maintenance workers.

Run once after deployment and again whenever SUPABASE_ANON_KEY or
CRON_SECRET is rotated, since the bearer token is stored in the job.

Usage:
    python scripts/setup_cron.py
    python scripts/setup_cron.py --dry-run
    python scripts/setup_cron.py --remove expire-orders-hourly
"""
import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

_base_path = Path(__file__).parent.parent
if str(_base_path) not in sys.path:
    sys.path.insert(0, str(_base_path))

env_path = _base_path / ".env"
if env_path.exists():
    load_dotenv(env_path)

from marketplace.config import Settings
from marketplace.db import get_supabase
from marketplace.errors import MarketplaceError
from marketplace.observability import ErrorReporter
from marketplace.scheduling import PgCronSchedulerClient
from marketplace.services import SchedulerRegistrar, default_jobs


def _mask(value: str) -> str:
    return value[:12] + "..." if len(value) > 12 else "***"


def print_jobs(jobs) -> None:
    for job in jobs:
        headers = {
            k: (_mask(v) if k.lower() == "authorization" else v)
            for k, v in job.target.headers.items()
        }
        print(f"  {job.name}")
        print(f"    schedule: {job.describe()}")
        print(f"    url:      {job.target.url}")
        print(f"    headers:  {headers}")
        print(f"    body:     {job.target.body}")


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage marketplace pg_cron jobs")
    parser.add_argument("--remove", metavar="JOB_NAME", help="Unschedule the named job instead of registering")
    parser.add_argument("--dry-run", action="store_true", help="Print the job definitions without registering")
    parser.add_argument("--skip-cleanup", action="store_true", help="Only register the order expiration job")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.skip_cleanup:
        settings = replace(settings, register_cleanup_job=False)

    try:
        if args.dry_run:
            print("Jobs that would be registered:")
            print_jobs(default_jobs(settings))
            return 0

        client = await get_supabase(settings)
        registrar = SchedulerRegistrar(PgCronSchedulerClient(client), ErrorReporter())

        if args.remove:
            removed = await registrar.remove(args.remove)
            print(f"Removed {args.remove}" if removed else f"{args.remove} was not registered")
            return 0

        jobs = default_jobs(settings)
        result = await registrar.register(jobs)
    except MarketplaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result.message)
    print(f"Schedule: {result.schedule}")
    print_jobs(jobs)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
