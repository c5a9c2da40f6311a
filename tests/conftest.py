"""Pytest configuration and fixtures"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, Mock

import pytest

# Set test environment variables
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_service_key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test_anon_key")
os.environ.setdefault("CRON_TARGET_BASE_URL", "https://marketplace.test/api/cron")

from marketplace.config import Settings
from marketplace.models import Order, OrderStats, OrderStatus
from marketplace.observability import ErrorReporter
from marketplace.scheduling import ScheduledJob, SchedulerClient


@pytest.fixture(autouse=True)
def no_cron_secret(monkeypatch):
    """Endpoints are open unless a test configures CRON_SECRET itself."""
    monkeypatch.delenv("CRON_SECRET", raising=False)


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://test.supabase.co",
        service_role_key="test_service_key",
        anon_key="test_anon_key",
        cron_target_base_url="https://marketplace.test/api/cron",
    )


@pytest.fixture
def reporter():
    return ErrorReporter()


@pytest.fixture
def mock_supabase_client():
    """Mock async Supabase client: builders are sync, execute() is awaited."""
    client = Mock()

    table_mock = Mock()
    for method in ("select", "insert", "update", "delete", "upsert", "eq", "neq", "lt", "in_", "limit", "order"):
        getattr(table_mock, method).return_value = table_mock
    table_mock.execute = AsyncMock(return_value=Mock(data=[], count=None))

    rpc_mock = Mock()
    rpc_mock.execute = AsyncMock(return_value=Mock(data=None))

    client.table.return_value = table_mock
    client.rpc.return_value = rpc_mock

    return client


class FakeOrderRepository:
    """
    In-memory order table.

    mark_expired() applies Order.is_due_for_expiry to every row in one
    pass, like the single UPDATE in mark_expired_orders().
    """

    def __init__(self, orders: list[Order], now: Optional[datetime] = None):
        self.orders = {o.id: o for o in orders}
        self.now = now or datetime.now(timezone.utc)
        self.mark_calls = 0
        self.updated_per_call: list[int] = []
        self.stats_error: Optional[Exception] = None
        self.mark_error: Optional[Exception] = None

    async def mark_expired(self) -> None:
        self.mark_calls += 1
        if self.mark_error:
            raise self.mark_error
        updated = 0
        for order_id, order in self.orders.items():
            if order.is_due_for_expiry(self.now):
                self.orders[order_id] = order.model_copy(update={"is_expired": True})
                updated += 1
        self.updated_per_call.append(updated)

    async def get_open_order_flags(self):
        if self.stats_error:
            raise self.stats_error
        return [
            {"status": o.status, "is_expired": o.is_expired}
            for o in self.orders.values()
            if o.status != OrderStatus.COMPLETED.value
        ]

    async def get_stats(self) -> OrderStats:
        return OrderStats.from_rows(await self.get_open_order_flags())


class FakeSchedulerClient(SchedulerClient):
    """
    pg_cron stand-in: jobs keyed by name, same id kept on replace.

    A batch containing a job listed in ``fail_on`` is rejected as a whole,
    like the rolled-back transaction of schedule_http_jobs().
    """

    def __init__(self):
        self.jobs: dict[str, ScheduledJob] = {}
        self.ids: dict[str, int] = {}
        self.fail_on: set[str] = set()
        self.batches = 0
        self._next_id = 1

    async def upsert_jobs(self, jobs) -> dict[str, Optional[int]]:
        self.batches += 1
        for job in jobs:
            if job.name in self.fail_on:
                raise RuntimeError(f"permission denied for schema cron ({job.name})")
        for job in jobs:
            if job.name not in self.ids:
                self.ids[job.name] = self._next_id
                self._next_id += 1
            self.jobs[job.name] = job
        return {job.name: self.ids[job.name] for job in jobs}

    async def unschedule(self, name: str) -> bool:
        self.ids.pop(name, None)
        return self.jobs.pop(name, None) is not None


@pytest.fixture
def now():
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_orders(now):
    """One order of every interesting kind."""
    past = now - timedelta(hours=2)
    future = now + timedelta(days=1)
    return [
        Order(id="overdue-pending", status="pending", expires_at=past),
        Order(id="overdue-in-progress", status="in_progress", expires_at=past),
        Order(id="overdue-completed", status="completed", expires_at=past),
        Order(id="overdue-cancelled", status="cancelled", expires_at=past),
        Order(id="future-pending", status="pending", expires_at=future),
        Order(id="no-deadline", status="pending", expires_at=None),
        Order(id="already-expired", status="inactive", expires_at=past, is_expired=True),
    ]


@pytest.fixture
def fake_orders(sample_orders, now):
    return FakeOrderRepository(sample_orders, now=now)


@pytest.fixture
def fake_scheduler():
    return FakeSchedulerClient()


@pytest.fixture
def make_fake_orders(now):
    def _make(orders: list[Order]) -> FakeOrderRepository:
        return FakeOrderRepository(orders, now=now)
    return _make
