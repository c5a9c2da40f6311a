"""
Order Expiration Worker

Flags every overdue, non-terminal order as expired and logs order
statistics. Invoked hourly by pg_cron or by an operator; both paths run
the same code.
"""
from dataclasses import dataclass, field
from typing import Optional

from marketplace.errors import OrderExpirationError, OrderStatsError
from marketplace.logging import get_logger
from marketplace.models import OrderStats, utcnow_iso
from marketplace.observability import ErrorReporter
from marketplace.repositories import OrderRepository

logger = get_logger(__name__)

COMPONENT = "expire-orders"
COMPLETED_MESSAGE = "Order expiration check completed"


@dataclass
class ExpirationResult:
    message: str = COMPLETED_MESSAGE
    timestamp: str = field(default_factory=utcnow_iso)
    stats: Optional[OrderStats] = None


class ExpirationWorker:
    """Runs one expiration pass. Stateless; safe to run concurrently."""

    def __init__(self, orders: OrderRepository, reporter: ErrorReporter) -> None:
        self.orders = orders
        self.reporter = reporter

    async def run(self, scheduled: bool = False) -> ExpirationResult:
        """
        Mark expired orders, then collect statistics.

        ``scheduled`` only shows up in the logs.

        Raises:
            OrderExpirationError: the expiration procedure failed; statistics
                are skipped in that case
        """
        source = "scheduled" if scheduled else "manual"
        logger.info(f"Starting order expiration check ({source})...")

        try:
            await self.orders.mark_expired()
        except OrderExpirationError as e:
            self.reporter.report(COMPONENT, "mark_expired_orders", e, fatal=True)
            raise

        logger.info("Successfully marked expired orders")

        stats = await self._collect_stats()
        return ExpirationResult(stats=stats)

    async def _collect_stats(self) -> Optional[OrderStats]:
        """Best-effort; failures are reported and swallowed."""
        try:
            stats = await self.orders.get_stats()
        except OrderStatsError as e:
            self.reporter.report(COMPONENT, "get_stats", e)
            return None

        logger.info(f"Order statistics: {stats.summary()}")
        return stats
