"""Order Repository - expiration and statistics queries."""
from typing import Any

from marketplace.errors import OrderExpirationError, OrderStatsError, error_message
from marketplace.models import OrderStats, OrderStatus

from .base import BaseRepository

MARK_EXPIRED_ORDERS_RPC = "mark_expired_orders"


class OrderRepository(BaseRepository):
    """Order database operations."""

    async def mark_expired(self) -> None:
        """
        Run the set-based expiration procedure.

        The whole transition is one UPDATE inside the database, so this
        never reads orders back and is safe to call concurrently.
        """
        try:
            await self.client.rpc(MARK_EXPIRED_ORDERS_RPC).execute()
        except Exception as e:
            raise OrderExpirationError(error_message(e)) from e

    async def get_open_order_flags(self) -> list[dict[str, Any]]:
        """Get ``{status, is_expired}`` for every non-completed order."""
        try:
            result = await (
                self.client.table("orders")
                .select("status, is_expired")
                .neq("status", OrderStatus.COMPLETED.value)
                .execute()
            )
        except Exception as e:
            raise OrderStatsError(error_message(e)) from e
        return result.data or []

    async def get_stats(self) -> OrderStats:
        return OrderStats.from_rows(await self.get_open_order_flags())
