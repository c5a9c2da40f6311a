"""Pydantic models for orders, statistics and endpoint responses."""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601, the timestamp format of every response."""
    return utcnow().isoformat()


class OrderStatus(str, Enum):
    """Order lifecycle states used by the marketplace."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    INACTIVE = "inactive"


# Orders in these states are never flagged expired
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value})


class Order(BaseModel):
    """Order row as stored in the ``orders`` table (only the fields this service reads)."""
    id: str
    status: str = OrderStatus.PENDING.value
    is_expired: bool = False
    expires_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    def is_due_for_expiry(self, now: Optional[datetime] = None) -> bool:
        """
        Python mirror of the ``mark_expired_orders()`` WHERE clause.

        An order qualifies when it is not yet flagged, has a deadline that
        is not in the future, and is not in a terminal status.
        """
        if self.is_expired or self.expires_at is None:
            return False
        if self.status in TERMINAL_STATUSES:
            return False
        now = now or utcnow()
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now


class OrderStats(BaseModel):
    """Counts over non-completed orders."""
    total: int = 0
    active: int = 0
    expired: int = 0

    @classmethod
    def from_rows(cls, rows: Iterable[dict[str, Any]]) -> "OrderStats":
        """Aggregate ``{status, is_expired}`` rows."""
        total = 0
        expired = 0
        for row in rows:
            total += 1
            if row.get("is_expired"):
                expired += 1
        return cls(total=total, active=total - expired, expired=expired)

    def summary(self) -> str:
        return f"{self.total} total, {self.active} active, {self.expired} expired"


class Conversation(BaseModel):
    """Conversation row, as far as the purge job is concerned."""
    id: str
    permanently_deleted: bool = False
    permanently_deleted_at: Optional[datetime] = None

    class Config:
        extra = "ignore"


# ==================== RESPONSES ====================

class CronSuccessResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str = Field(default_factory=utcnow_iso)


class RegistrationResponse(CronSuccessResponse):
    schedule: str
    jobs: list[str] = []


class CleanupResponse(CronSuccessResponse):
    deleted: int = 0
    conversation_ids: list[str] = []


class ErrorResponse(BaseModel):
    error: str
    timestamp: str = Field(default_factory=utcnow_iso)
