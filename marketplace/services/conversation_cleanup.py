"""
Conversation Cleanup Worker

Purges conversations that were permanently deleted more than the
retention period ago, together with their messages, reactions,
notifications and support tickets.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from marketplace.config import DEFAULT_CLEANUP_RETENTION_DAYS, MIN_CLEANUP_RETENTION_DAYS
from marketplace.errors import ConfigurationError, ConversationCleanupError, error_message
from marketplace.logging import get_logger
from marketplace.models import utcnow, utcnow_iso
from marketplace.observability import ErrorReporter
from marketplace.repositories import ConversationRepository

logger = get_logger(__name__)

COMPONENT = "cleanup-deleted-conversations"
NOTHING_TO_DELETE_MESSAGE = "No conversations to delete"


@dataclass
class CleanupResult:
    message: str
    deleted: int = 0
    conversation_ids: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utcnow_iso)


class ConversationCleanupWorker:
    def __init__(
        self,
        conversations: ConversationRepository,
        reporter: ErrorReporter,
        retention_days: int = DEFAULT_CLEANUP_RETENTION_DAYS,
    ) -> None:
        if retention_days < MIN_CLEANUP_RETENTION_DAYS:
            raise ConfigurationError(f"Retention must be at least {MIN_CLEANUP_RETENTION_DAYS} day(s), got {retention_days}")
        self.conversations = conversations
        self.reporter = reporter
        self.retention_days = retention_days

    async def run(self) -> CleanupResult:
        """
        Raises:
            ConversationCleanupError: lookup, message deletion or
                conversation deletion failed
        """
        cutoff = utcnow() - timedelta(days=self.retention_days)
        logger.info(f"Searching for conversations to delete permanently, older than: {cutoff.isoformat()}")

        found = await self._fatal_step("get_deleted_before", self.conversations.get_deleted_before(cutoff))
        if not found:
            logger.info(NOTHING_TO_DELETE_MESSAGE)
            return CleanupResult(message=NOTHING_TO_DELETE_MESSAGE)

        conversation_ids = [c.id for c in found]
        logger.info(f"Found {len(conversation_ids)} conversations to delete")

        # Collected first: reactions reference messages that are about to go
        message_ids = await self._optional_step(
            "get_message_ids", self.conversations.get_message_ids(conversation_ids), default=[]
        )

        await self._fatal_step("delete_messages", self.conversations.delete_messages(conversation_ids))
        logger.info("Messages deleted successfully")

        await self._optional_step("delete_reactions", self.conversations.delete_reactions(message_ids))
        await self._optional_step("delete_notifications", self.conversations.delete_notifications(conversation_ids))
        await self._optional_step("delete_support_tickets", self.conversations.delete_support_tickets(conversation_ids))

        await self._fatal_step("delete_conversations", self.conversations.delete_conversations(conversation_ids))

        logger.info(f"Successfully deleted {len(conversation_ids)} conversations and related data")
        return CleanupResult(
            message=f"Deleted {len(conversation_ids)} conversations",
            deleted=len(conversation_ids),
            conversation_ids=conversation_ids,
        )

    async def _fatal_step(self, action: str, coro):
        try:
            return await coro
        except Exception as e:
            self.reporter.report(COMPONENT, action, e, fatal=True)
            raise ConversationCleanupError(f"{action} failed: {error_message(e)}") from e

    async def _optional_step(self, action: str, coro, default=None):
        try:
            return await coro
        except Exception as e:
            self.reporter.report(COMPONENT, action, e)
            return default
