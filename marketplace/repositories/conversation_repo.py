"""Conversation Repository - purge of permanently deleted conversations."""
from datetime import datetime
from typing import List

from marketplace.models import Conversation

from .base import BaseRepository


class ConversationRepository(BaseRepository):
    """Conversation database operations.

    Errors from PostgREST propagate; the cleanup worker decides which
    steps are fatal.
    """

    async def get_deleted_before(self, cutoff: datetime) -> List[Conversation]:
        """Conversations marked permanently_deleted before ``cutoff``."""
        result = await (
            self.client.table("conversations")
            .select("id, permanently_deleted, permanently_deleted_at")
            .eq("permanently_deleted", True)
            .lt("permanently_deleted_at", cutoff.isoformat())
            .execute()
        )
        return [Conversation(**row) for row in result.data or []]

    async def get_message_ids(self, conversation_ids: List[str]) -> List[str]:
        result = await (
            self.client.table("messages")
            .select("id")
            .in_("conversation_id", conversation_ids)
            .execute()
        )
        return [row["id"] for row in result.data or []]

    async def delete_messages(self, conversation_ids: List[str]) -> None:
        await self.client.table("messages").delete().in_("conversation_id", conversation_ids).execute()

    async def delete_reactions(self, message_ids: List[str]) -> None:
        if not message_ids:
            return
        await self.client.table("message_reactions").delete().in_("message_id", message_ids).execute()

    async def delete_notifications(self, conversation_ids: List[str]) -> None:
        await self.client.table("notifications").delete().in_("conversation_id", conversation_ids).execute()

    async def delete_support_tickets(self, conversation_ids: List[str]) -> None:
        await self.client.table("support_tickets").delete().in_("conversation_id", conversation_ids).execute()

    async def delete_conversations(self, conversation_ids: List[str]) -> None:
        await self.client.table("conversations").delete().in_("id", conversation_ids).execute()
