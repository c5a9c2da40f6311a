"""Tests for the deleted-conversation cleanup worker"""
from unittest.mock import AsyncMock, Mock

import pytest

from marketplace.errors import ConfigurationError, ConversationCleanupError
from marketplace.models import Conversation
from marketplace.services import ConversationCleanupWorker


@pytest.fixture
def conversations():
    repo = Mock()
    repo.get_deleted_before = AsyncMock(return_value=[
        Conversation(id="conv-1", permanently_deleted=True),
        Conversation(id="conv-2", permanently_deleted=True),
    ])
    repo.get_message_ids = AsyncMock(return_value=["msg-1", "msg-2"])
    repo.delete_messages = AsyncMock()
    repo.delete_reactions = AsyncMock()
    repo.delete_notifications = AsyncMock()
    repo.delete_support_tickets = AsyncMock()
    repo.delete_conversations = AsyncMock()
    return repo


@pytest.mark.asyncio
async def test_nothing_to_delete(conversations, reporter):
    conversations.get_deleted_before.return_value = []

    result = await ConversationCleanupWorker(conversations, reporter).run()

    assert result.deleted == 0
    assert result.message == "No conversations to delete"
    conversations.delete_conversations.assert_not_awaited()


@pytest.mark.asyncio
async def test_deletes_conversations_and_related_rows(conversations, reporter):
    result = await ConversationCleanupWorker(conversations, reporter).run()

    ids = ["conv-1", "conv-2"]
    conversations.delete_messages.assert_awaited_once_with(ids)
    conversations.delete_reactions.assert_awaited_once_with(["msg-1", "msg-2"])
    conversations.delete_notifications.assert_awaited_once_with(ids)
    conversations.delete_support_tickets.assert_awaited_once_with(ids)
    conversations.delete_conversations.assert_awaited_once_with(ids)
    assert result.deleted == 2
    assert result.conversation_ids == ids
    assert result.message == "Deleted 2 conversations"


@pytest.mark.asyncio
async def test_retention_cutoff(conversations, reporter):
    from marketplace.models import utcnow

    await ConversationCleanupWorker(conversations, reporter, retention_days=30).run()

    cutoff = conversations.get_deleted_before.await_args.args[0]
    age = utcnow() - cutoff
    assert 29.9 < age.total_seconds() / 86400 < 30.1


@pytest.mark.parametrize("retention_days", [0, -30])
def test_non_positive_retention_is_rejected(conversations, reporter, retention_days):
    with pytest.raises(ConfigurationError):
        ConversationCleanupWorker(conversations, reporter, retention_days=retention_days)

    conversations.get_deleted_before.assert_not_called()


@pytest.mark.asyncio
async def test_optional_steps_do_not_abort(conversations, reporter):
    conversations.delete_reactions.side_effect = Exception("relation message_reactions does not exist")
    conversations.delete_support_tickets.side_effect = Exception("timeout")

    result = await ConversationCleanupWorker(conversations, reporter).run()

    assert result.deleted == 2
    conversations.delete_conversations.assert_awaited_once()
    assert [r.action for r in reporter.get_reports()] == ["delete_reactions", "delete_support_tickets"]
    assert all(not r.fatal for r in reporter.get_reports())


@pytest.mark.asyncio
async def test_message_id_lookup_failure_skips_reactions(conversations, reporter):
    conversations.get_message_ids.side_effect = Exception("boom")

    result = await ConversationCleanupWorker(conversations, reporter).run()

    assert result.deleted == 2
    conversations.delete_reactions.assert_awaited_once_with([])


@pytest.mark.asyncio
async def test_message_deletion_failure_is_fatal(conversations, reporter):
    conversations.delete_messages.side_effect = Exception("foreign key violation")

    with pytest.raises(ConversationCleanupError, match="delete_messages"):
        await ConversationCleanupWorker(conversations, reporter).run()

    conversations.delete_conversations.assert_not_awaited()
    assert reporter.get_reports()[-1].fatal is True


@pytest.mark.asyncio
async def test_lookup_failure_is_fatal(conversations, reporter):
    conversations.get_deleted_before.side_effect = Exception("connection reset")

    with pytest.raises(ConversationCleanupError):
        await ConversationCleanupWorker(conversations, reporter).run()


@pytest.mark.asyncio
async def test_repository_queries(mock_supabase_client):
    from datetime import datetime, timezone

    from marketplace.repositories import ConversationRepository

    table = mock_supabase_client.table.return_value
    table.execute.return_value = Mock(data=[{"id": "conv-1", "permanently_deleted": True, "permanently_deleted_at": None}])
    cutoff = datetime(2025, 1, 1, tzinfo=timezone.utc)

    found = await ConversationRepository(mock_supabase_client).get_deleted_before(cutoff)

    mock_supabase_client.table.assert_called_with("conversations")
    table.eq.assert_called_with("permanently_deleted", True)
    table.lt.assert_called_with("permanently_deleted_at", cutoff.isoformat())
    assert [c.id for c in found] == ["conv-1"]


@pytest.mark.asyncio
async def test_repository_skips_reactions_without_messages(mock_supabase_client):
    from marketplace.repositories import ConversationRepository

    await ConversationRepository(mock_supabase_client).delete_reactions([])

    mock_supabase_client.table.assert_not_called()
