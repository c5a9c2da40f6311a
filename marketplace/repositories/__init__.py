"""
Repository Pattern for Database Operations

- OrderRepository: expiration procedure, order statistics
- ConversationRepository: purge of permanently deleted conversations
"""
from .conversation_repo import ConversationRepository
from .order_repo import OrderRepository

__all__ = [
    "ConversationRepository",
    "OrderRepository",
]
