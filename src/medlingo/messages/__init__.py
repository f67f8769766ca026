"""Conversation log module for medlingo.

Provides the append-only message store and its insert subscriptions.
"""

from .base import MessageStore, MessageStoreError, Subscription
from .factory import create_message_store
from .models import Message, NewMessage, Role

__all__ = [
    "Message",
    "MessageStore",
    "MessageStoreError",
    "NewMessage",
    "Role",
    "Subscription",
    "create_message_store",
]
