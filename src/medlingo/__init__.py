"""
Medlingo: realtime bilingual doctor/patient chat with AI translation.

This package follows Parnas's information hiding principles,
where each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .cache import TranslationCache, create_cache_backend
from .conversation import ConversationSession, MessageEntry, ReconciliationLoop, project_conversation
from .messages import Message, MessageStore, NewMessage, Role, create_message_store
from .translation import HttpTranslationClient, TranslationProvider, Translator

__all__ = [
    "ConversationSession",
    "HttpTranslationClient",
    "Message",
    "MessageEntry",
    "MessageStore",
    "NewMessage",
    "ReconciliationLoop",
    "Role",
    "TranslationCache",
    "TranslationProvider",
    "Translator",
    "create_cache_backend",
    "create_message_store",
    "project_conversation",
]
