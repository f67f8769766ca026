"""Conversation module for medlingo.

Module structure (each module hides a design decision):
- projector.py: how the log, the cache and the viewer's filter become rows
- reconcile.py: when and how missing translations are fetched
- session.py: one viewer's wiring of store, provider and cache
"""

from .projector import MessageEntry, matches_search, project_conversation
from .reconcile import ReconciliationLoop
from .session import ConversationSession, ViewerState, format_transcript

__all__ = [
    "ConversationSession",
    "MessageEntry",
    "ReconciliationLoop",
    "ViewerState",
    "format_transcript",
    "matches_search",
    "project_conversation",
]
