"""Conversation view projection.

Pure function from (message log, cache, language, search term) to the
entries a client renders. It never calls the network; fetching missing
translations is the reconciliation loop's job.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from ..config import TRANSLATION_PLACEHOLDER
from ..messages.models import Message, Role


class TranslationLookup(Protocol):
    def get(self, message_id: int, target_language: str) -> str | None: ...


class MessageEntry(BaseModel):
    """One renderable row of the conversation view."""

    model_config = ConfigDict(frozen=True)

    message_id: int
    role: Role
    text_original: str
    display_translation: str | None
    audio_url: str | None = None
    created_at: datetime
    is_pending: bool = False
    is_own: bool = False


def matches_search(message: Message, search_term: str) -> bool:
    """Case-insensitive match on the original or the stored translation.

    Translations that only exist in a viewer's cache are not searched.
    """
    term = search_term.strip().casefold()
    if not term:
        return True
    if term in message.text_original.casefold():
        return True
    return bool(message.text_translated) and term in message.text_translated.casefold()


def project_conversation(
    messages: Iterable[Message],
    cache: TranslationLookup,
    target_language: str,
    search_term: str = "",
    viewer_role: Role | None = None,
    placeholder: str = TRANSLATION_PLACEHOLDER,
) -> list[MessageEntry]:
    """Project the message log into renderable entries, in log order.

    Args:
        messages: Conversation log in store order
        cache: Anything with ``get(message_id, target_language)``
        target_language: Viewer's language
        search_term: Filter; blank keeps every message
        viewer_role: Marks the viewer's own messages
        placeholder: Shown while a translation is missing

    Returns:
        Entries for the messages that pass the filter
    """
    entries = []
    for message in messages:
        if not matches_search(message, search_term):
            continue

        if message.target_language == target_language:
            translation = message.text_translated
            pending = False
        else:
            translation = cache.get(message.id, target_language)
            pending = translation is None

        entries.append(MessageEntry(
            message_id=message.id,
            role=message.role,
            text_original=message.text_original,
            display_translation=placeholder if pending else translation,
            audio_url=message.audio_url,
            created_at=message.created_at,
            is_pending=pending,
            is_own=viewer_role is not None and message.role == viewer_role,
        ))
    return entries
