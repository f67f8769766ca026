"""A viewer's live session on the shared conversation.

Wires the message store, the translation provider, the translation cache
and the reconciliation loop together for one participant, and implements
the send, audio and summary paths.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..blobs import BlobStore, BlobStoreError, recording_filename
from ..cache import TranslationCache
from ..config import (
    AUDIO_TRANSCRIPT_PLACEHOLDER,
    AUDIO_TRANSLATION_PLACEHOLDER,
    DEFAULT_DEBOUNCE_SECONDS,
    SUMMARY_EMPTY_FALLBACK,
    SUMMARY_ERROR_FALLBACK,
    default_language_for,
    local_mock_translation,
)
from ..messages import Message, MessageStore, MessageStoreError, NewMessage, Role, Subscription
from ..translation import TranslationProvider, TranslationProviderError
from .projector import MessageEntry, project_conversation
from .reconcile import ReconciliationLoop

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@dataclass
class ViewerState:
    """Client-local state of one viewer. Nothing here is shared or persisted."""

    role: Role
    target_language: str
    search_term: str = ""
    pending_summary: str | None = None


def format_transcript(messages: list[Message]) -> str:
    """``role: text`` lines in store order, as sent for summarization."""
    return "\n".join(f"{m.role.value}: {m.text_original}" for m in messages)


class ConversationSession:
    """One participant's view of the conversation.

    Usage:
        async with ConversationSession(store, provider, cache, Role.DOCTOR) as session:
            await session.send("Where does it hurt?")
            for entry in session.entries():
                ...
    """

    def __init__(
        self,
        store: MessageStore,
        provider: TranslationProvider,
        cache: TranslationCache,
        role: Role | str,
        target_language: str | None = None,
        blob_store: BlobStore | None = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        drain_timeout: float = 5.0,
    ):
        role = Role(role)
        self.state = ViewerState(
            role=role,
            target_language=target_language or default_language_for(role.value),
        )
        self._store = store
        self._provider = provider
        self._cache = cache
        self._blob_store = blob_store
        self._drain_timeout = drain_timeout

        self._messages: list[Message] = []
        self._seen_ids: set[int] = set()
        self._listeners: list[Listener] = []
        self._subscription: Subscription | None = None

        self._reconciler = ReconciliationLoop(
            provider=provider,
            cache=cache,
            get_messages=lambda: self._messages,
            target_language=self.state.target_language,
            debounce=debounce,
            on_merged=self._on_merged,
        )

    @property
    def reconciler(self) -> ReconciliationLoop:
        return self._reconciler

    @property
    def cache(self) -> TranslationCache:
        return self._cache

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the conversation log in store order."""
        return list(self._messages)

    # Lifecycle

    async def start(self) -> None:
        """Load the cache, subscribe to inserts and load the history.

        Raises:
            MessageStoreError: If the history cannot be loaded
        """
        await self._cache.load_all()
        self._subscription = self._store.subscribe(self._on_insert)
        history = await self._store.list_messages()
        self._ingest(history)
        logger.info(
            "Session started as %s reading %s (%d messages)",
            self.state.role.value, self.state.target_language, len(self._messages)
        )
        self._reconciler.notify_messages_changed()
        self._notify()

    async def close(self) -> None:
        """Leave the conversation.

        Outstanding batches get ``drain_timeout`` seconds to land in the
        cache before it is closed; after that they are abandoned.
        """
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._reconciler.stop()
        await self._reconciler.drain(self._drain_timeout)
        await self._cache.close()

    async def __aenter__(self) -> "ConversationSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # Change notification

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a callback fired whenever the rendered view may have changed.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _on_insert(self, message: Message) -> None:
        if self._ingest([message]):
            self._reconciler.notify_messages_changed()
            self._notify()

    def _on_merged(self, target_language: str, changed: int) -> None:
        if changed and target_language == self.state.target_language:
            self._notify()

    def _ingest(self, messages: list[Message]) -> bool:
        added = False
        for message in messages:
            if message.id in self._seen_ids:
                continue
            self._seen_ids.add(message.id)
            if self._messages and message.sort_key < self._messages[-1].sort_key:
                self._messages.append(message)
                self._messages.sort(key=lambda m: m.sort_key)
            else:
                self._messages.append(message)
            added = True
        return added

    # Viewer state

    def set_target_language(self, target_language: str) -> None:
        if target_language == self.state.target_language:
            return
        self.state.target_language = target_language
        self._reconciler.set_target_language(target_language)
        self._notify()

    def set_search_term(self, search_term: str) -> None:
        self.state.search_term = search_term
        self._notify()

    def set_role(self, role: Role | str) -> None:
        """Switch the speaking role. The reading language is left alone."""
        self.state.role = Role(role)
        self._notify()

    def entries(self) -> list[MessageEntry]:
        """Current view of the conversation."""
        return project_conversation(
            self._messages,
            self._cache,
            self.state.target_language,
            search_term=self.state.search_term,
            viewer_role=self.state.role,
        )

    # Send paths

    async def send(self, text: str) -> Message | None:
        """Translate and append a text message.

        The message shows up in the view when the store pushes it back.

        Returns:
            The stored message, or None for blank input

        Raises:
            MessageStoreError: If the store rejects the insert
        """
        text = text.strip()
        if not text:
            return None

        role = self.state.role
        target_language = self.state.target_language

        try:
            result = await self._provider.translate(text, target_language, role)
            translated = result.translated
        except TranslationProviderError as e:
            logger.error("Translation API failed, falling back to mock: %s", e)
            translated = local_mock_translation(text)

        try:
            return await self._store.append(NewMessage(
                role=role,
                text_original=text,
                text_translated=translated,
                target_language=target_language,
            ))
        except MessageStoreError as e:
            logger.error("Message store insert failed: %s", e)
            raise

    async def send_audio(self, data: bytes, filename: str | None = None) -> Message:
        """Upload a recording and append it with a placeholder transcript.

        Raises:
            BlobStoreError: If the upload fails (nothing is appended)
            MessageStoreError: If the store rejects the insert
        """
        if self._blob_store is None:
            raise BlobStoreError("No audio storage configured")

        role = self.state.role
        try:
            audio_url = await self._blob_store.upload(
                data, filename or recording_filename(role.value), "audio/webm"
            )
        except BlobStoreError as e:
            logger.error("Audio upload failed: %s", e)
            raise

        try:
            return await self._store.append(NewMessage(
                role=role,
                text_original=AUDIO_TRANSCRIPT_PLACEHOLDER,
                text_translated=AUDIO_TRANSLATION_PLACEHOLDER,
                target_language=self.state.target_language,
                audio_url=audio_url,
            ))
        except MessageStoreError as e:
            logger.error("Message store insert failed for audio %s: %s", audio_url, e)
            raise

    async def summarize(self) -> str:
        """Summarize the whole conversation. Regenerated on every call."""
        transcript = format_transcript(self._messages)
        try:
            response = await self._provider.summarize(transcript)
            summary = response.summary or SUMMARY_EMPTY_FALLBACK
        except TranslationProviderError as e:
            logger.error("Error generating summary: %s", e)
            summary = SUMMARY_ERROR_FALLBACK

        self.state.pending_summary = summary
        self._notify()
        return summary
