"""Background reconciliation of missing translations.

Keeps every message in the conversation translated into the viewer's
current target language with as few provider calls as possible.

Hidden design decisions:
- Debouncing: bursts of triggers collapse into one pass
- Batching: one request carries every missing translation for a language
- The in-flight set: at most one outstanding request per
  ``(message_id, target_language)`` and one batch per language
- Failure policy: a failed batch writes nothing and is retried lazily on
  the next trigger, never by a timer
"""

import asyncio
import logging
from collections.abc import Callable, Sequence

from ..cache import CacheKey, TranslationCache
from ..config import DEFAULT_DEBOUNCE_SECONDS
from ..messages.models import Message
from ..translation import (
    BatchInput,
    MalformedResponseError,
    TranslationProvider,
    TranslationProviderError,
)

logger = logging.getLogger(__name__)

MergeCallback = Callable[[str, int], None]


class ReconciliationLoop:
    """Debounced, batched translation fetcher for one viewer.

    Triggers:
        notify_messages_changed(): the message log grew or finished loading
        set_target_language(lang): the viewer picked another language

    Each trigger (re)arms a countdown; a pass runs only when the countdown
    elapses uninterrupted. All state changes happen on the event loop
    thread, so no locking is needed.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        cache: TranslationCache,
        get_messages: Callable[[], Sequence[Message]],
        target_language: str,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        on_merged: MergeCallback | None = None,
    ):
        """Initialize the loop.

        Args:
            provider: Translation provider used for batch requests
            cache: Cache the results are merged into
            get_messages: Returns the current message log
            target_language: Initial viewer language
            debounce: Countdown length in seconds
            on_merged: Called with (language, changed_count) after a merge
        """
        self._provider = provider
        self._cache = cache
        self._get_messages = get_messages
        self._target_language = target_language
        self._debounce = debounce
        self._on_merged = on_merged

        self._timer: asyncio.Task | None = None
        self._in_flight: set[CacheKey] = set()
        self._batches: dict[str, asyncio.Task] = {}
        self._deferred: set[str] = set()
        self._stopped = False
        self.batches_dispatched = 0

    @property
    def target_language(self) -> str:
        return self._target_language

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def countdown_armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def pending(self) -> bool:
        """True while a countdown is armed or a batch is outstanding."""
        return self.countdown_armed or bool(self._batches)

    def in_flight(self, target_language: str | None = None) -> set[int]:
        """Message ids awaiting a response for a language (default: current)."""
        lang = target_language or self._target_language
        return {message_id for message_id, key_lang in self._in_flight if key_lang == lang}

    def outstanding_languages(self) -> set[str]:
        return set(self._batches)

    # Triggers

    def notify_messages_changed(self) -> None:
        self.trigger()

    def set_target_language(self, target_language: str) -> None:
        if target_language == self._target_language:
            return
        self._target_language = target_language
        self.trigger()

    def trigger(self) -> None:
        """(Re)start the debounce countdown."""
        if self._stopped:
            return
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._countdown())

    async def _countdown(self) -> None:
        await asyncio.sleep(self._debounce)
        self._timer = None
        self.run_pass()

    # Pass

    def compute_needed(self, target_language: str | None = None) -> list[Message]:
        """Messages lacking a translation into the language and not already requested."""
        lang = target_language or self._target_language
        needed: dict[int, Message] = {}
        for message in self._get_messages():
            if message.target_language == lang:
                continue
            if self._cache.get(message.id, lang) is not None:
                continue
            if (message.id, lang) in self._in_flight:
                continue
            needed.setdefault(message.id, message)
        return list(needed.values())

    def run_pass(self) -> asyncio.Task | None:
        """Run one reconciliation pass for the current language now.

        Returns:
            The dispatched batch task, or None if nothing was sent
        """
        if self._stopped:
            return None

        lang = self._target_language
        needed = self.compute_needed(lang)
        if not needed:
            return None

        if lang in self._batches:
            # One batch per language; pick the rest up once it settles
            logger.debug(
                "Batch for %s outstanding; deferring %d messages", lang, len(needed)
            )
            self._deferred.add(lang)
            return None

        inputs = [BatchInput(id=m.id, text=m.text_original, role=m.role) for m in needed]
        self._in_flight.update((m.id, lang) for m in needed)
        task = asyncio.get_running_loop().create_task(self._dispatch(inputs, lang))
        self._batches[lang] = task
        self.batches_dispatched += 1
        logger.debug("Dispatched batch of %d messages to %s", len(inputs), lang)
        return task

    async def _dispatch(self, inputs: list[BatchInput], lang: str) -> None:
        ids = [item.id for item in inputs]
        try:
            try:
                response = await self._provider.translate_batch(inputs, lang)
                translations = response.as_mapping()
                missing = set(ids) - translations.keys()
                if missing:
                    raise MalformedResponseError(f"response is missing ids {sorted(missing)}")
            except TranslationProviderError as e:
                logger.warning(
                    "Batch translation of %d messages to %s failed; they stay pending: %s",
                    len(ids), lang, e
                )
                return

            if response.degraded:
                logger.info("Batch to %s came back degraded (%s)", lang, response.error)

            changed = await self._cache.merge({i: translations[i] for i in ids}, lang)
            if self._on_merged is not None:
                self._on_merged(lang, changed)
        except Exception:
            logger.exception("Unexpected error while reconciling translations to %s", lang)
        finally:
            self._in_flight.difference_update((i, lang) for i in ids)
            if self._batches.get(lang) is asyncio.current_task():
                del self._batches[lang]
            self._settle_deferred(lang)

    def _settle_deferred(self, lang: str) -> None:
        if lang not in self._deferred:
            return
        self._deferred.discard(lang)
        if lang == self._target_language:
            self.trigger()

    # Lifecycle

    def stop(self) -> None:
        """Stop the countdown and ignore further triggers.

        Outstanding batches are abandoned, not cancelled: when they resolve
        their results still land in the cache under their own language.
        """
        self._stopped = True
        self._deferred.clear()
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def wait_idle(self) -> None:
        """Wait until no countdown is armed and no batch is outstanding."""
        while True:
            pending = [
                task for task in (self._timer, *self._batches.values())
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def drain(self, timeout: float) -> bool:
        """Give outstanding batches up to ``timeout`` seconds to resolve.

        Returns:
            True if nothing is left outstanding
        """
        batches = [task for task in self._batches.values() if not task.done()]
        if not batches:
            return True
        _, still_running = await asyncio.wait(batches, timeout=timeout)
        if still_running:
            logger.info("Abandoning %d outstanding translation batches", len(still_running))
        return not still_running
