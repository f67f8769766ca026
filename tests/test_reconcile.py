"""Tests for the debounced, batched reconciliation loop."""
import asyncio

import pytest

from conftest import make_message
from medlingo.conversation import ReconciliationLoop
from medlingo.messages import Role

DEBOUNCE = 0.05


@pytest.fixture
def messages():
    return []


@pytest.fixture
def merged():
    return []


@pytest.fixture
def loop(provider, cache, messages, merged):
    reconciler = ReconciliationLoop(
        provider=provider,
        cache=cache,
        get_messages=lambda: messages,
        target_language="es",
        debounce=DEBOUNCE,
        on_merged=lambda lang, changed: merged.append((lang, changed)),
    )
    yield reconciler
    reconciler.stop()


class TestComputeNeeded:
    """Tests for picking the messages a pass must request."""

    def test_skips_messages_already_in_target_language(self, loop, messages):
        messages.append(make_message(1, "Hola", Role.DOCTOR, target_language="es"))
        messages.append(make_message(2, "I have a fever", Role.PATIENT, target_language="en"))

        assert [m.id for m in loop.compute_needed()] == [2]

    @pytest.mark.asyncio
    async def test_skips_cached_messages(self, loop, cache, messages):
        messages.append(make_message(1, "I have a fever"))
        messages.append(make_message(2, "Since yesterday"))
        await cache.put(1, "es", "Tengo fiebre")

        assert [m.id for m in loop.compute_needed()] == [2]

    def test_uses_requested_language(self, loop, messages):
        messages.append(make_message(1, "Bonjour", target_language="fr"))

        assert loop.compute_needed("fr") == []
        assert [m.id for m in loop.compute_needed("es")] == [1]


class TestDebounce:
    """Tests for collapsing bursts of triggers."""

    @pytest.mark.asyncio
    async def test_burst_of_messages_sends_one_batch(self, loop, provider, cache, messages):
        for message_id, text in enumerate(["I have a fever", "Since yesterday", "And a headache"], 1):
            messages.append(make_message(message_id, text))
            loop.notify_messages_changed()
            await asyncio.sleep(DEBOUNCE / 5)

        await loop.wait_idle()

        assert provider.batch_calls == [([1, 2, 3], "es")]
        assert cache.get(1, "es") == "es:I have a fever"
        assert cache.get(3, "es") == "es:And a headache"
        assert loop.batches_dispatched == 1

    @pytest.mark.asyncio
    async def test_nothing_sent_before_countdown_elapses(self, loop, provider, messages):
        messages.append(make_message(1, "I have a fever"))
        loop.notify_messages_changed()

        assert loop.countdown_armed
        assert loop.pending
        assert provider.batch_calls == []

        await loop.wait_idle()
        assert not loop.pending
        assert len(provider.batch_calls) == 1

    @pytest.mark.asyncio
    async def test_no_request_when_everything_is_translated(self, loop, provider, messages):
        messages.append(make_message(1, "Hola", Role.DOCTOR, target_language="es"))
        loop.notify_messages_changed()

        await loop.wait_idle()

        assert provider.batch_calls == []

    @pytest.mark.asyncio
    async def test_language_switch_triggers_pass(self, loop, provider, messages):
        messages.append(make_message(1, "I have a fever"))
        loop.notify_messages_changed()
        await loop.wait_idle()

        loop.set_target_language("fr")
        await loop.wait_idle()

        assert provider.batch_calls == [([1], "es"), ([1], "fr")]
        assert loop.target_language == "fr"

    @pytest.mark.asyncio
    async def test_setting_same_language_does_not_trigger(self, loop):
        loop.set_target_language("es")

        assert not loop.countdown_armed


class TestFailures:
    """Tests for failed and malformed batches."""

    @pytest.mark.asyncio
    async def test_malformed_response_writes_nothing(self, loop, provider, cache, messages, merged):
        messages.extend([make_message(1, "I have a fever"), make_message(2, "Since yesterday")])
        provider.malformed_batch = True

        loop.notify_messages_changed()
        await loop.wait_idle()

        assert len(cache) == 0
        assert merged == []
        assert loop.in_flight() == set()

    @pytest.mark.asyncio
    async def test_next_trigger_reissues_failed_batch(self, loop, provider, cache, messages):
        messages.extend([make_message(1, "I have a fever"), make_message(2, "Since yesterday")])
        provider.malformed_batch = True
        loop.notify_messages_changed()
        await loop.wait_idle()

        provider.malformed_batch = False
        loop.notify_messages_changed()
        await loop.wait_idle()

        assert provider.batch_calls == [([1, 2], "es"), ([1, 2], "es")]
        assert cache.get(2, "es") == "es:Since yesterday"

    @pytest.mark.asyncio
    async def test_failure_is_not_retried_by_timer(self, loop, provider, messages):
        messages.append(make_message(1, "I have a fever"))
        provider.fail_batch = True

        loop.notify_messages_changed()
        await loop.wait_idle()
        await asyncio.sleep(DEBOUNCE * 4)

        assert len(provider.batch_calls) == 1
        assert not loop.pending

    @pytest.mark.asyncio
    async def test_partial_response_writes_nothing(self, loop, provider, cache, messages):
        messages.extend([make_message(1, "I have a fever"), make_message(2, "Since yesterday")])
        provider.drop_ids = {2}

        loop.notify_messages_changed()
        await loop.wait_idle()

        assert cache.get(1, "es") is None
        assert cache.get(2, "es") is None

    @pytest.mark.asyncio
    async def test_unexpected_error_clears_in_flight(self, loop, provider, cache, messages):
        messages.append(make_message(1, "I have a fever"))
        provider.unexpected_error = RuntimeError("boom")

        loop.notify_messages_changed()
        await loop.wait_idle()

        assert loop.in_flight() == set()
        assert loop.outstanding_languages() == set()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_degraded_batch_is_cached(self, loop, provider, cache, messages):
        messages.append(make_message(1, "I have a fever"))
        provider.degraded = True

        loop.notify_messages_changed()
        await loop.wait_idle()

        assert cache.get(1, "es") == "es:I have a fever"


class TestInFlight:
    """Tests for duplicate suppression while batches are outstanding."""

    @pytest.mark.asyncio
    async def test_one_batch_per_language(self, loop, provider, cache, messages):
        provider.gate = asyncio.Event()
        messages.append(make_message(1, "I have a fever"))

        first = loop.run_pass()
        assert first is not None
        assert loop.in_flight() == {1}

        messages.append(make_message(2, "Since yesterday"))
        assert loop.run_pass() is None
        assert loop.in_flight() == {1}
        assert len(provider.batch_calls) == 1

        provider.gate.set()
        await first
        await loop.wait_idle()

        assert provider.batch_calls == [([1], "es"), ([2], "es")]
        assert cache.get(2, "es") == "es:Since yesterday"

    @pytest.mark.asyncio
    async def test_in_flight_ids_are_not_requested_again(self, loop, provider, messages):
        provider.gate = asyncio.Event()
        messages.append(make_message(1, "I have a fever"))

        task = loop.run_pass()
        assert loop.compute_needed() == []

        provider.gate.set()
        await task

    @pytest.mark.asyncio
    async def test_stale_language_merge_lands_under_its_own_language(
        self, loop, provider, cache, messages, merged
    ):
        provider.gate = asyncio.Event()
        messages.append(make_message(1, "I have a fever"))

        loop.run_pass()
        loop.set_target_language("fr")
        await asyncio.sleep(DEBOUNCE * 2)

        assert loop.outstanding_languages() == {"es", "fr"}

        provider.gate.set()
        await loop.wait_idle()

        assert cache.get(1, "es") == "es:I have a fever"
        assert cache.get(1, "fr") == "fr:I have a fever"
        assert sorted(merged) == [("es", 1), ("fr", 1)]


class TestLifecycle:
    """Tests for stop and drain."""

    @pytest.mark.asyncio
    async def test_stop_cancels_countdown(self, loop, provider, messages):
        messages.append(make_message(1, "I have a fever"))
        loop.notify_messages_changed()

        loop.stop()
        await asyncio.sleep(DEBOUNCE * 3)

        assert loop.stopped
        assert provider.batch_calls == []

    @pytest.mark.asyncio
    async def test_triggers_ignored_after_stop(self, loop, provider, messages):
        messages.append(make_message(1, "I have a fever"))
        loop.stop()

        loop.notify_messages_changed()

        assert not loop.countdown_armed
        assert loop.run_pass() is None

    @pytest.mark.asyncio
    async def test_drain_with_nothing_outstanding(self, loop):
        assert await loop.drain(0.01) is True

    @pytest.mark.asyncio
    async def test_abandoned_batch_still_merges(self, loop, provider, cache, messages):
        provider.gate = asyncio.Event()
        messages.append(make_message(1, "I have a fever"))
        task = loop.run_pass()

        loop.stop()
        assert await loop.drain(0.01) is False

        provider.gate.set()
        await task

        assert cache.get(1, "es") == "es:I have a fever"
