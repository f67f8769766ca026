"""Unit and property-based tests for the translation cache and its backends."""
import asyncio
import json
from collections.abc import Mapping

import pytest
from hypothesis import given
from hypothesis import strategies as st

from medlingo.cache import (
    CacheBackend,
    CacheBackendError,
    CacheKey,
    TranslationCache,
    create_cache_backend,
)
from medlingo.cache.json_file import decode_key, encode_key


class FailingBackend(CacheBackend):
    """Backend whose writes always fail."""

    def __init__(self, fail_load: bool = False):
        self.fail_load = fail_load
        self.save_calls = 0

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def load(self) -> dict[CacheKey, str]:
        if self.fail_load:
            raise CacheBackendError("disk on fire")
        return {}

    async def save(self, entries: Mapping[CacheKey, str]) -> None:
        self.save_calls += 1
        raise CacheBackendError("disk full")

    @property
    def backend_type(self) -> str:
        return "failing"


class TestTranslationCache:
    """Tests for the in-memory half of the cache."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, cache):
        assert await cache.put(12, "es", "Tengo fiebre") is True

        assert cache.get(12, "es") == "Tengo fiebre"
        assert cache.get(12, "fr") is None
        assert (12, "es") in cache
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_put_same_value_is_noop(self, cache):
        await cache.put(12, "es", "Tengo fiebre")
        version = cache.version

        assert await cache.put(12, "es", "Tengo fiebre") is False
        assert cache.version == version

    @pytest.mark.asyncio
    async def test_merge_counts_changes(self, cache):
        assert await cache.merge({1: "Hola", 2: "Adiós"}, "es") == 2
        assert await cache.merge({1: "Hola", 3: "Gracias"}, "es") == 1

        assert sorted(cache) == [(1, "es"), (2, "es"), (3, "es")]
        assert cache.languages() == {"es"}

    @pytest.mark.asyncio
    async def test_merge_keeps_languages_apart(self, cache):
        await cache.merge({1: "Hola"}, "es")
        await cache.merge({1: "Bonjour"}, "fr")

        assert cache.get(1, "es") == "Hola"
        assert cache.get(1, "fr") == "Bonjour"

    @pytest.mark.asyncio
    async def test_overwrite_with_different_value(self, cache):
        await cache.put(1, "es", "[AI unavailable: es] Hello")
        await cache.put(1, "es", "Hola")

        assert cache.get(1, "es") == "Hola"

    @given(
        st.dictionaries(
            st.integers(min_value=1, max_value=10_000),
            st.text(min_size=1, max_size=40),
            max_size=20,
        ),
        st.sampled_from(["en", "es", "fr", "hi"]),
    )
    def test_merge_is_idempotent(self, translations: dict[int, str], lang: str):
        """Property test: merging the same batch twice changes nothing the second time."""

        async def scenario():
            cache = TranslationCache()
            await cache.merge(translations, lang)
            snapshot = {key: cache.get(*key) for key in cache}
            version = cache.version

            changed = await cache.merge(translations, lang)

            assert changed == 0
            assert {key: cache.get(*key) for key in cache} == snapshot
            assert cache.version == version

        asyncio.run(scenario())

    @pytest.mark.asyncio
    async def test_persist_failure_is_not_fatal(self):
        backend = FailingBackend()
        cache = TranslationCache(backend)

        assert await cache.merge({1: "Hola"}, "es") == 1

        assert cache.get(1, "es") == "Hola"
        assert backend.save_calls == 1
        assert await cache.persist() is False

    @pytest.mark.asyncio
    async def test_load_failure_starts_empty(self):
        cache = TranslationCache(FailingBackend(fail_load=True))

        assert await cache.load_all() == 0
        await cache.put(1, "es", "Hola")
        assert cache.get(1, "es") == "Hola"

    @pytest.mark.asyncio
    async def test_closed_cache_keeps_memory_only(self):
        backend = create_cache_backend("memory")
        cache = TranslationCache(backend)
        await cache.load_all()
        await cache.close()

        await cache.merge({1: "Hola"}, "es")

        assert cache.get(1, "es") == "Hola"
        assert await backend.load() == {}


class TestSQLiteCacheBackend:
    """Tests for the SQLite backend."""

    @pytest.mark.asyncio
    async def test_entries_survive_restart(self, tmp_path):
        path = tmp_path / "cache.db"

        first = TranslationCache(create_cache_backend("sqlite", path=path))
        await first.load_all()
        await first.merge({1: "Hola", 2: "Tengo fiebre"}, "es")
        await first.put(1, "fr", "Bonjour")
        await first.close()

        second = TranslationCache(create_cache_backend("sqlite", path=path))
        assert await second.load_all() == 3
        assert second.get(2, "es") == "Tengo fiebre"
        assert second.get(1, "fr") == "Bonjour"
        await second.close()

    @pytest.mark.asyncio
    async def test_upsert_replaces_value(self, tmp_path):
        backend = create_cache_backend("sqlite", path=tmp_path / "cache.db")
        await backend.connect()
        await backend.save({(1, "es"): "old"})
        await backend.save({(1, "es"): "new"})

        assert await backend.load() == {(1, "es"): "new"}
        await backend.disconnect()

    @pytest.mark.asyncio
    async def test_requires_connection(self, tmp_path):
        backend = create_cache_backend("sqlite", path=tmp_path / "cache.db")

        with pytest.raises(CacheBackendError):
            await backend.load()


class TestJSONFileCacheBackend:
    """Tests for the JSON document backend."""

    def test_key_encoding(self):
        assert encode_key((12, "es")) == "12_es"
        assert decode_key("12_es") == (12, "es")
        assert decode_key("abc_es") is None
        assert decode_key("12") is None
        assert decode_key("12_") is None

    @pytest.mark.asyncio
    async def test_entries_survive_restart(self, tmp_path):
        path = tmp_path / "cache.json"

        first = TranslationCache(create_cache_backend("json", path=path))
        await first.load_all()
        await first.merge({7: "Tengo fiebre"}, "es")
        await first.close()

        assert json.loads(path.read_text(encoding="utf-8")) == {"7_es": "Tengo fiebre"}

        second = TranslationCache(create_cache_backend("json", path=path))
        await second.load_all()
        assert second.get(7, "es") == "Tengo fiebre"

    @pytest.mark.asyncio
    async def test_concurrent_merges_all_reach_disk(self, tmp_path):
        path = tmp_path / "cache.json"
        cache = TranslationCache(create_cache_backend("json", path=path))
        await cache.load_all()

        await asyncio.gather(
            cache.merge({1: "Hola"}, "es"),
            cache.merge({1: "Bonjour"}, "fr"),
            cache.merge({2: "Namaste"}, "hi"),
        )
        await cache.close()

        reloaded = TranslationCache(create_cache_backend("json", path=path))
        await reloaded.load_all()
        assert reloaded.get(1, "es") == "Hola"
        assert reloaded.get(1, "fr") == "Bonjour"
        assert reloaded.get(2, "hi") == "Namaste"
        assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]

    @pytest.mark.asyncio
    async def test_malformed_keys_are_skipped(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text(json.dumps({"12_es": "Hola", "bogus": "x"}), encoding="utf-8")

        cache = TranslationCache(create_cache_backend("json", path=path))

        assert await cache.load_all() == 1
        assert cache.get(12, "es") == "Hola"

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{not json", encoding="utf-8")

        cache = TranslationCache(create_cache_backend("json", path=path))

        assert await cache.load_all() == 0
        assert len(cache) == 0


class TestCacheFactory:
    """Tests for create_cache_backend."""

    def test_known_backends(self, tmp_path):
        assert create_cache_backend("memory").backend_type == "memory"
        assert create_cache_backend("sqlite", path=tmp_path / "c.db").backend_type == "sqlite"
        assert create_cache_backend("json", path=tmp_path / "c.json").backend_type == "json"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported cache backend"):
            create_cache_backend("redis")
