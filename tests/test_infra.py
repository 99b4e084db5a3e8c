"""
Tests for the preview cache, structured logging, and settings.
"""

import json
import logging

import pytest

from reasonbridge.cache import FeedbackCache, fingerprint


class TestFingerprint:

    def test_deterministic(self):
        assert fingerprint("hello", "LOW") == fingerprint("hello", "LOW")

    def test_sensitivity_changes_key(self):
        assert fingerprint("hello", "LOW") != fingerprint("hello", "HIGH")

    def test_hex_sha256(self):
        assert len(fingerprint("hello")) == 64


class TestFeedbackCache:
    """In-memory TTL cache tests."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self):
        cache = FeedbackCache()
        assert await cache.get("draft", "LOW") is None
        await cache.put("draft", "LOW", {"summary": "ok"})
        hit = await cache.get("draft", "LOW")
        assert hit == {"summary": "ok", "cached": True}
        assert cache.stats["hits"] == 1
        assert cache.stats["misses"] == 1
        assert cache.stats["hit_rate"] == 0.5

    @pytest.mark.asyncio
    async def test_stored_payload_not_mutated(self):
        cache = FeedbackCache()
        payload = {"summary": "ok"}
        await cache.put("draft", "LOW", payload)
        await cache.get("draft", "LOW")
        assert "cached" not in payload

    @pytest.mark.asyncio
    async def test_expiry(self):
        cache = FeedbackCache(ttl_seconds=10)
        await cache.put("draft", "LOW", {"summary": "ok"})
        key = fingerprint("draft", "LOW")
        ts, payload = cache._cache[key]
        cache._cache[key] = (ts - 11, payload)
        assert await cache.get("draft", "LOW") is None
        assert cache.stats["entries"] == 0

    @pytest.mark.asyncio
    async def test_evicts_oldest(self):
        cache = FeedbackCache(max_entries=2)
        await cache.put("a", "LOW", {"n": 1})
        await cache.put("b", "LOW", {"n": 2})
        key = fingerprint("a", "LOW")
        ts, payload = cache._cache[key]
        cache._cache[key] = (ts - 100, payload)
        await cache.put("c", "LOW", {"n": 3})
        assert cache.stats["entries"] == 2
        assert await cache.get("a", "LOW") is None
        assert (await cache.get("c", "LOW"))["n"] == 3

    @pytest.mark.asyncio
    async def test_overwrite_does_not_evict(self):
        cache = FeedbackCache(max_entries=2)
        await cache.put("a", "LOW", {"n": 1})
        await cache.put("b", "LOW", {"n": 2})
        await cache.put("a", "LOW", {"n": 3})
        assert cache.stats["entries"] == 2
        assert (await cache.get("b", "LOW"))["n"] == 2

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(self):
        cache = FeedbackCache()
        await cache.put("a", "LOW", {"n": 1})
        await cache.put("b", "LOW", {"n": 2})
        await cache.invalidate("a", "LOW")
        assert await cache.get("a", "LOW") is None
        await cache.clear()
        assert cache.stats == {"entries": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


class TestLogging:
    """Structured logging tests."""

    def _record(self, msg):
        return logging.LogRecord(
            name="reasonbridge.test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg=msg,
            args=(),
            exc_info=None,
        )

    def test_json_formatter(self):
        from reasonbridge.logging import JSONFormatter

        parsed = json.loads(JSONFormatter().format(self._record("Test message")))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "reasonbridge.test"
        assert "timestamp" in parsed

    def test_json_formatter_extra_fields(self):
        from reasonbridge.logging import JSONFormatter

        record = self._record("Feedback ranked")
        record.feedback_type = "FALLACY"
        record.confidence = 0.78
        record.unrelated = "dropped"
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["feedback_type"] == "FALLACY"
        assert parsed["confidence"] == 0.78
        assert "unrelated" not in parsed

    def test_json_formatter_normalizes_domain_fields(self):
        from reasonbridge.logging import JSONFormatter
        from reasonbridge.models import FeedbackType

        record = self._record("Feedback ranked")
        record.feedback_type = FeedbackType.INFLAMMATORY
        record.confidence = 0.1 + 0.7
        record.detections = (FeedbackType.FALLACY, FeedbackType.BIAS)
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["feedback_type"] == "INFLAMMATORY"
        assert parsed["confidence"] == 0.8
        assert parsed["detections"] == ["FALLACY", "BIAS"]

    def test_text_formatter_appends_context(self):
        from reasonbridge.logging import TextFormatter
        from reasonbridge.models import FeedbackType

        record = self._record("Feedback ranked")
        record.feedback_type = FeedbackType.FALLACY
        record.topic_id = "t1"
        line = TextFormatter().format(record)
        assert line.endswith("Feedback ranked | feedback_type=FALLACY topic_id=t1")

    def test_text_formatter_without_context(self):
        from reasonbridge.logging import TextFormatter

        line = TextFormatter().format(self._record("Plain"))
        assert line.endswith("reasonbridge.test: Plain")

    def test_get_logger(self):
        from reasonbridge.logging import get_logger
        log = get_logger("feedback")
        assert log.name == "reasonbridge.feedback"

    def test_setup_logging_single_handler(self):
        from reasonbridge.logging import setup_logging
        setup_logging()
        root = setup_logging()
        assert root.name == "reasonbridge"
        assert len(root.handlers) == 1


class TestSettings:

    def test_defaults(self):
        from reasonbridge.config import settings
        assert settings.TIE_EPSILON == 0.05
        assert settings.MIN_PARTICIPATION == 3
        assert 0.0 <= settings.SIMILARITY_THRESHOLD <= 1.0

    def test_frozen(self):
        from dataclasses import FrozenInstanceError
        from reasonbridge.config import settings
        with pytest.raises(FrozenInstanceError):
            settings.TIE_EPSILON = 0.5
