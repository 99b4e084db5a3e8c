"""
Feedback Preview Cache

In-memory TTL cache for preview responses, keyed by content
fingerprint: SHA-256(content + sensitivity). Repeated identical
drafts return instantly.

Lives on the host side. The engine never reads it.

Usage:
    from reasonbridge.cache import FeedbackCache
    cache = FeedbackCache(ttl_seconds=600)
    cached = await cache.get(content, "MEDIUM")
    if cached is None:
        preview = ...
        await cache.put(content, "MEDIUM", preview)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Optional


def fingerprint(content: str, sensitivity: str = "") -> str:
    raw = f"{content}||{sensitivity}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class FeedbackCache:
    """Asyncio-locked in-memory cache with TTL expiry and oldest-first eviction."""

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 500):
        self._cache: dict[str, tuple[float, dict]] = {}
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    async def get(self, content: str, sensitivity: str = "") -> Optional[dict]:
        """Return the cached payload if present and not expired."""
        key = fingerprint(content, sensitivity)
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            ts, payload = entry
            if time.monotonic() - ts > self._ttl:
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return {**payload, "cached": True}

    async def put(self, content: str, sensitivity: str, payload: dict) -> None:
        key = fingerprint(content, sensitivity)
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest = min(self._cache, key=lambda k: self._cache[k][0])
                del self._cache[oldest]
            self._cache[key] = (time.monotonic(), payload)

    async def invalidate(self, content: str, sensitivity: str = "") -> None:
        async with self._lock:
            self._cache.pop(fingerprint(content, sensitivity), None)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }
