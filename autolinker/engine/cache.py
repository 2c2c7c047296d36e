"""Bounded, expiring result caches backed by Django's cache framework."""

from __future__ import annotations

import hashlib
import uuid
from typing import Any, Optional

from django.core.cache.backends.base import BaseCache
from django.core.cache.backends.locmem import LocMemCache

DEFAULT_CAPACITY = 5000
DEFAULT_TTL = 3600  # seconds


class ResultCache:
    """Key/value cache with a capacity bound, a TTL and full invalidation.

    Keys are arbitrary strings (whole text fragments included); they are
    digested before reaching the backend so they stay within the key rules
    every Django cache backend enforces. Without an explicit ``backend`` a
    private ``LocMemCache`` is created, which is thread-safe on its own.
    """

    def __init__(
        self,
        name: str = "autolinker",
        *,
        capacity: int = DEFAULT_CAPACITY,
        ttl: int = DEFAULT_TTL,
        backend: Optional[BaseCache] = None,
    ) -> None:
        if backend is None:
            backend = LocMemCache(
                f"{name}-{uuid.uuid4().hex}",
                {"TIMEOUT": ttl, "OPTIONS": {"MAX_ENTRIES": capacity}},
            )
        self.name = name
        self.backend = backend

    def get(self, key: str) -> Optional[Any]:
        return self.backend.get(self._digest(key))

    def put(self, key: str, value: Any) -> None:
        self.backend.set(self._digest(key), value)

    def invalidate_all(self) -> None:
        self.backend.clear()

    def _digest(self, key: str) -> str:
        return f"{self.name}:{hashlib.sha1(key.encode('utf-8')).hexdigest()}"
