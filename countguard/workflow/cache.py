"""Obfuscation cache so repeated counts get the same noisy answer."""
from __future__ import annotations

import logging
from typing import Iterator

from countguard.privacy.errors import RoundingStepError

logger = logging.getLogger(__name__)

CacheKey = tuple[int, int, int]


class ObfuscationCache:
    """Obfuscated values keyed by (sensitivity class, raw count, bin).

    Entries are written once and never replaced, so a key keeps returning
    the value it was first given for as long as the cache lives.  The key
    carries no rounding step, so a cache is bound to the step of the first
    caller that uses it and refuses any other.  Not thread-safe; callers
    sharing one instance across threads must lock.
    """

    def __init__(self):
        self._cache: dict[CacheKey, int] = {}
        self.rounding_step: int | None = None

    @staticmethod
    def make_key(sensitivity: float, value: int, bin: int) -> CacheKey:
        """Build the cache key.  Sensitivity is rounded to an integer class."""
        return (int(round(sensitivity)), int(value), int(bin))

    def bind_rounding_step(self, step: int) -> None:
        """Tie the cache to *step*, or fail if it already holds another."""
        if self.rounding_step is None:
            self.rounding_step = step
        elif self.rounding_step != step:
            raise RoundingStepError(
                f"cache holds values rounded to {self.rounding_step}, "
                f"cannot serve rounding step {step}"
            )

    def get(self, key: CacheKey) -> int | None:
        return self._cache.get(key)

    def store(self, key: CacheKey, value: int) -> int:
        """Store *value* under *key* unless present; return the kept value."""
        existing = self._cache.setdefault(key, value)
        if existing != value:
            logger.debug(f"Cache key {key} already set; keeping {existing}")
        return existing

    def has(self, key: CacheKey) -> bool:
        return key in self._cache

    def clear(self):
        self._cache.clear()
        self.rounding_step = None

    def size(self) -> int:
        return len(self._cache)

    def items(self) -> Iterator[tuple[CacheKey, int]]:
        return iter(self._cache.items())

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
