"""In-memory routing cache.

Memoizes routing decisions for repeated prompts. Keys are normalized
prompt text (lower-cased, trimmed, whitespace collapsed); entries expire
after a fixed TTL and the oldest entry is evicted at capacity.
"""

from __future__ import annotations

import re
import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from modeltriage.schemas.routing import RoutingDecision

_WHITESPACE = re.compile(r"\s+")


def normalize_prompt(prompt: str) -> str:
    """Cache key for a prompt."""
    return _WHITESPACE.sub(" ", prompt.strip().lower())


class RoutingCache:
    """Bounded, TTL-limited map from normalized prompt to decision.

    Safe to share between threads.
    """

    def __init__(
        self,
        max_size: int = 200,
        ttl: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self._max_size = max_size
        self._ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, RoutingDecision]] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, prompt: str) -> RoutingDecision | None:
        """Copy of the cached decision for a prompt, or None when absent or expired."""
        key = normalize_prompt(prompt)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, decision = entry
            if self._clock() - stored_at >= self._ttl:
                del self._entries[key]
                return None
            return decision.model_copy(deep=True)

    def put(self, prompt: str, decision: RoutingDecision) -> None:
        key = normalize_prompt(prompt)
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
            self._entries[key] = (self._clock(), decision.model_copy(deep=True))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
