from __future__ import annotations

import hashlib
from collections import OrderedDict
from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

_FINGERPRINT_PREFIX = 50


class BoundedMap(Generic[K, V]):
    """Fixed-capacity map that evicts its oldest entry first."""

    def __init__(self, capacity: int, on_evict: Callable[[K, V], None] | None = None) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be greater than 0")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._on_evict = on_evict

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._entries))

    def get(self, key: K, default: V | None = None) -> V | None:
        return self._entries.get(key, default)

    def put(self, key: K, value: V) -> None:
        if key in self._entries:
            del self._entries[key]
        self._entries[key] = value
        while len(self._entries) > self.capacity:
            old_key, old_value = self._entries.popitem(last=False)
            if self._on_evict is not None:
                self._on_evict(old_key, old_value)

    def pop(self, key: K, default: V | None = None) -> V | None:
        return self._entries.pop(key, default)

    def drain(self) -> list[tuple[K, V]]:
        items = list(self._entries.items())
        self._entries.clear()
        return items

    def clear(self) -> None:
        self._entries.clear()


def input_fingerprint(resume_text: str, job_text: str) -> str:
    """Cheap change key: both lengths plus a short prefix of each document."""
    raw = (
        f"{len(resume_text)}-{len(job_text)}-"
        f"{resume_text[:_FINGERPRINT_PREFIX]}-{job_text[:_FINGERPRINT_PREFIX]}"
    )
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


class ResultCache(Generic[V]):
    def __init__(self, capacity: int) -> None:
        self._entries: BoundedMap[str, V] = BoundedMap(capacity)
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> V | None:
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key: str, value: V) -> None:
        self._entries.put(key, value)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._entries),
            "capacity": self._entries.capacity,
            "hits": self.hits,
            "misses": self.misses,
        }
