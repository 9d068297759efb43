"""Lock-guarded dictionary used as the backing mapping of a context."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class ConcurrentMap(Generic[K, V]):
    """Thread-safe associative map with atomic single-key operations.

    Every public method holds the internal lock for the duration of one
    dictionary operation, so operations on the same key are linearizable.
    Nothing spans more than one call: bulk reads return a list taken under
    the lock, bulk writes are a sequence of independent puts.

    A stored ``None`` reads the same as a missing key in the return values
    below; callers that need to tell them apart store wrapped values.
    """

    def __init__(self, initial: Mapping[K, V] | None = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[K, V] = dict(initial) if initial else {}

    # --- single-key operations ------------------------------------------------

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._data.get(key)

    def put(self, key: K, value: V) -> V | None:
        """Store *value* under *key*, returning the previous value or ``None``."""
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = value
            return previous

    def put_if_absent(self, key: K, value: V) -> V | None:
        """Install *value* only if *key* is unmapped.

        Returns the value already present (nothing is written), or ``None``
        when *value* was installed.
        """
        with self._lock:
            if key in self._data:
                return self._data[key]
            self._data[key] = value
            return None

    def remove(self, key: K) -> V | None:
        with self._lock:
            return self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    # --- bulk operations ------------------------------------------------------

    def put_all(self, source: Mapping[K, V] | ConcurrentMap[K, V]) -> int:
        """Merge every pair of *source* into this map, overwriting overlaps.

        The source is read under its own lock before this map's lock is
        taken; the two are never held together. Returns the number of pairs
        merged.
        """
        if isinstance(source, ConcurrentMap):
            pairs = source.items()
        else:
            pairs = list(source.items())
        with self._lock:
            self._data.update(pairs)
        return len(pairs)

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._data)

    def items(self) -> list[tuple[K, V]]:
        with self._lock:
            return list(self._data.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __repr__(self) -> str:
        with self._lock:
            return f"ConcurrentMap(size={len(self._data)})"
