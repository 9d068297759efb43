"""Thread-safe key-value context shared between concurrent callers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from context_map.concurrent_map import ConcurrentMap

K = TypeVar("K")
V = TypeVar("V")

log = logging.getLogger("context_map")

# Distinguishes ``get(key)`` from ``get(key, None)``.
_NO_FALLBACK: Any = object()


@dataclass(frozen=True)
class Value(Generic[V]):
    """Immutable holder letting ``None`` be stored as a real value."""

    value: V

    def __str__(self) -> str:
        if self.value is None:
            return "None"
        return f"{type(self.value)}\n{self.value}"


@dataclass(frozen=True)
class Entry(Generic[K, V]):
    """A key/value pair passed to :meth:`Context.put_entry`."""

    key: K
    value: V

    def __str__(self) -> str:
        return f"Key [{self.key}]\nValue [{self.value}]"


# Called with the context itself when a key is not mapped.
Fallback = Callable[["Context[Any, Any]"], Any]


class Context(Generic[K, V]):
    """Thread-safe key-value store whose values may be ``None``.

    Pairs live in a :class:`ConcurrentMap` with every value wrapped in a
    :class:`Value`, so the map never holds a bare ``None`` and a stored
    ``None`` is still a mapping. Reads through :meth:`get` collapse
    "absent" and "stored ``None``" to ``None``; use :meth:`contains` to
    tell them apart.

    Construct with no argument for a fresh store, with another ``Context``
    to share (not copy) its backing map, or with a ``ConcurrentMap`` of
    ``Value`` wrappers to adopt an existing store.
    """

    def __init__(
        self,
        source: Context[K, V] | ConcurrentMap[K, Value[V]] | None = None,
    ) -> None:
        if source is None:
            self._entries: ConcurrentMap[K, Value[V]] = ConcurrentMap()
        elif isinstance(source, Context):
            self._entries = source._entries
        elif isinstance(source, ConcurrentMap):
            self._entries = source
        else:
            raise TypeError(
                f"Cannot build a context from {type(source).__name__!r}; "
                "expected a Context or a ConcurrentMap"
            )

    # --- read -----------------------------------------------------------------

    def get(self, key: K, fallback: Fallback = _NO_FALLBACK) -> V | None:
        """Return the value for *key*, or ``None`` if it is not mapped.

        When *fallback* is given and *key* is not mapped, ``fallback(self)``
        is called and its result returned. The result is not stored, and
        anything the fallback raises propagates to the caller.
        """
        if fallback is _NO_FALLBACK:
            wrapped = self._entries.get(key)
            return None if wrapped is None else wrapped.value
        if not callable(fallback):
            raise TypeError(
                f"fallback must be callable, got {type(fallback).__name__!r}"
            )
        wrapped = self._entries.get(key)
        if wrapped is None:
            log.debug("Key %r not mapped; computing fallback", key)
            return fallback(self)
        return wrapped.value

    def contains(self, key: K) -> bool:
        """Return True if *key* is mapped, including to ``None``."""
        return key in self._entries

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[K]:
        return self._entries.keys()

    def snapshot(self) -> dict[K, V]:
        """Return a shallow, unwrapped copy of the current pairs."""
        return {key: wrapped.value for key, wrapped in self._entries.items()}

    def __len__(self) -> int:
        return len(self._entries)

    # --- write ----------------------------------------------------------------

    def put(self, key: K, value: V) -> V | None:
        """Store *value* under *key*, returning the previous value or ``None``."""
        previous = self._entries.put(key, Value(value))
        return None if previous is None else previous.value

    def set(self, key: K, value: V) -> V | None:
        return self.put(key, value)

    def put_entry(self, entry: Entry[K, V]) -> V | None:
        return self.put(entry.key, entry.value)

    def put_if_absent(self, key: K, value: V) -> V | None:
        """Store *value* only if *key* is not mapped.

        Returns the existing value when one was present (nothing is
        written), otherwise ``None``.
        """
        previous = self._entries.put_if_absent(key, Value(value))
        return None if previous is None else previous.value

    def remove(self, key: K) -> V | None:
        previous = self._entries.remove(key)
        return None if previous is None else previous.value

    def apply_updates(self, updates: Mapping[K, V]) -> None:
        """Put every pair of *updates*; each key is written independently."""
        for key, value in updates.items():
            self.put(key, value)

    # --- sharing --------------------------------------------------------------

    @staticmethod
    def copy(source: Context[K, V], target: Context[K, V]) -> None:
        """Merge every pair of *source* into *target*, overwriting overlaps.

        The two contexts stay independent afterwards.
        """
        _require_context(source, "source")
        _require_context(target, "target")
        merged = target._entries.put_all(source._entries)
        log.debug(
            "Copied %d entries from %s to %s",
            merged,
            type(source).__name__,
            type(target).__name__,
        )

    @staticmethod
    def mirror(original: Context[K, V]) -> Context[K, V]:
        """Return a new handle of the same type sharing *original*'s storage."""
        _require_context(original, "original")
        log.debug("Mirroring %s", type(original).__name__)
        return type(original)(original)

    # --- dunder helpers -------------------------------------------------------

    def __str__(self) -> str:
        cls = type(self)
        parts = [f"{cls.__module__}.{cls.__qualname__} [\n"]
        for key, wrapped in self._entries.items():
            parts.append(f"Key [{key}]\nValue [{wrapped}]")
        parts.append("\n]")
        return "".join(parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={self._entries.keys()!r})"


def _require_context(obj: object, name: str) -> None:
    if not isinstance(obj, Context):
        raise TypeError(f"{name} must be a Context, got {type(obj).__name__!r}")


copy = Context.copy
mirror = Context.mirror
