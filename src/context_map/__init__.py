"""Context map: thread-safe key-value contexts with None-safe storage."""

from context_map.concurrent_map import ConcurrentMap
from context_map.context import Context, Entry, Fallback, Value, copy, mirror
from context_map.simple import SimpleContext

__version__ = "0.1.0"

__all__ = [
    # context
    "Context",
    "Value",
    "Entry",
    "Fallback",
    "copy",
    "mirror",
    # specializations
    "SimpleContext",
    # backing mapping
    "ConcurrentMap",
]
