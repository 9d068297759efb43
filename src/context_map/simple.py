"""Context specialized to string keys and arbitrary values."""

from __future__ import annotations

from typing import Any

from context_map.context import Context


class SimpleContext(Context[str, Any]):
    """A ``Context[str, Any]``; adds no behaviour."""
