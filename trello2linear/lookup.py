"""Layered key resolution over nested mapping tables."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def resolve_nested(table: Mapping[str, Any], *keys: str | None) -> Any | None:
    """Walk ``table`` one key at a time and return the value at the end.

    Any miss along the way (absent key, ``None`` key, or a non-mapping value
    reached before the keys run out) resolves to ``None``.

    Example:
        >>> projects = {"Phase 1": {"Kombi": "f575..."}}
        >>> resolve_nested(projects, "Phase 1", "Kombi")
        'f575...'
        >>> resolve_nested(projects, "Phase 2", "Kombi") is None
        True
    """
    node: Any = table
    for key in keys:
        if key is None or not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node
