"""Derive the ``max_id`` cursor from the oldest item of a batch."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from core.exceptions import CursorExtractionError
from core.models import FetchedItem

CURSOR_METADATA_KEY = "tweet_id"


def _coerce_id(value: Any) -> int | None:
    """Accept ints, floats (truncated toward zero) and numeric strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _from_metadata(item: FetchedItem) -> int | None:
    metadata = item.get("metadata")
    if not isinstance(metadata, Mapping):
        return None
    return _coerce_id(metadata.get(CURSOR_METADATA_KEY))


def _from_item_id(item: FetchedItem) -> int | None:
    return _coerce_id(item.get("id"))


# Tried in order; the first strategy returning a value wins.
CURSOR_STRATEGIES: tuple[Callable[[FetchedItem], int | None], ...] = (
    _from_metadata,
    _from_item_id,
)


def cursor_for_item(item: FetchedItem) -> int | None:
    if not isinstance(item, Mapping):
        return None
    for strategy in CURSOR_STRATEGIES:
        cursor = strategy(item)
        if cursor is not None:
            return cursor
    return None


def extract_cursor(batch: Sequence[FetchedItem]) -> int:
    """Cursor of the last item in ``batch``.

    Raises ``CursorExtractionError`` when the batch is empty or the last item
    carries no usable identifier.
    """
    if not batch:
        raise CursorExtractionError("no results to extract tweet ID from")
    cursor = cursor_for_item(batch[-1])
    if cursor is None:
        raise CursorExtractionError("could not extract tweet_id from document")
    return cursor
