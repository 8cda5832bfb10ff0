from __future__ import annotations

import logging

from collectors.base import RateLimiter, SearchProvider
from collectors.cursor import extract_cursor
from core.exceptions import CursorExtractionError, ProviderError
from core.models import FetchedItem, PaginationOutcome, SearchRequest, StopReason

log = logging.getLogger(__name__)


def cursor_query(base_query: str, cursor: int) -> str:
    # Always built from the base query so the string never accumulates.
    return f"{base_query} max_id:{cursor}"


def paginate(
    provider: SearchProvider,
    base_query: str,
    target: int,
    page_size: int,
    limiter: RateLimiter | None = None,
) -> PaginationOutcome:
    """Collect up to ``target`` items for ``base_query``, newest first.

    Each request asks for ``min(page_size, target - collected)`` items. The
    loop ends when the target is met, the provider returns an empty page, a
    request fails, or the last item of a batch yields no cursor. Whatever was
    gathered before a failure is returned with the matching ``StopReason``.
    """
    if target <= 0:
        raise ValueError(f"target must be greater than 0, got: {target}")
    if page_size <= 0:
        raise ValueError(f"page_size must be greater than 0, got: {page_size}")

    items: list[FetchedItem] = []
    requests: list[SearchRequest] = []
    query = base_query

    def done(reason: StopReason, error: str = "") -> PaginationOutcome:
        return PaginationOutcome(
            items=items, stop_reason=reason, requests=requests, error=error
        )

    while len(items) < target:
        if limiter is not None:
            limiter.wait()

        request = SearchRequest(query=query, limit=min(page_size, target - len(items)))
        requests.append(request)
        log.info(
            "Fetching batch of %d (current: %d/%d)", request.limit, len(items), target
        )

        try:
            batch = provider.search(request.query, request.limit)
        except ProviderError as exc:
            log.warning("Error fetching results for '%s': %s", base_query, exc)
            return done(StopReason.PROVIDER_ERROR, str(exc))
        finally:
            if limiter is not None:
                limiter.mark()

        if not batch:
            log.info("No more results available for '%s'", base_query)
            return done(StopReason.EXHAUSTED)

        items.extend(batch[: target - len(items)])
        log.info("Fetched %d in this batch. Total: %d/%d", len(batch), len(items), target)

        if len(items) >= target:
            return done(StopReason.TARGET_REACHED)

        try:
            cursor = extract_cursor(batch)
        except CursorExtractionError as exc:
            log.warning("Error extracting last tweet ID for '%s': %s", base_query, exc)
            return done(StopReason.CURSOR_ERROR, str(exc))

        query = cursor_query(base_query, cursor)

    return done(StopReason.TARGET_REACHED)
