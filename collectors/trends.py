from __future__ import annotations

import logging

from collectors.base import SearchProvider
from collectors.gopher import GET_TRENDS
from core.exceptions import ProviderError, TrendsError

log = logging.getLogger(__name__)


def fetch_trends(provider: SearchProvider) -> list[str]:
    """Fetch the current trending topics, in the order the provider ranks them.

    Each trend document is labelled by its ``id``, falling back to its
    ``content``. Blank labels are dropped.
    """
    try:
        job = provider.submit_job({"type": GET_TRENDS})
    except ProviderError as exc:
        raise TrendsError(f"failed to submit get trends job: {exc}") from exc
    if job.error:
        raise TrendsError(f"get trends job error: {job.error}")
    if not job.uuid:
        raise TrendsError("get trends job returned no job ID")

    log.info("Get trends job submitted, waiting for completion (job ID: %s)", job.uuid)
    try:
        docs = provider.wait_for_job(job.uuid)
    except ProviderError as exc:
        raise TrendsError(f"failed to wait for trends job: {exc}") from exc

    if not docs:
        raise TrendsError("no trends returned")

    trends: list[str] = []
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        label = str(doc.get("id") or doc.get("content") or "").strip()
        if label:
            trends.append(label)
    return trends
