from __future__ import annotations

import json
import logging
from pathlib import Path

from core.exceptions import StorageError
from core.models import CollectionResult

log = logging.getLogger(__name__)


def write_collection(path: Path | str, result: CollectionResult) -> Path:
    """Write ``result`` as indented JSON, creating the directory if needed.

    The file is written to a hidden temporary sibling and renamed into place,
    so a reader never sees a half-written collection.
    """
    dst = Path(path)
    tmp = dst.with_name(f".{dst.name}.tmp")
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(
            json.dumps(result.to_payload(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp.replace(dst)
    except (OSError, TypeError, ValueError) as exc:
        if tmp.exists():
            tmp.unlink()
        raise StorageError(f"failed to write {dst}: {exc}") from exc

    log.info("Saved %d tweets to %s", result.total_count, dst)
    return dst
