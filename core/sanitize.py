"""Turn free-form queries and trend labels into stable file names.

``slugify`` is deterministic and idempotent: its output only ever contains
``[a-z0-9_]`` (plus ``:`` for queries), has no doubled or edge underscores,
and is therefore a fixed point of itself.

Distinct inputs that differ only in stripped characters map to the same
slug, e.g. ``"btc!"`` and ``"btc?"``; no disambiguation is attempted.
"""

from __future__ import annotations

import re
from pathlib import Path

OUTPUT_EXTENSION = ".json"

_WHITESPACE_RE = re.compile(r"\s+")
# Queries keep ':' so operators like min_faves:1000 stay readable.
_QUERY_DISALLOWED_RE = re.compile(r"[^a-z0-9_:]")
_LABEL_DISALLOWED_RE = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")


def slugify(text: str, *, keep_colon: bool = True) -> str:
    slug = _WHITESPACE_RE.sub("_", text.lower())
    disallowed = _QUERY_DISALLOWED_RE if keep_colon else _LABEL_DISALLOWED_RE
    slug = disallowed.sub("_", slug)
    slug = _UNDERSCORE_RUN_RE.sub("_", slug)
    return slug.strip("_")


def build_output_path(
    data_dir: str | Path,
    text: str,
    target: int,
    *,
    prefix: str = "",
    keep_colon: bool = True,
) -> Path:
    """``<data_dir>/[<prefix>_]<slug>_<target>.json``; empty parts are left out."""
    parts = [prefix, slugify(text, keep_colon=keep_colon), str(target)]
    filename = "_".join(p for p in parts if p) + OUTPUT_EXTENSION
    return Path(data_dir) / filename
