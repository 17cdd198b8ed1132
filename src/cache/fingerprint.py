# src/cache/fingerprint.py - v2
"""Deterministic cache addressing for (query, filter-set) pairs.

The fingerprint must be identical across process restarts and independent
of filter key order, so equivalent searches always land on the same slot.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from searchcache.core.models import FilterSet

_SEPARATOR = "\x1f"


def normalize_query(query: str, casefold: bool = False) -> str:
    """Trim surrounding whitespace; optionally case-fold."""
    normalized = query.strip()
    if casefold:
        normalized = normalized.casefold()
    return normalized


def canonicalize_filters(filters: FilterSet | None) -> str:
    """Serialize a filter set to canonical JSON (sorted keys, no spaces).

    None-valued entries are dropped at every level so that an unset filter
    and a missing filter address the same slot.
    """
    return json.dumps(
        _drop_none(filters or {}),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def compute_fingerprint(
    query: str,
    filters: FilterSet | None = None,
    casefold: bool = False,
) -> str:
    """SHA-256 hex digest of the normalized query and canonical filters."""
    material = normalize_query(query, casefold) + _SEPARATOR + canonicalize_filters(filters)
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_drop_none(v) for v in value]
    return value
