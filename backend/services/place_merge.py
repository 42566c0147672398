"""
Merge place lists from several sources into one display list.

Sources are concatenated in the order given and the first record seen for
each case-insensitive name wins. Each source is expected to be sorted
already (repository results by rating or distance, Geoapify results by
distance); nothing is re-sorted here.

Only exact matches after normalisation are merged, so "Kuta Beach" and
"Pantai Kuta" both survive.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Optional


def _name_of(record: Any) -> Any:
    if isinstance(record, dict):
        return record.get("name")
    return getattr(record, "name", None)


def normalize_name(name: Any) -> Optional[str]:
    """Trimmed, lower-cased name, or None when there is no usable name."""
    if not isinstance(name, str):
        return None
    normalized = name.strip().lower()
    return normalized or None


def merge_places(*sources: Optional[Iterable[Any]]) -> List[Any]:
    """Concatenate `sources` keeping the first record per normalised name.

    Records may be domain `Place` objects or plain dicts. Records without a
    usable name are dropped and a `None` source counts as empty.
    """
    seen: set[str] = set()
    merged: List[Any] = []
    for source in sources:
        for record in source or []:
            key = normalize_name(_name_of(record))
            if key is None or key in seen:
                continue
            seen.add(key)
            merged.append(record)
    return merged


def dedupe_places(places: Optional[Iterable[Any]]) -> List[Any]:
    return merge_places(places)
