"""
Content hashing for caller-owned caches.
"""

import hashlib
import json
from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel

from openchart.core.domain.series import Series


def _canonical(obj):
    """
    JSON-safe rendering that keeps the type of every non-JSON value.

    A datetime and its ISO string render differently, and mappings become
    pair lists sorted by (key type, key text) so mixed key types are allowed.
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, datetime):
        return {"__datetime__": obj.isoformat()}
    if isinstance(obj, BaseModel):
        return {"__model__": type(obj).__qualname__, "data": _canonical(obj.model_dump(mode="json"))}
    if isinstance(obj, dict):
        items = [[type(k).__qualname__, str(k), _canonical(v)] for k, v in obj.items()]
        return {"__mapping__": sorted(items, key=lambda item: (item[0], item[1]))}
    if isinstance(obj, (list, tuple)):
        return [_canonical(v) for v in obj]
    return {"__object__": f"{type(obj).__qualname__}:{obj!r}"}


def content_hash(series_list: Sequence[Series], *parts) -> str:
    """
    SHA-256 over a canonical JSON rendering of the series and extra parts.

    Args:
        series_list: Raw input series
        *parts: Configuration models or plain values that affect the result
    """
    payload = {
        "series": [
            {
                "id": _canonical(s.id),
                "label": _canonical(s.label),
                "color": _canonical(s.color),
                "points": [[_canonical(p.timestamp), _canonical(p.value), _canonical(p.metadata)] for p in s.points],
            }
            for s in series_list
        ],
        "parts": _canonical(list(parts)),
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
