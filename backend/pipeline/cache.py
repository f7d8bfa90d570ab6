"""
In-memory report cache.

Analyses are pure, so a report can be reused for any result set with the same
content.  Keys are content fingerprints, capacity is bounded LRU.  Reports go
in and come out as deep copies, so callers never share mutable state.
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict
from typing import Any, Hashable, List, Optional

from core.models import AnalysisReport, ResultSet


def _tagged(value: Any) -> List[str]:
    """Cell as [type, repr] so equal text of different types never collides."""
    kind = type(value)
    return [f"{kind.__module__}.{kind.__qualname__}", repr(value)]


def fingerprint(result_set: ResultSet) -> str:
    """sha256 over the canonical JSON of columns + type-tagged rows."""
    rows = [{k: _tagged(v) for k, v in row.items()} for row in result_set.rows]
    payload = json.dumps(
        {"columns": result_set.columns, "rows": rows},
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ReportCache:
    def __init__(self, max_size: int = 128):
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._items: "OrderedDict[Hashable, AnalysisReport]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[AnalysisReport]:
        with self._lock:
            cached = self._items.get(key)
            if cached is None:
                return None
            self._items.move_to_end(key)
        return cached.model_copy(deep=True)

    def set(self, key: Hashable, value: AnalysisReport) -> None:
        with self._lock:
            self._items[key] = value.model_copy(deep=True)
            self._items.move_to_end(key)
            if len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._items
