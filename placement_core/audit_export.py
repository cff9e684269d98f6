"""Helpers to export the per-stage audit trail of an evaluation in JSON/CSV."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

from .config import BANDS

_FIELDS: tuple[str, ...] = ("stage", "weight", *BANDS)


def _normalize_event(event: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = event.get(key)
        if key == "stage":
            out[key] = "" if val is None else str(val)
        elif key == "weight" and val is None:
            out[key] = ""
        else:
            try:
                out[key] = round(float(val), 6)
            except (TypeError, ValueError):
                out[key] = 0.0
    return out


def to_json(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for audit export."""

    normalized: List[Dict[str, Any]] = [_normalize_event(evt or {}) for evt in events]
    return {"events": normalized}


def to_csv(events: Iterable[Dict[str, Any]]) -> str:
    """Render audit events as CSV with a fixed header."""

    normalized = [_normalize_event(evt or {}) for evt in events]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
