"""Scene-anchor catalogue.

Anchors are loaded once from package data and validated up front: every id
must carry the prefix of the tier it declares, and each tier must hold exactly
the number of anchors the staircase expects.  After loading, tier lookup is a
plain dict access so a mistyped tag can never be silently reclassified.
"""
from __future__ import annotations

import importlib.resources as ir
import json
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Optional

from . import config
from .types import SceneAnchor

__all__ = ["AnchorBankError", "AnchorBank", "validate_anchors", "load_anchor_bank"]

_ID_RX = re.compile(r"^[a-z0-9_]+$")
_TRACKS = {"work", "travel", "study", "daily"}
_SKILLS = {"l", "s", "r", "w"}


class AnchorBankError(ValueError):
    """Raised when the anchor catalogue breaks its contract."""


def _check_row(idx: int, row: object) -> List[str]:
    where = f"anchors[{idx}]"
    if not isinstance(row, dict):
        return [f"{where}: expected an object"]
    errors: List[str] = []
    aid = row.get("id")
    if not isinstance(aid, str) or not _ID_RX.match(aid):
        errors.append(f"{where}.id: must match [a-z0-9_]+")
    hint = row.get("band_hint")
    if hint not in config.TIERS:
        errors.append(f"{where}.band_hint: must be one of {', '.join(config.TIERS)}")
    elif isinstance(aid, str) and not aid.startswith(config.TIER_PREFIX[hint]):
        errors.append(f"{where}.id: '{aid}' does not carry the {hint} prefix '{config.TIER_PREFIX[hint]}'")
    tracks = row.get("tracks")
    if not isinstance(tracks, list) or not tracks or any(t not in _TRACKS for t in tracks):
        errors.append(f"{where}.tracks: need at least one of {', '.join(sorted(_TRACKS))}")
    if row.get("skill") not in _SKILLS:
        errors.append(f"{where}.skill: must be one of l/s/r/w")
    for loc in config.LOCALES:
        text = row.get(loc)
        if not isinstance(text, str) or not text.strip():
            errors.append(f"{where}.{loc}: description must not be empty")
    return errors


def validate_anchors(rows: Iterable[object]) -> List[SceneAnchor]:
    """Validate raw catalogue rows and return them as ``SceneAnchor`` objects.

    All problems are collected before raising so a broken catalogue can be
    fixed in one pass.
    """

    rows = list(rows)
    errors: List[str] = []
    for idx, row in enumerate(rows):
        errors.extend(_check_row(idx, row))
    if errors:
        raise AnchorBankError("anchor catalogue invalid:\n" + "\n".join(errors))

    anchors = [
        SceneAnchor(
            id=r["id"], band_hint=r["band_hint"], tracks=tuple(r["tracks"]), skill=r["skill"],
            zh=r["zh"].strip(), en=r["en"].strip(), ar=r["ar"].strip(),
        )
        for r in rows
    ]

    seen: set[str] = set()
    for a in anchors:
        if a.id in seen:
            errors.append(f"duplicate anchor id '{a.id}'")
        seen.add(a.id)
    for tier in config.TIERS:
        count = sum(1 for a in anchors if a.band_hint == tier)
        want = config.TIER_TOTALS[tier]
        if count != want:
            errors.append(f"tier {tier} has {count} anchors (expected {want})")
    if errors:
        raise AnchorBankError("anchor catalogue invalid:\n" + "\n".join(errors))
    return anchors


class AnchorBank:
    def __init__(self, anchors: Iterable[SceneAnchor]):
        self.anchors: List[SceneAnchor] = list(anchors)
        self._by_id: Dict[str, SceneAnchor] = {a.id: a for a in self.anchors}

    def __len__(self) -> int:
        return len(self.anchors)

    def __contains__(self, tag: object) -> bool:
        return tag in self._by_id

    def get(self, tag: str) -> Optional[SceneAnchor]:
        return self._by_id.get(tag)

    def tier_of(self, tag: str) -> Optional[str]:
        anchor = self._by_id.get(tag)
        return anchor.band_hint if anchor else None

    def text(self, tag: str, locale: str) -> str:
        anchor = self._by_id.get(tag)
        return anchor.text(locale) if anchor else ""

    def by_tier(self, tier: str) -> List[SceneAnchor]:
        return [a for a in self.anchors if a.band_hint == tier]

    @classmethod
    def from_rows(cls, rows: Iterable[object]) -> "AnchorBank":
        return cls(validate_anchors(rows))


@lru_cache(maxsize=1)
def load_anchor_bank() -> AnchorBank:
    data = ir.files(__package__).joinpath("data/anchors.json").read_text(encoding="utf-8")
    return AnchorBank.from_rows(json.loads(data))
