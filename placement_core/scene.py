# placement_core/scene.py
from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional

from . import config
from .anchor_bank import AnchorBank, load_anchor_bank
from .fusion import normalize
from .types import SceneResult

log = logging.getLogger(__name__)


def dedupe_tags(tags: Iterable[str] | None) -> List[str]:
    """Drop repeats and non-strings, keeping first-seen order."""
    out: List[str] = []
    seen: set[str] = set()
    for t in tags or ():
        if isinstance(t, str) and t not in seen:
            seen.add(t)
            out.append(t)
    return out


def count_hits(tags: Iterable[str], bank: AnchorBank) -> Dict[str, int]:
    hits = {tier: 0 for tier in config.TIERS}
    for tag in dedupe_tags(tags):
        tier = bank.tier_of(tag)
        if tier is None:
            log.debug("ignoring unknown scene tag %r", tag)
            continue
        hits[tier] += 1
    return hits


def _pattern(hits: Dict[str, int], p1: bool, p2: bool, p3: bool) -> str:
    if not p1:
        return "below_tier1"
    if not p2:
        return "tier1_only"
    tier2_rate = hits["A2"] / config.TIER_TOTALS["A2"]
    # strong tier 2 but tier 3 barely touched
    if tier2_rate >= config.STABLE_A2P_RATE and hits["B1-"] <= config.STABLE_A2P_MAX_TIER3:
        return "stable_a2p"
    if p3:
        return "tier3"
    return "tier2_only"


def evaluate_scene(tags: Iterable[str] | None, bank: Optional[AnchorBank] = None) -> SceneResult:
    bank = bank or load_anchor_bank()
    hits = count_hits(tags or (), bank)
    passed1 = hits["A1"] >= config.TIER1_PASS
    passed2 = passed1 and hits["A2"] >= config.TIER2_PASS
    passed3 = passed2 and hits["B1-"] >= config.TIER3_PASS
    pattern = _pattern(hits, passed1, passed2, passed3)
    return SceneResult(
        hits=hits,
        totals=dict(config.TIER_TOTALS),
        passed_tier1=passed1,
        passed_tier2=passed2,
        passed_tier3=passed3,
        pattern=pattern,
        distribution=normalize(config.SCENE_TABLE[pattern]),
    )
