"""Decision and diagnostics over a fused band distribution.

Nothing here feeds back into the distribution: flags, evidence and the
rationale only annotate the chosen band.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from . import config
from .anchor_bank import AnchorBank
from .mapping import self_bucket
from .scene import dedupe_tags
from .types import SceneResult

FLAG_INSUFFICIENT = "insufficient_data"
FLAG_CONFLICT = "conflict_obj_scene"
FLAG_SELF_GAP = "self_gap_gt1band"


def pick_band(dist: Mapping[str, float]) -> str:
    """Arg-max over the bands; ties go to the weaker band."""

    best = config.BANDS[0]
    for band in config.BANDS[1:]:
        if dist.get(band, 0.0) > dist.get(best, 0.0):
            best = band
    return best


def confidence(dist: Mapping[str, float]) -> float:
    """Top probability plus a bonus for its lead over the runner-up, capped."""

    ranked = sorted((float(dist.get(b, 0.0)) for b in config.BANDS), reverse=True)
    top, second = ranked[0], ranked[1]
    value = top + config.CONFIDENCE_GAP_WEIGHT * (top - second)
    return max(0.0, min(config.CONFIDENCE_CAP, value))


def legacy_level(band: str) -> str:
    return config.LEGACY_LEVEL.get(band, "A2")


def derive_flags(scene: SceneResult, objective_score: Optional[int], self_level: Optional[str], band: str) -> List[str]:
    flags: List[str] = []
    if scene.total_hits < config.MIN_SCENE_TAGS or objective_score is None:
        flags.append(FLAG_INSUFFICIENT)
    if scene.passed_tier2 and not scene.passed_tier3 and objective_score == 0:
        flags.append(FLAG_CONFLICT)
    if self_bucket(self_level) == "low" and band in ("B1-", "B1"):
        flags.append(FLAG_SELF_GAP)
    return flags


def build_evidence(tags: Iterable[str], locale: str, bank: AnchorBank, cap: int = config.EVIDENCE_MAX) -> List[str]:
    evidence: List[str] = []
    for tag in dedupe_tags(tags):
        if len(evidence) >= cap:
            break
        phrase = bank.text(tag, locale)
        if phrase:
            evidence.append(phrase)
    return evidence


def build_rationale(tag_count: int, objective_score: Optional[int], self_level: Optional[str], band: str) -> str:
    obj = f"objective score {objective_score}/{config.OBJECTIVE_MAX}" if objective_score is not None else "no objective score"
    slf = f"self-assessment {self_level}" if self_level else "no self-assessment"
    return f"Placed at {band} from {tag_count} scene anchor(s), {obj} and {slf}."


def skill_diagnostic(scene: SceneResult, objective_score: Optional[int]) -> Dict[str, List[str]]:
    stronger: List[str] = []
    weaker: List[str] = []
    focus: List[str] = []
    if objective_score == 2:
        stronger.append("objective_items")
    elif objective_score == 0:
        weaker.append("objective_items")
        focus.append("basic_listening_reading")
    if scene.passed_tier3:
        stronger.append("scene_application")
    elif not scene.passed_tier1:
        weaker.append("basic_scenes")
        focus.append("everyday_expressions")
    return {"stronger_skills": stronger, "weaker_skills": weaker, "recommended_focus": focus}
