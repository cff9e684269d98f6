# placement_core/engine.py
from __future__ import annotations
from typing import Dict, List, Mapping, Optional
import logging

from .types import PlacementRequest, PlacementResult
from .anchor_bank import AnchorBank, load_anchor_bank
from .scene import dedupe_tags, evaluate_scene
from .mapping import clamp_objective, map_objective_score, map_self_prior, self_bucket
from .fusion import fuse, fusion_weights
from . import diagnostics as dx
from .config import BANDS, DEBUG_TRACE, ENGINE_VERSION, OBJECTIVE_MAX, TRACE_FIELDS


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _stage_event(stage: str, weight: Optional[float], dist: Mapping[str, float]) -> Dict[str, object]:
    event: Dict[str, object] = {"stage": stage, "weight": weight}
    for b in BANDS:
        event[b] = float(dist[b])
    _emit_trace(**{k: (round(v, 4) if isinstance(v, float) else v) for k, v in event.items()})
    return event


def _coerce(request: PlacementRequest | Mapping[str, object]) -> PlacementRequest:
    if isinstance(request, PlacementRequest):
        return request
    tags = request.get("scene_tags") or []
    if isinstance(tags, str):
        tags = [tags]
    return PlacementRequest(
        locale=str(request.get("locale") or "en"),  # type: ignore[arg-type]
        scene_tags=list(tags),  # type: ignore[call-overload]
        objective_score=request.get("objective_score"),  # type: ignore[arg-type]
        self_assessed_level=request.get("self_assessed_level"),  # type: ignore[arg-type]
        track_hint=request.get("track_hint"),  # type: ignore[arg-type]
    )


def evaluate(request: PlacementRequest | Mapping[str, object], bank: Optional[AnchorBank] = None) -> PlacementResult:
    """Run one QuickPlacement evaluation.

    Pure with respect to its inputs: nothing is cached between calls except
    the read-only anchor catalogue, so concurrent callers need no locking.
    """
    req = _coerce(request)
    bank = bank or load_anchor_bank()
    tags: List[str] = dedupe_tags(req.scene_tags)
    has_obj = req.objective_score is not None
    obj_score = clamp_objective(req.objective_score) if has_obj else None
    self_level = req.self_assessed_level if self_bucket(req.self_assessed_level) != "none" else None

    scene = evaluate_scene(tags, bank)
    p_obj = map_objective_score(obj_score if has_obj else 0)
    p_self = map_self_prior(self_level)
    weights = fusion_weights(has_obj)
    p_fused = fuse(scene.distribution, p_obj, p_self, has_obj)

    audit = [
        _stage_event("scene", weights["scene"], scene.distribution),
        _stage_event("objective", weights["objective"], p_obj),
        _stage_event("self", weights["self"], p_self),
        _stage_event("fused", None, p_fused),
    ]

    band = dx.pick_band(p_fused)
    conf = dx.confidence(p_fused)
    flags = dx.derive_flags(scene, obj_score, self_level, band)
    if flags:
        log.debug("placement flags %s for band %s", flags, band)

    correct = obj_score or 0
    return PlacementResult(
        mapped_start=dx.legacy_level(band),  # type: ignore[arg-type]
        mapped_start_band=band,  # type: ignore[arg-type]
        confidence=conf,
        band_distribution=p_fused,
        flags=flags,
        evidence_phrases=dx.build_evidence(tags, req.locale, bank),
        rationale=dx.build_rationale(len(tags), obj_score, self_level, band),
        breakdown={
            "objective_score": {
                "correct": correct,
                "total": OBJECTIVE_MAX,
                "accuracy": correct / OBJECTIVE_MAX,
            },
            "self_assessment": self_level,
            "fusion_weights": weights,
        },
        diagnostic=dx.skill_diagnostic(scene, obj_score),
        metadata={
            "version": ENGINE_VERSION,
            "locale": req.locale,
            "question_count": OBJECTIVE_MAX,
            "track_hint": req.track_hint,
        },
        scene={
            "hits": dict(scene.hits),
            "totals": dict(scene.totals),
            "passed_tier1": scene.passed_tier1,
            "passed_tier2": scene.passed_tier2,
            "passed_tier3": scene.passed_tier3,
            "pattern": scene.pattern,
        },
        audit_events=audit,
    )
