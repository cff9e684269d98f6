from __future__ import annotations
from typing import Dict, Mapping
from .config import BANDS, FUSION_WEIGHTS_WITH_OBJ, FUSION_WEIGHTS_NO_OBJ

def normalize(values: Mapping[str, float]) -> Dict[str, float]:
    """Return a fresh distribution over all bands summing to 1.

    Missing bands count as 0 and negative values are floored at 0.  A zero
    total falls back to a denominator of 1.
    """
    raw = {b: max(0.0, float(values.get(b, 0.0))) for b in BANDS}
    z = sum(raw.values()) or 1.0
    return {b: raw[b] / z for b in BANDS}

def fusion_weights(has_objective: bool) -> Dict[str, float]:
    return dict(FUSION_WEIGHTS_WITH_OBJ if has_objective else FUSION_WEIGHTS_NO_OBJ)

def fuse(p_scene: Mapping[str, float], p_obj: Mapping[str, float], p_self: Mapping[str, float],
         has_objective: bool) -> Dict[str, float]:
    w = fusion_weights(has_objective)
    fused = {
        b: w["scene"] * p_scene.get(b, 0.0) + w["objective"] * p_obj.get(b, 0.0) + w["self"] * p_self.get(b, 0.0)
        for b in BANDS
    }
    return normalize(fused)
