from __future__ import annotations
from typing import Dict, Optional
from .config import OBJECTIVE_TABLE, OBJECTIVE_MAX, SELF_TABLE, SELF_BUCKET
from .fusion import normalize

def clamp_objective(score: object) -> int:
    try:
        v = int(score)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    except OverflowError:
        return OBJECTIVE_MAX if score > 0 else 0  # type: ignore[operator]
    if v < 0: return 0
    if v > OBJECTIVE_MAX: return OBJECTIVE_MAX
    return v

def map_objective_score(score: object) -> Dict[str, float]:
    """Quiz score (correct answers out of 2) -> band distribution."""
    return normalize(OBJECTIVE_TABLE[clamp_objective(score)])

def self_bucket(level: Optional[str]) -> str:
    # unknown levels behave like no self-assessment
    return SELF_BUCKET.get(level or "", "none")

def map_self_prior(level: Optional[str]) -> Dict[str, float]:
    return normalize(SELF_TABLE[self_bucket(level)])
