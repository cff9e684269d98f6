from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Literal
Band = Literal["A2-","A2","A2+","B1-","B1"]
Tier = Literal["A1","A2","B1-"]
Locale = Literal["zh","en","ar"]
SelfLevel = Literal["Pre-A","A1","A2","B1","B2"]
LegacyLevel = Literal["A2","B1"]
Skill = Literal["l","s","r","w"]
@dataclass(frozen=True)
class SceneAnchor:
    id: str; band_hint: Tier; tracks: tuple; skill: Skill
    zh: str; en: str; ar: str
    def text(self, locale: str) -> str:
        return getattr(self, locale, "") if locale in ("zh","en","ar") else ""
@dataclass
class PlacementRequest:
    locale: Locale = "en"
    scene_tags: List[str] = field(default_factory=list)
    objective_score: Optional[int] = None
    self_assessed_level: Optional[str] = None
    track_hint: Optional[str] = None
@dataclass(frozen=True)
class SceneResult:
    hits: Dict[str, int]
    totals: Dict[str, int]
    passed_tier1: bool
    passed_tier2: bool
    passed_tier3: bool
    pattern: str
    distribution: Dict[str, float]
    @property
    def total_hits(self) -> int:
        return sum(self.hits.values())
@dataclass
class PlacementResult:
    mapped_start: LegacyLevel
    mapped_start_band: Band
    confidence: float
    band_distribution: Dict[str, float]
    flags: List[str]
    evidence_phrases: List[str]
    rationale: str
    breakdown: Dict[str, object] = field(default_factory=dict)
    diagnostic: Dict[str, List[str]] = field(default_factory=dict)
    metadata: Dict[str, object] = field(default_factory=dict)
    scene: Dict[str, object] = field(default_factory=dict)
    audit_events: List[Dict[str, object]] = field(default_factory=list)
