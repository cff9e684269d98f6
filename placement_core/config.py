from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


ENGINE_VERSION: str = "v1.1"

BANDS: tuple[str, ...] = ("A2-", "A2", "A2+", "B1-", "B1")
TIERS: tuple[str, ...] = ("A1", "A2", "B1-")
LOCALES: tuple[str, ...] = ("zh", "en", "ar")
SELF_LEVELS: tuple[str, ...] = ("Pre-A", "A1", "A2", "B1", "B2")

# staircase: tier id prefix and catalogue size
TIER_PREFIX: dict[str, str] = {"A1": "a1_", "A2": "a2_", "B1-": "b1m_"}
TIER_TOTALS: dict[str, int] = {"A1": 4, "A2": 6, "B1-": 6}
TIER1_PASS: int = 3
TIER2_PASS: int = 4   # ceil(6 * 0.67)
TIER3_PASS: int = 4   # ceil(6 * 0.67)
STABLE_A2P_RATE: float = 0.9
STABLE_A2P_MAX_TIER3: int = 1

# Hand-tuned heuristic tables. Bands not listed get zero mass and each row is
# normalised before use.
SCENE_TABLE: dict[str, dict[str, float]] = {
    "below_tier1":  {"A2-": 0.60, "A2": 0.25, "A2+": 0.10},
    "tier1_only":   {"A2-": 0.35, "A2": 0.45, "A2+": 0.15},
    "stable_a2p":   {"A2+": 0.55, "A2": 0.25, "B1-": 0.15},
    "tier3":        {"B1-": 0.55, "A2+": 0.25, "B1": 0.10},
    "tier2_only":   {"A2": 0.40, "A2+": 0.35, "B1-": 0.20},
}
OBJECTIVE_TABLE: dict[int, dict[str, float]] = {
    0: {"A2-": 0.45, "A2": 0.35},
    1: {"A2": 0.35, "A2+": 0.35},
    2: {"A2+": 0.40, "B1-": 0.35},
}
OBJECTIVE_MAX: int = 2
SELF_TABLE: dict[str, dict[str, float]] = {
    "none": {"A2-": 0.25, "A2": 0.25, "A2+": 0.25, "B1-": 0.15, "B1": 0.10},
    "low":  {"A2-": 0.45, "A2": 0.30, "A2+": 0.15},
    "mid":  {"A2": 0.35, "A2+": 0.30, "B1-": 0.20},
    "high": {"A2+": 0.30, "B1-": 0.40, "B1": 0.20},
}
SELF_BUCKET: dict[str, str] = {"Pre-A": "low", "A1": "low", "A2": "mid", "B1": "high", "B2": "high"}

FUSION_WEIGHTS_WITH_OBJ: dict[str, float] = {"scene": 0.6, "objective": 0.3, "self": 0.1}
FUSION_WEIGHTS_NO_OBJ: dict[str, float] = {"scene": 0.8, "objective": 0.0, "self": 0.2}

CONFIDENCE_CAP: float = 0.95
CONFIDENCE_GAP_WEIGHT: float = 0.1
EVIDENCE_MAX: int = 6
MIN_SCENE_TAGS: int = 6
MAX_SCENE_TAGS: int = sum(TIER_TOTALS.values())

LEGACY_LEVEL: dict[str, str] = {"A2-": "A2", "A2": "A2", "A2+": "A2", "B1-": "B1", "B1": "B1"}

TRACE_FIELDS: tuple[str, ...] = ("stage", "weight", *BANDS)

# // operational switches only; scoring constants above stay fixed.
PLACEMENT_ENABLED: bool = _env_bool("PLACEMENT_ENABLED", True)
AUDIT_EXPORT_ENABLED: bool = _env_bool("AUDIT_EXPORT_ENABLED", True)
DEBUG_TRACE: bool = _env_bool("DEBUG_TRACE", False)
MAX_REQUEST_TAGS: int = _env_int("MAX_REQUEST_TAGS", MAX_SCENE_TAGS)


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("PLACEMENT_ENABLED"): cfg["PLACEMENT_ENABLED"] = _env_bool("PLACEMENT_ENABLED", True)
    if e.get("SUPPORTED_LOCALES"):
        cfg["SUPPORTED_LOCALES"] = [x.strip() for x in e["SUPPORTED_LOCALES"].split(",") if x.strip()]
    cfg.setdefault("PLACEMENT_ENABLED", PLACEMENT_ENABLED)
    locales = [x for x in cfg.get("SUPPORTED_LOCALES") or LOCALES if x in LOCALES]
    cfg["SUPPORTED_LOCALES"] = locales or list(LOCALES)
    return cfg
