from __future__ import annotations
from fastapi import FastAPI, Body, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
import json, logging, time, typing as t

# ---- Engine imports ----
from placement_core.engine import evaluate
from placement_core.types import PlacementRequest
from placement_core.anchor_bank import load_anchor_bank
from placement_core.config import (
    load_config,
    AUDIT_EXPORT_ENABLED,
    ENGINE_VERSION,
    FUSION_WEIGHTS_NO_OBJ,
    FUSION_WEIGHTS_WITH_OBJ,
    LOCALES,
    MAX_REQUEST_TAGS,
    TIERS,
)
from placement_core.audit_export import to_csv as audit_to_csv

log = logging.getLogger(__name__)

app = FastAPI(title="QuickPlacement API")

ALLOWED_ORIGINS = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class PlacementReq(BaseModel):
    locale: t.Literal["zh", "en", "ar"] = "en"
    user_answers: list[int] = Field(default_factory=list)  # accepted for v1 clients, unused
    scene_tags: list[str] = Field(default_factory=list)
    objective_score: int | None = None  # clamped by the engine, never rejected
    self_assessed_level: t.Literal["Pre-A", "A1", "A2", "B1", "B2"] | None = None
    track_hint: str | None = None

    @field_validator("scene_tags")
    @classmethod
    def _collapse_tags(cls, v: list[str]) -> list[str]:
        out = list(dict.fromkeys(v))
        if len(out) > MAX_REQUEST_TAGS:
            raise ValueError(f"at most {MAX_REQUEST_TAGS} distinct scene tags")
        return out

    def to_engine(self) -> PlacementRequest:
        return PlacementRequest(
            locale=self.locale,
            scene_tags=list(self.scene_tags),
            objective_score=self.objective_score,
            self_assessed_level=self.self_assessed_level,
            track_hint=self.track_hint,
        )

# ---- Helpers ----
def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _meta(t0: float) -> dict[str, t.Any]:
    return {
        "version": ENGINE_VERSION,
        "timestamp": _now_iso(),
        "processing_time_ms": int((time.perf_counter() - t0) * 1000),
    }


def _error(status: int, code: str, message: str, t0: float) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": {"code": code, "message": message}, "metadata": _meta(t0)},
    )


def _serialize_result(res: t.Any) -> dict[str, t.Any]:
    return json.loads(json.dumps(res, default=lambda o: getattr(o, "__dict__", o), ensure_ascii=False))


def _disabled() -> bool:
    return not load_config().get("PLACEMENT_ENABLED", True)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": {"code": "VALIDATION_ERROR", "message": "request body is malformed", "details": details},
            "metadata": _meta(time.perf_counter()),
        },
    )

# ---- Health ----
@app.get("/")
def root():
    return {"status": "ok", "service": "quick-placement-api"}


@app.get("/health")
def health():
    cfg = load_config()
    return {
        "placement_enabled": bool(cfg.get("PLACEMENT_ENABLED", True)),
        "anchors_loaded": len(load_anchor_bank()),
        "version": ENGINE_VERSION,
    }

# ---- Placement ----
@app.post("/placement/evaluate")
def evaluate_placement(req: PlacementReq = Body(...), audit: bool = Query(False, description="Keep per-stage audit events")):
    t0 = time.perf_counter()
    if _disabled():
        return _error(503, "FEATURE_DISABLED", "quick placement is not enabled", t0)
    try:
        data = _serialize_result(evaluate(req.to_engine()))
    except Exception:
        log.exception("placement evaluation failed")
        return _error(500, "INTERNAL_ERROR", "internal server error", t0)
    if not audit:
        data.pop("audit_events", None)
    return {"success": True, "data": data, "metadata": _meta(t0)}


@app.post("/placement/evaluate/audit.csv")
def evaluate_audit_csv(req: PlacementReq = Body(...)):
    t0 = time.perf_counter()
    if not AUDIT_EXPORT_ENABLED:
        return _error(404, "AUDIT_DISABLED", "audit export disabled", t0)
    if _disabled():
        return _error(503, "FEATURE_DISABLED", "quick placement is not enabled", t0)
    try:
        res = evaluate(req.to_engine())
    except Exception:
        log.exception("placement audit export failed")
        return _error(500, "INTERNAL_ERROR", "internal server error", t0)
    return Response(
        content=audit_to_csv(res.audit_events),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=\"placement_audit.csv\""},
    )


@app.get("/placement/anchors")
def list_anchors(locale: str = Query("en")):
    t0 = time.perf_counter()
    cfg = load_config()
    if locale not in cfg["SUPPORTED_LOCALES"]:
        return _error(400, "INVALID_LOCALE", f"unsupported locale, use one of {', '.join(cfg['SUPPORTED_LOCALES'])}", t0)
    if not cfg.get("PLACEMENT_ENABLED", True):
        return _error(503, "FEATURE_DISABLED", "quick placement is not enabled", t0)
    bank = load_anchor_bank()
    tiers = {
        tier: [
            {"id": a.id, "text": a.text(locale), "skill": a.skill, "tracks": list(a.tracks)}
            for a in bank.by_tier(tier)
        ]
        for tier in TIERS
    }
    return {"success": True, "data": {"locale": locale, "tiers": tiers}, "metadata": _meta(t0)}


@app.get("/placement/config")
def placement_config():
    t0 = time.perf_counter()
    cfg = load_config()
    data = {
        "features": {
            "placement_enabled": bool(cfg.get("PLACEMENT_ENABLED", True)),
            "audit_export_enabled": AUDIT_EXPORT_ENABLED,
        },
        "weights": {
            "with_objective": dict(FUSION_WEIGHTS_WITH_OBJ),
            "without_objective": dict(FUSION_WEIGHTS_NO_OBJ),
        },
        "settings": {
            "max_scene_tags": MAX_REQUEST_TAGS,
            "supported_locales": list(cfg.get("SUPPORTED_LOCALES") or LOCALES),
        },
    }
    return {"success": True, "data": data, "metadata": _meta(t0)}
