from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from . import config
from .anchor_bank import load_anchor_bank
from .types import SceneAnchor

TRACKS: tuple[str, ...] = ("work", "travel", "study", "daily")
SKILLS: tuple[str, ...] = ("l", "s", "r", "w")

# a tier should be selectable from every track with at least this many anchors
MIN_PER_TRACK: int = 1


def _blank_tier() -> dict[str, object]:
    return {
        "count": 0,
        "tracks": {t: 0 for t in TRACKS},
        "skills": {s: 0 for s in SKILLS},
        "missing_text": {loc: 0 for loc in config.LOCALES},
    }


def audit_anchors(anchors: Iterable[SceneAnchor]) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {tier: _blank_tier() for tier in config.TIERS}
    totals = {"anchors": 0, "missing_text": 0}

    for anchor in anchors:
        data = coverage.setdefault(anchor.band_hint, _blank_tier())
        data["count"] += 1  # type: ignore[operator]
        totals["anchors"] += 1
        for track in anchor.tracks:
            data["tracks"][track] = data["tracks"].get(track, 0) + 1  # type: ignore[index,union-attr]
        data["skills"][anchor.skill] = data["skills"].get(anchor.skill, 0) + 1  # type: ignore[index,union-attr]
        for loc in config.LOCALES:
            if not anchor.text(loc):
                data["missing_text"][loc] += 1  # type: ignore[index]
                totals["missing_text"] += 1

    warnings: list[str] = []
    for tier, data in coverage.items():
        want = config.TIER_TOTALS.get(tier, 0)
        if data["count"] != want:
            warnings.append(f"tier {tier} has {data['count']} anchors (expected {want})")
        tracks = data["tracks"]  # type: ignore[assignment]
        for track in TRACKS:
            if tracks.get(track, 0) < MIN_PER_TRACK:
                warnings.append(f"tier {tier} track {track} has {tracks.get(track, 0)} (<{MIN_PER_TRACK})")
        missing = data["missing_text"]  # type: ignore[assignment]
        for loc, n in missing.items():
            if n:
                warnings.append(f"tier {tier} has {n} anchors without {loc} text")

    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def _format_row(label: str, keys: Iterable[str], data: dict[str, int]) -> str:
    parts = [label]
    for k in keys:
        parts.append(f"{k}:{data.get(k, 0):2d}")
    return "  ".join(parts)


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[str, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Anchor Coverage ===")
    for tier in config.TIERS:
        data = coverage[tier]
        print(f"\nTier: {tier} ({data['count']}/{config.TIER_TOTALS[tier]})")
        print("  " + _format_row("tracks", TRACKS, data["tracks"]))  # type: ignore[arg-type]
        print("  " + _format_row("skills", SKILLS, data["skills"]))  # type: ignore[arg-type]

    warnings: list[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("/tmp/anchor_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True, ensure_ascii=False)
    path.write_text(text + "\n", encoding="utf-8")
    print(text)
    return text


def main(_argv: list[str] | None = None) -> int:
    anchors = load_anchor_bank().anchors
    summary = audit_anchors(anchors)
    print_report(summary)
    write_summary(summary)
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
