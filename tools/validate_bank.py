from __future__ import annotations
from collections import defaultdict
import sys
from placement_core.anchor_bank import AnchorBankError, load_anchor_bank
from placement_core.config import LOCALES, TIERS, TIER_TOTALS

def main() -> int:
    try:
        bank = load_anchor_bank()
    except AnchorBankError as exc:
        print(exc)
        return 1

    print(f"Targets per tier: " + ", ".join(f"{t}={TIER_TOTALS[t]}" for t in TIERS) + "\n")

    for tier in TIERS:
        anchors = bank.by_tier(tier)
        by_skill = defaultdict(int)
        for a in anchors:
            by_skill[a.skill] += 1
        print(f"{tier}: {len(anchors)} anchors  " + " ".join(f"{s}={by_skill[s]}" for s in "lsrw"))
        for a in anchors:
            lens = " ".join(f"{loc}:{len(a.text(loc)):3d}" for loc in LOCALES)
            print(f"  {a.id:<30} [{','.join(a.tracks)}]  {lens}")
        print("  ✓ Meets target\n" if len(anchors) == TIER_TOTALS[tier] else "  → count mismatch\n")
    return 0

if __name__ == "__main__":
    sys.exit(main())
