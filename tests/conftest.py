from __future__ import annotations

import copy
import json
import importlib.resources as ir

import pytest

from placement_core.anchor_bank import AnchorBank, load_anchor_bank
from placement_core.config import BANDS


def anchor_rows() -> list[dict]:
    """Raw catalogue rows as shipped; callers get their own copy to mutate."""

    text = ir.files("placement_core").joinpath("data/anchors.json").read_text(encoding="utf-8")
    return copy.deepcopy(json.loads(text))


def tier_tags(tier: str) -> list[str]:
    return [a.id for a in load_anchor_bank().by_tier(tier)]


def pick_tags(a1: int = 0, a2: int = 0, b1m: int = 0) -> list[str]:
    """First ``n`` catalogue tags of each staircase tier."""

    return tier_tags("A1")[:a1] + tier_tags("A2")[:a2] + tier_tags("B1-")[:b1m]


def assert_distribution(dist: dict) -> None:
    assert set(dist) == set(BANDS)
    assert all(v >= 0.0 for v in dist.values())
    assert abs(sum(dist.values()) - 1.0) < 1e-6


@pytest.fixture
def bank() -> AnchorBank:
    return load_anchor_bank()
