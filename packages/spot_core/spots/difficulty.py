from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DifficultyFeatures:
    street: str  # p / f / t / r
    options_count: int
    is_multiway: bool = False
    is_river_big_bet_bluffcatch: bool = False
    is_polarized_node: bool = False
    is_close_ev: bool = False


def score_difficulty(f: DifficultyFeatures) -> int:
    """1-10 rubric: option count baseline, later streets and polarity add."""
    if f.options_count <= 2:
        d = 2
    elif f.options_count == 3:
        d = 5
    else:
        d = 6

    if f.street == "t":
        d += 1
    elif f.street == "r":
        d += 2
    if f.is_polarized_node:
        d += 2
    if f.is_close_ev:
        d += 1
    if f.is_multiway or f.is_river_big_bet_bluffcatch:
        d = max(d, 9)
    return max(1, min(10, d))


def features_from_spot(spot: Mapping[str, Any], close_ev: float = 0.2) -> DifficultyFeatures:
    data = spot.get("data")
    data = data if isinstance(data, Mapping) else {}
    opts = data.get("opts") or []
    sol = data.get("sol")
    ev = sorted(sol.get("ev") or [], reverse=True) if isinstance(sol, Mapping) else []
    # 超池或全下选项 = 两极化节点
    polarized = any(
        isinstance(o, list)
        and o
        and (o[0] == "a" or (o[0] == "b" and len(o) > 1 and isinstance(o[1], (int, float)) and o[1] >= 100))
        for o in opts
    )
    return DifficultyFeatures(
        street=str(data.get("str") or spot.get("str") or "p"),
        options_count=len(opts),
        is_multiway=len(data.get("v") or []) > 1,
        is_polarized_node=polarized,
        is_close_ev=len(ev) >= 2 and ev[0] - ev[1] < close_ev,
    )


__all__ = ["DifficultyFeatures", "features_from_spot", "score_difficulty"]
