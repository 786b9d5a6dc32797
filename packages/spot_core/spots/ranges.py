"""Preflop range charts: token expansion, combo enumeration and a load-once book."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from spot_core.cards import RANKS, SUITS
from spot_core.engine.config_loader import config_path, load_yaml_file

Combo = tuple[str, str]

RFI_BUCKETS = ("raise", "pairs", "suited", "offsuit")
# limp 不算开池范围
DEFEND_BUCKETS = ("call", "3bet_small", "pairs", "suited", "offsuit")


def _idx(rank: str) -> int:
    try:
        return RANKS.index(rank)
    except ValueError:
        return -1


def _expand_pairs(token: str) -> list[str]:
    if "+" in token:
        start = _idx(token[0])
        if start < 0:
            return []
        return [RANKS[i] * 2 for i in range(start, -1, -1)]
    if "-" in token:
        a, b = token.split("-", 1)
        start, end = _idx(a[0]), _idx(b[0])
        if start < 0 or end < 0:
            return []
        return [RANKS[i] * 2 for i in range(start, end - 1, -1)]
    return [token]


def _suitedness(token: str) -> str | None:
    if token.endswith("s"):
        return "s"
    if token.endswith("o"):
        return "o"
    return None


def _expand_plus(token: str) -> list[str]:
    # 第一张固定，第二张一直升到第一张下面一档
    base = token.replace("+", "")
    suited = _suitedness(base)
    if suited is None:
        return [token]
    i1, i2 = _idx(base[0]), _idx(base[1])
    if i1 < 0 or i2 < 0:
        return []
    return [f"{base[0]}{RANKS[j]}{suited}" for j in range(i2, i1, -1)]


def _expand_dash(token: str) -> list[str]:
    a, b = token.split("-", 1)
    suited = _suitedness(a)
    if suited is None:
        return [token]
    if a[0] != b[0]:
        # only same-first-rank runs are supported
        return [a, b]
    i1, start, end = _idx(a[0]), _idx(a[1]), _idx(b[1])
    if i1 < 0 or start < 0 or end < 0:
        return []
    return [f"{a[0]}{RANKS[j]}{suited}" for j in range(start, end - 1, -1)]


def expand_hand_class_token(token: str) -> list[str]:
    """``"22-99"``, ``"66+"``, ``"A2s+"``, ``"A2s-A9s"`` or a literal class."""
    t = token.strip()
    if not t:
        return []
    if len(t) >= 2 and t[0] == t[1] and "s" not in t and "o" not in t:
        return _expand_pairs(t)
    if "-" in t:
        return _expand_dash(t)
    if "+" in t:
        return _expand_plus(t)
    return [t]


def expand_hand_class_list(tokens: Iterable[str]) -> list[str]:
    out: list[str] = []
    for tok in tokens:
        out.extend(expand_hand_class_token(str(tok)))
    return list(dict.fromkeys(out))


def enumerate_combos(hand_class: str) -> list[Combo]:
    """6 combos for a pair, 4 suited, 12 offsuit; malformed classes give none."""
    h = hand_class
    if len(h) == 2 and h[0] == h[1]:
        r = h[0]
        if _idx(r) < 0:
            return []
        return [
            (r + SUITS[i], r + SUITS[j])
            for i in range(len(SUITS))
            for j in range(i + 1, len(SUITS))
        ]
    if len(h) != 3 or h[2] not in ("s", "o"):
        return []
    r1, r2 = h[0], h[1]
    i1, i2 = _idx(r1), _idx(r2)
    if i1 < 0 or i2 < 0 or i1 == i2:
        return []
    if h[2] == "s":
        return [(r1 + s, r2 + s) for s in SUITS]
    return [(r1 + s1, r2 + s2) for s1 in SUITS for s2 in SUITS if s1 != s2]


def all_169_classes() -> list[str]:
    out: list[str] = []
    for i, hi in enumerate(RANKS):
        out.append(hi * 2)
        for lo in RANKS[i + 1 :]:
            out.append(f"{hi}{lo}s")
            out.append(f"{hi}{lo}o")
    return out


class RangeBook:
    """Read-only view over the chart file; build once and pass it around."""

    def __init__(self, charts: Mapping[str, Any]):
        self._rfi: Mapping[str, Any] = charts.get("rfi") or {}
        self._facing: Mapping[str, Any] = charts.get("facing") or {}

    @classmethod
    def load(cls, path: str | Path | None = None) -> RangeBook:
        p = Path(path) if path is not None else config_path("SPOTGEN_RANGES_FILE", "ranges.yaml")
        return cls(load_yaml_file(str(p)))

    @staticmethod
    def _collect(chart: Mapping[str, Any] | None, buckets: Iterable[str]) -> list[str]:
        if not isinstance(chart, Mapping):
            return []
        out: list[str] = []
        # 跨桶不去重：重复出现的类别抽样权重更高
        for name in buckets:
            out.extend(expand_hand_class_list(chart.get(name) or ()))
        return out

    def rfi(self, pos: str) -> list[str]:
        return self._collect(self._rfi.get(pos.lower()), RFI_BUCKETS)

    def facing(self, hero: str, villain: str) -> list[str]:
        return self._collect(self._facing.get(f"{hero.lower()}_vs_{villain.lower()}"), DEFEND_BUCKETS)

    def hero_classes(self, hero: str, villain: str, hero_is_opener: bool) -> list[str]:
        if hero_is_opener:
            return self.rfi(hero)
        return self.facing(hero, villain)

    def matchups(self) -> list[str]:
        return sorted(self._facing)


__all__ = [
    "Combo",
    "RangeBook",
    "all_169_classes",
    "enumerate_combos",
    "expand_hand_class_list",
    "expand_hand_class_token",
]
