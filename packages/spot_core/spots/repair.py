from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from .validator import blinds, pot_from_hist


def _round4(x: float) -> float:
    return round(x, 4)


def _is_pct(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def repair_spot_math(spot: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy whose pot and bet amounts agree with the history.

    Percentage bets in the history are re-derived from the pot before each
    bet, then the decision pot and the option amounts follow from the
    repaired history. The input is left untouched.
    """
    out: dict[str, Any] = copy.deepcopy(dict(spot))
    data = out["data"]

    running = sum(blinds().values())
    hist: list[Any] = []
    for a in data.get("hist") or []:
        if not isinstance(a, list) or len(a) < 2:
            hist.append(a)
            continue
        if a[1] == "b" and len(a) >= 3 and _is_pct(a[2]):
            exact = _round4(a[2] / 100 * running)
            hist.append([a[0], "b", a[2], exact])
            running += exact
            continue
        if a[1] in ("c", "r", "a") and len(a) >= 4 and _is_pct(a[3]):
            running += a[3]
        hist.append(a)
    data["hist"] = hist

    pot = _round4(pot_from_hist(hist))
    data["pot"] = pot
    data["opts"] = [
        ["b", o[1], _round4(o[1] / 100 * pot)]
        if isinstance(o, list) and len(o) >= 2 and o[0] == "b" and _is_pct(o[1])
        else o
        for o in data.get("opts") or []
    ]
    return out


__all__ = ["repair_spot_math"]
