from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TypeVar

T = TypeVar("T")

_SPOT_ID = re.compile(r"^s(\d+)$")


def format_spot_id(n: int) -> str:
    return f"s{n:03d}"


def parse_spot_id(spot_id: str) -> int:
    m = _SPOT_ID.match(spot_id or "")
    if not m:
        raise ValueError(f"Invalid spot id: {spot_id}")
    return int(m.group(1))


def clamp_list(xs: Iterable[T], limit: int) -> list[T]:
    """De-duplicate by string form, keep order, stop at ``limit``."""
    out: list[T] = []
    seen: set[str] = set()
    for x in xs:
        key = str(x)
        if key in seen:
            continue
        seen.add(key)
        out.append(x)
        if len(out) >= limit:
            break
    return out


__all__ = ["clamp_list", "format_spot_id", "parse_spot_id"]
