"""Action history, pot and effective stack for a single-raised-pot line.

Preflop: everyone before the opener folds, the opener makes it 2.5x, the
players in between fold and the caller calls. Postflop: one of the weighted
line patterns decides how earlier streets were played; the history always
ends with the OOP player checking on the decision street.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from spot_core.engine.config_loader import engine_value
from spot_core.engine.types import Street, unreachable
from spot_core.rng import RNG, pick_one

# street actions a pattern may prescribe
IP_CBET = "ip_cbet"
OOP_DONK = "oop_donk"
CHECK_THROUGH = "check_through"
STREET_ACTIONS = (IP_CBET, OOP_DONK, CHECK_THROUGH)


@dataclass(frozen=True)
class LinePattern:
    id: str
    name: str
    flop: str
    turn: str
    weight: float


@dataclass
class LineResult:
    hist: list[list[Any]]
    pot: float
    effective_stack: float
    flop_bet_pct: int = 0
    turn_bet_pct: int = 0
    flop_bet_amount: float = 0.0
    turn_bet_amount: float = 0.0
    pattern: LinePattern | None = field(default=None)


def _round4(x: float) -> float:
    return round(x, 4)


def positions() -> list[str]:
    return [str(p) for p in engine_value("line.positions")]


def line_patterns() -> list[LinePattern]:
    out = []
    for p in engine_value("line.patterns"):
        if p["flop"] not in STREET_ACTIONS or p["turn"] not in STREET_ACTIONS:
            raise ValueError(f"Unknown street action in line pattern {p.get('id')!r}")
        out.append(
            LinePattern(
                id=str(p["id"]),
                name=str(p.get("name") or p["id"]),
                flop=str(p["flop"]),
                turn=str(p["turn"]),
                weight=float(p["weight"]),
            )
        )
    return out


def select_line_pattern(rng: RNG) -> LinePattern:
    patterns = line_patterns()
    roll = rng.random() * sum(p.weight for p in patterns)
    for p in patterns:
        roll -= p.weight
        if roll <= 0:
            return p
    return patterns[0]


def build_preflop_history(hero: str, villain: str, hero_is_opener: bool) -> list[list[Any]]:
    order = positions()
    opener, caller = (hero, villain) if hero_is_opener else (villain, hero)
    open_amt = float(engine_value("line.open_amount"))

    hist: list[list[Any]] = []
    for pos in order:
        if pos == opener:
            break
        hist.append([pos, "f"])
    hist.append([opener, "r", "2.5x", open_amt])

    for pos in order[order.index(opener) + 1 :]:
        if pos == caller:
            hist.append([pos, "c", None, open_amt])
            break
        # 大盲的弃牌不记录
        if pos != "BB":
            hist.append([pos, "f"])
    return hist


def _street_action(action: str, oop: str, ip: str, pct: int, amount: float) -> list[list[Any]]:
    if action == IP_CBET:
        return [[oop, "x"], [ip, "b", pct, amount], [oop, "c", None, amount]]
    if action == OOP_DONK:
        return [[oop, "b", pct, amount], [ip, "c", None, amount]]
    if action == CHECK_THROUGH:
        return [[oop, "x"], [ip, "x"]]
    raise ValueError(f"Unknown street action: {action!r}")


def append_postflop_history(
    hist: list[list[Any]],
    street: Street,
    hero_is_ip: bool,
    hero: str,
    villain: str,
    pattern: LinePattern,
    flop_pct: int = 0,
    flop_amount: float = 0.0,
    turn_pct: int = 0,
    turn_amount: float = 0.0,
) -> None:
    oop, ip = (villain, hero) if hero_is_ip else (hero, villain)

    hist.append(["-", "f"])
    if street is not Street.FLOP:
        hist.extend(_street_action(pattern.flop, oop, ip, flop_pct, flop_amount))
    if street is Street.RIVER:
        hist.append(["-", "t"])
        hist.extend(_street_action(pattern.turn, oop, ip, turn_pct, turn_amount))

    if street is Street.TURN:
        hist.extend([["-", "t"], [oop, "x"]])
    elif street is Street.RIVER:
        hist.extend([["-", "r"], [oop, "x"]])


def pot_geometry(
    street: Street, pattern: LinePattern, flop_pct: int, turn_pct: int
) -> tuple[float, float, float]:
    """(pot at the decision street, flop bet, turn bet)."""
    pre = float(engine_value("line.preflop_pot"))
    if street is Street.FLOP:
        return pre, 0.0, 0.0
    flop_amt = 0.0 if pattern.flop == CHECK_THROUGH else _round4(pre * flop_pct / 100)
    post_flop = pre + flop_amt * 2
    if street is Street.TURN:
        return post_flop, flop_amt, 0.0
    if street is Street.RIVER:
        turn_amt = 0.0 if pattern.turn == CHECK_THROUGH else _round4(post_flop * turn_pct / 100)
        return post_flop + turn_amt * 2, flop_amt, turn_amt
    unreachable(street)


def effective_stack(flop_amount: float, turn_amount: float) -> float:
    start = float(engine_value("line.starting_stack"))
    return start - float(engine_value("line.open_amount")) - flop_amount - turn_amount


def build_postflop_line(
    street: Street,
    hero_is_ip: bool,
    hero: str,
    villain: str,
    hero_is_opener: bool,
    rng: RNG,
) -> LineResult:
    pattern = select_line_pattern(rng)

    flop_pct = turn_pct = 0
    if street is not Street.FLOP and pattern.flop != CHECK_THROUGH:
        flop_pct = int(pick_one(rng, engine_value("line.flop_bet_sizes")))
    if street is Street.RIVER and pattern.turn != CHECK_THROUGH:
        turn_pct = int(pick_one(rng, engine_value("line.turn_bet_sizes")))

    pot, flop_amt, turn_amt = pot_geometry(street, pattern, flop_pct, turn_pct)

    hist = build_preflop_history(hero, villain, hero_is_opener)
    append_postflop_history(
        hist, street, hero_is_ip, hero, villain, pattern, flop_pct, flop_amt, turn_pct, turn_amt
    )
    return LineResult(
        hist=hist,
        pot=pot,
        effective_stack=effective_stack(flop_amt, turn_amt),
        flop_bet_pct=flop_pct,
        turn_bet_pct=turn_pct,
        flop_bet_amount=flop_amt,
        turn_bet_amount=turn_amt,
        pattern=pattern,
    )


__all__ = [
    "LinePattern",
    "LineResult",
    "append_postflop_history",
    "build_postflop_line",
    "build_preflop_history",
    "effective_stack",
    "line_patterns",
    "pot_geometry",
    "positions",
    "select_line_pattern",
]
