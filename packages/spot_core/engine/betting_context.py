"""Betting-context normalizer: which kinds of bet are structurally valid at a node.

The context never picks a size or a best action. It is built by folding a
fixed, ordered list of rules over a frozen ``PermissionState``; each rule
returns a new state and may append a human readable reason. Reasons are a
diagnostic trace only, nothing downstream branches on them.

Rule order matters: rules 3-5 may widen permissions (leverage base sizes,
nut advantage, stack pressure); from rule 6 onward every rule only narrows.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from .leverage import compute_spr
from .config_loader import engine_value
from .types import (
    BettingContext,
    HandClass,
    Leverage,
    Polarity,
    RangeAdvantage,
    StackPressure,
    Street,
    unreachable,
)

# thin_value 是历史遗留的类别名，保留兼容
SHOWDOWN_VALUE_CLASSES = frozenset({"medium", "weak", "thin_value"})
NUT_CLASSES = frozenset({"monster", "strong_value"})


@dataclass(frozen=True)
class BettingInput:
    street: Street
    hero_is_ip: bool
    leverage: Leverage
    effective_stack: float
    pot: float
    hero_is_opener: bool
    hand_class: HandClass | str
    has_straight: bool = False
    has_flush: bool = False
    combo_draw: bool = False
    pair_plus_draw: bool = False
    # 调用方已知时可直接给出，跳过推断
    range_advantage: RangeAdvantage | None = None
    nut_advantage: bool | None = None

    @property
    def class_name(self) -> str:
        hc = self.hand_class
        return hc.value if isinstance(hc, HandClass) else str(hc)


@dataclass(frozen=True)
class PermissionState:
    polarity: Polarity = Polarity.MERGED
    check_dominant: bool = False
    allows_small_bet: bool = False
    allows_large_bet: bool = False
    allows_overbet: bool = False
    reasons: tuple[str, ...] = ()

    def note(self, reason: str, **changes: object) -> PermissionState:
        return replace(self, reasons=(*self.reasons, reason), **changes)


@dataclass(frozen=True)
class _Facts:
    """Derived once per call and shared by every rule."""

    inp: BettingInput
    range_advantage: RangeAdvantage
    nut_advantage: bool
    stack_pressure: StackPressure


Rule = Callable[[PermissionState, _Facts], PermissionState]


def infer_range_advantage(hero_is_opener: bool, hero_is_ip: bool) -> RangeAdvantage:
    if hero_is_opener:
        return RangeAdvantage.HERO
    if not hero_is_ip:
        return RangeAdvantage.VILLAIN
    return RangeAdvantage.NEUTRAL


def infer_nut_advantage(hand_class: HandClass | str, has_straight: bool, has_flush: bool) -> bool:
    name = hand_class.value if isinstance(hand_class, HandClass) else str(hand_class)
    return name == HandClass.MONSTER.value or has_straight or has_flush


def compute_stack_pressure(effective_stack: float, pot: float) -> StackPressure:
    if pot <= 0:
        return StackPressure.LOW
    spr = effective_stack / pot
    if spr <= float(engine_value("stack_pressure.high_spr")):
        return StackPressure.HIGH
    if spr <= float(engine_value("stack_pressure.medium_spr")):
        return StackPressure.MEDIUM
    return StackPressure.LOW


def _street_polarity(s: PermissionState, f: _Facts) -> PermissionState:
    street = f.inp.street
    if street is Street.FLOP:
        return s.note(
            "Flop: polarity = merged, overbets disabled",
            polarity=Polarity.MERGED,
            allows_overbet=False,
        )
    if street is Street.TURN:
        pol = Polarity.POLARIZED if f.inp.leverage is Leverage.HIGH else Polarity.MERGED
        return s.note(
            f"Turn: polarity = {pol.value} (leverage = {f.inp.leverage.value})", polarity=pol
        )
    if street is Street.RIVER:
        pol = Polarity.POLARIZED if f.nut_advantage else Polarity.MERGED
        return s.note(
            f"River: polarity = {pol.value} (nut advantage = {f.nut_advantage})", polarity=pol
        )
    unreachable(street)


def _out_of_position(s: PermissionState, f: _Facts) -> PermissionState:
    inp = f.inp
    if inp.hero_is_ip:
        return s
    protection = inp.class_name in ("medium", "strong_value")
    combo = inp.pair_plus_draw or inp.combo_draw
    leverage = inp.leverage in (Leverage.MEDIUM, Leverage.HIGH)
    s = replace(s, allows_overbet=False)
    if not (protection or combo or leverage):
        s = s.note(
            "OOP + weak showdown + no combo equity: check dominant",
            check_dominant=True,
        )
    else:
        s = s.note(
            f"OOP but betting allowed: protection={protection}, combo={combo}, "
            f"leverage={inp.leverage.value}"
        )
    return s.note("OOP: overbets disabled")


_LEVERAGE_SIZES: dict[Leverage, tuple[bool, bool, bool, str]] = {
    Leverage.NONE: (False, False, False, "Leverage = none: no bets allowed"),
    Leverage.LOW: (True, False, False, "Leverage = low: small bets only"),
    Leverage.MEDIUM: (True, True, False, "Leverage = medium: small + large bets"),
    Leverage.HIGH: (True, True, True, "Leverage = high: small + large + overbets"),
}


def _leverage_sizes(s: PermissionState, f: _Facts) -> PermissionState:
    try:
        small, large, over, why = _LEVERAGE_SIZES[f.inp.leverage]
    except KeyError:
        unreachable(f.inp.leverage)
    return s.note(why, allows_small_bet=small, allows_large_bet=large, allows_overbet=over)


def _nut_advantage_ip(s: PermissionState, f: _Facts) -> PermissionState:
    inp = f.inp
    if not (f.nut_advantage and inp.hero_is_ip and inp.street is not Street.FLOP):
        return s
    s = s.note("Nut advantage IP postflop: large bets unlocked", allows_large_bet=True)
    if inp.street is Street.RIVER:
        s = s.note("Nut advantage IP on river: overbets unlocked", allows_overbet=True)
    return s


def _stack_pressure(s: PermissionState, f: _Facts) -> PermissionState:
    if f.stack_pressure is not StackPressure.HIGH:
        return s
    s = s.note("High stack pressure: large bets unlocked", allows_large_bet=True)
    if f.nut_advantage:
        s = s.note("High stack pressure + nut advantage: overbets unlocked", allows_overbet=True)
    return s


def _range_disadvantage(s: PermissionState, f: _Facts) -> PermissionState:
    if f.range_advantage is not RangeAdvantage.VILLAIN:
        return s
    return s.note(
        "Range disadvantage: large bets + overbets disabled, check dominant",
        allows_large_bet=False,
        allows_overbet=False,
        check_dominant=True,
    )


def _river_oop_clamp(s: PermissionState, f: _Facts) -> PermissionState:
    inp = f.inp
    if (
        inp.street is Street.RIVER
        and not inp.hero_is_ip
        and not f.nut_advantage
        and inp.class_name in SHOWDOWN_VALUE_CLASSES
    ):
        return s.note(
            "OOP river clamp: showdown value without nut advantage, all bets disabled",
            check_dominant=True,
            allows_small_bet=False,
            allows_large_bet=False,
            allows_overbet=False,
        )
    return s


def _turn_oop_clamp(s: PermissionState, f: _Facts) -> PermissionState:
    inp = f.inp
    if not (
        inp.street is Street.TURN
        and not inp.hero_is_ip
        and inp.class_name in SHOWDOWN_VALUE_CLASSES
        and inp.class_name not in NUT_CLASSES
    ):
        return s
    if inp.leverage is Leverage.NONE:
        return s.note(
            "OOP turn clamp: showdown value + no leverage, no bets allowed",
            check_dominant=True,
            allows_small_bet=False,
            allows_large_bet=False,
            allows_overbet=False,
        )
    if inp.leverage is Leverage.LOW:
        return s.note(
            "OOP turn clamp: showdown value + low leverage, small lead only",
            allows_large_bet=False,
            allows_overbet=False,
        )
    if inp.leverage is Leverage.MEDIUM:
        return s.note(
            "OOP turn clamp: showdown value + medium leverage, no large bets",
            allows_large_bet=False,
            allows_overbet=False,
        )
    return s


def _sanity(s: PermissionState, f: _Facts) -> PermissionState:
    if s.allows_small_bet or s.allows_large_bet:
        return s
    return s.note("No bets allowed: check dominant", check_dominant=True)


def _oop_overbet_clamp(s: PermissionState, f: _Facts) -> PermissionState:
    if f.inp.hero_is_ip or not s.allows_overbet:
        return s
    return s.note("OOP overbet clamp: overbets disabled (final)", allows_overbet=False)


RULES: tuple[Rule, ...] = (
    _street_polarity,
    _out_of_position,
    _leverage_sizes,
    _nut_advantage_ip,
    _stack_pressure,
    _range_disadvantage,
    _river_oop_clamp,
    _turn_oop_clamp,
    _sanity,
    _oop_overbet_clamp,
)


def compute_betting_context(inp: BettingInput) -> BettingContext:
    range_adv = inp.range_advantage or infer_range_advantage(inp.hero_is_opener, inp.hero_is_ip)
    nut_adv = (
        inp.nut_advantage
        if inp.nut_advantage is not None
        else infer_nut_advantage(inp.hand_class, inp.has_straight, inp.has_flush)
    )
    facts = _Facts(
        inp=inp,
        range_advantage=range_adv,
        nut_advantage=nut_adv,
        stack_pressure=compute_stack_pressure(inp.effective_stack, inp.pot),
    )

    spr = compute_spr(inp.effective_stack, inp.pot)
    spr_text = f"{spr:.2f}" if inp.pot > 0 else "∞"
    state = PermissionState(
        reasons=(f"Stack pressure: {facts.stack_pressure.value} (SPR = {spr_text})",)
    )
    for rule in RULES:
        state = rule(state, facts)

    return BettingContext(
        street=inp.street,
        hero_is_ip=inp.hero_is_ip,
        leverage=inp.leverage,
        polarity=state.polarity,
        range_advantage=range_adv,
        nut_advantage=nut_adv,
        stack_pressure=facts.stack_pressure,
        check_dominant=state.check_dominant,
        allows_small_bet=state.allows_small_bet,
        allows_large_bet=state.allows_large_bet,
        allows_overbet=state.allows_overbet,
        reasons=state.reasons,
    )


__all__ = [
    "BettingInput",
    "NUT_CLASSES",
    "PermissionState",
    "RULES",
    "SHOWDOWN_VALUE_CLASSES",
    "compute_betting_context",
    "compute_stack_pressure",
    "infer_nut_advantage",
    "infer_range_advantage",
]
