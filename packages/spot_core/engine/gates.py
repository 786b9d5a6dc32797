"""Veto stages between classification and pedagogy.

Each gate returns ``None`` when the node passes or a ``Rejection`` that the
retry loop consumes; gates never raise for an ordinary veto.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from spot_core.cards import get_rank_value

from .codes import RCodes, mk_rejection
from .types import (
    BettingContext,
    HandClass,
    HandFeatures,
    HandIntent,
    Leverage,
    OptionSet,
    Rejection,
    Street,
    StraightDraw,
    TurnType,
)


@dataclass(frozen=True)
class BarrelEligibility:
    can_barrel_large: bool
    can_barrel_small: bool
    can_check: bool
    reason: str

    @property
    def can_barrel(self) -> bool:
        return self.can_barrel_large or self.can_barrel_small


def _elig(large: bool, small: bool, reason: str) -> BarrelEligibility:
    return BarrelEligibility(can_barrel_large=large, can_barrel_small=small, can_check=True, reason=reason)


def check_barrel_eligibility(
    hand_class: HandClass,
    features: HandFeatures,
    turn_type: TurnType,
    board_values: Sequence[int],
) -> BarrelEligibility:
    f = features
    if hand_class in (HandClass.MONSTER, HandClass.STRONG_VALUE):
        return _elig(False, True, "Strong made hand: value bet with smaller sizing")

    if hand_class is HandClass.AIR and not f.has_flush_draw and f.straight_draw is StraightDraw.NONE:
        return _elig(False, False, "Air with no draw: cannot barrel")

    if f.has_pair and f.pair_rank and turn_type is TurnType.OVERCARD:
        if get_rank_value(f.pair_rank) < max(board_values):
            return _elig(False, False, "Underpair on overcard turn: check-only")

    if hand_class in (HandClass.MEDIUM, HandClass.WEAK) and f.has_pair:
        if f.is_nut_flush_draw or f.combo_draw or f.straight_draw is StraightDraw.OESD:
            return _elig(True, True, "Medium pair with strong draw: can barrel")
        return _elig(False, True, "Medium/weak pair: small sizing for protection")

    if f.is_nut_flush_draw or f.combo_draw:
        return _elig(True, True, "High equity draw (NFD/combo): can barrel any size")
    if f.has_flush_draw and f.straight_draw is StraightDraw.OESD:
        return _elig(True, True, "Combo draw: can barrel any size")
    if f.has_flush_draw:
        return _elig(False, True, "Non-nut flush draw: prefer small sizing")
    if f.straight_draw is StraightDraw.OESD:
        return _elig(True, True, "OESD: can barrel")
    if f.straight_draw is StraightDraw.GUTSHOT:
        if f.has_pair:
            return _elig(False, True, "Pair + gutshot: small barrel ok")
        return _elig(False, False, "Weak gutshot with no pair: check-only")

    if hand_class is HandClass.AIR:
        return _elig(False, False, "Air with no meaningful draw: check-only")
    return _elig(False, False, "Default: check-only")


def barrel_gate(
    hand_class: HandClass,
    features: HandFeatures,
    turn_type: TurnType,
    board_values: Sequence[int],
) -> Rejection | None:
    elig = check_barrel_eligibility(hand_class, features, turn_type, board_values)
    if elig.can_barrel:
        return None
    return mk_rejection(RCodes.BARREL_INELIGIBLE, data={"reason": elig.reason})


def intent_gate(intent: HandIntent) -> Rejection | None:
    # 每个选项集都含下注；放弃型手牌只能重抽
    if intent is HandIntent.GIVE_UP:
        return mk_rejection(RCodes.GIVE_UP_INTENT)
    return None


def hard_gate(ctx: BettingContext) -> Rejection | None:
    """River OOP node where nothing but a check is legal."""
    if (
        ctx.street is Street.RIVER
        and not ctx.hero_is_ip
        and ctx.check_dominant
        and not ctx.allows_small_bet
        and not ctx.allows_large_bet
    ):
        return mk_rejection(RCodes.HARD_GATE)
    return None


def survivor_gate(ctx: BettingContext, option_set: OptionSet) -> Rejection | None:
    """Valid but worthless river node: check anchor with nothing to teach."""
    if (
        ctx.check_dominant
        and ctx.street is Street.RIVER
        and option_set.best_idx == 0
        and not ctx.nut_advantage
        and ctx.leverage in (Leverage.NONE, Leverage.LOW)
    ):
        return mk_rejection(RCodes.SURVIVOR_GATE)
    return None


__all__ = [
    "BarrelEligibility",
    "barrel_gate",
    "check_barrel_eligibility",
    "hard_gate",
    "intent_gate",
    "survivor_gate",
]
