"""Leverage: how much pressure a holding can apply, independent of showdown strength.

A wheel straight is the bottom of the straight range yet carries high
leverage because it is the nuts on a low board. Leverage picks the bet-size
set; hand class only describes showdown value.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Sequence

from spot_core.cards import parse_cards, straight_cards, straight_tops

from .board import is_dynamic_board
from .codes import RCodes, mk_rejection
from .config_loader import engine_value
from .types import (
    BettingMode,
    HandClass,
    HandFeatures,
    HandIntent,
    Leverage,
    PairQuality,
    Rejection,
    StraightDraw,
    TurnType,
)


def bet_size_sets() -> dict[str, dict[str, list[int]]]:
    return engine_value("bet_size_sets")


def get_size_set(leverage: Leverage, mode: BettingMode) -> list[int] | Rejection:
    """Sizes for ``(leverage, mode)``; undefined pairs are rejected, never downgraded."""
    sizes = bet_size_sets().get(leverage.value, {}).get(mode.value)
    if sizes is None:
        return mk_rejection(
            RCodes.INVALID_SIZE_SET, data={"leverage": leverage.value, "mode": mode.value}
        )
    return list(sizes)


def is_valid_leverage_mode(leverage: Leverage, mode: BettingMode) -> bool:
    return mode.value in bet_size_sets().get(leverage.value, {})


def has_nut_straight(hand: Sequence[str], board: Sequence[str]) -> bool:
    values = {c.value for c in parse_cards([*hand, *board])}
    tops = straight_tops(values)
    if not tops:
        return False
    ours = tops[0]
    board_values = {c.value for c in parse_cards(board)}
    # 更高的顺子只要公共牌占 3 张以上，对手就可能拿到
    for top in range(14, ours, -1):
        if sum(1 for v in straight_cards(top) if v in board_values) >= 3:
            return False
    return True


def has_nut_flush(hand: Sequence[str], board: Sequence[str]) -> bool:
    hero = parse_cards(hand)
    brd = parse_cards(board)
    by_suit: dict[str, int] = defaultdict(int)
    for c in [*hero, *brd]:
        by_suit[c.suit] += 1
    for suit, n in by_suit.items():
        if n < 5:
            continue
        hero_suited = [c.rank for c in hero if c.suit == suit]
        if "A" in hero_suited:
            return True
        if any(c.suit == suit and c.rank == "A" for c in brd) and "K" in hero_suited:
            return True
    return False


def leverage_profile(
    *,
    hand_class: HandClass,
    intent: HandIntent,
    turn_type: TurnType,
    features: HandFeatures,
    hand: Sequence[str],
    board: Sequence[str],
    pq: PairQuality | None = None,
) -> Leverage:
    """First matching rule wins; the result is never ``Leverage.NONE``."""
    # 弱对子优先压低
    if pq is not None:
        if pq in (PairQuality.BOTTOM_PAIR, PairQuality.UNDERPAIR):
            return Leverage.LOW
        if pq is PairQuality.SECOND_PAIR and turn_type is not TurnType.BLANK:
            return Leverage.LOW
        if hand_class is HandClass.MEDIUM and pq in (
            PairQuality.BOTTOM_PAIR,
            PairQuality.MIDDLE_PAIR,
        ):
            return Leverage.LOW

    dynamic = is_dynamic_board(board)

    if has_nut_straight(hand, board):
        return Leverage.HIGH
    if features.has_straight and features.is_wheel_straight:
        return Leverage.HIGH
    if has_nut_flush(hand, board):
        return Leverage.HIGH
    if features.combo_draw and dynamic:
        return Leverage.HIGH
    if features.is_nut_flush_draw and turn_type is not TurnType.FLUSH_COMPLETER:
        return Leverage.HIGH
    if hand_class is HandClass.MONSTER and dynamic:
        return Leverage.HIGH

    if features.has_flush_draw and not features.is_nut_flush_draw and hand_class is HandClass.MONSTER:
        return Leverage.MEDIUM
    if hand_class is HandClass.STRONG_VALUE:
        return Leverage.MEDIUM
    if intent is HandIntent.COMBO_DRAW and not features.is_nut_flush_draw:
        return Leverage.MEDIUM
    if features.straight_draw is StraightDraw.OESD and not features.has_flush_draw:
        return Leverage.MEDIUM
    if hand_class is HandClass.MONSTER:
        return Leverage.MEDIUM

    if intent is HandIntent.THIN_VALUE:
        return Leverage.LOW
    if hand_class in (HandClass.MEDIUM, HandClass.WEAK) and not features.has_draw:
        return Leverage.LOW
    if (
        features.straight_draw is StraightDraw.GUTSHOT
        and not features.has_flush_draw
        and not features.has_pair
    ):
        return Leverage.LOW
    if intent is HandIntent.GIVE_UP:
        return Leverage.LOW
    return Leverage.MEDIUM


def has_strong_blockers(hand: Sequence[str], board: Sequence[str]) -> bool:
    hero = parse_cards(hand)
    hero_ranks = {c.rank for c in hero}
    top_board = max(c.value for c in parse_cards(board))
    if top_board <= 11 and "A" in hero_ranks:
        return True
    if any(c.value == top_board for c in hero):
        return True
    return top_board <= 10 and bool(hero_ranks & {"K", "Q"})


def compute_spr(effective_stack: float, pot: float) -> float:
    if pot <= 0:
        return math.inf
    return effective_stack / pot


def infer_betting_mode(
    *,
    leverage: Leverage,
    hand_class: HandClass,
    intent: HandIntent,
    turn_type: TurnType,
    hand: Sequence[str],
    board: Sequence[str],
    effective_stack: float,
    pot: float,
    features: HandFeatures | None = None,
) -> BettingMode:
    """Overbet only for polarized high-leverage hands on safe runouts with room behind."""
    if leverage is not Leverage.HIGH:
        return BettingMode.STANDARD

    wheel = features.is_wheel_straight if features is not None else False
    made_straight = features.has_straight if features is not None else False
    polarized = (
        hand_class is HandClass.MONSTER
        or (intent is HandIntent.PURE_BLUFF and has_strong_blockers(hand, board))
        or wheel
    )
    if not polarized:
        return BettingMode.STANDARD

    if not (
        turn_type in (TurnType.BLANK, TurnType.PAIRED)
        or (made_straight and turn_type is TurnType.STRAIGHT_COMPLETER)
    ):
        return BettingMode.STANDARD

    if compute_spr(effective_stack, pot) < float(engine_value("betting_mode.min_spr_overbet")):
        return BettingMode.STANDARD
    return BettingMode.OVERBET


def should_be_all_in(bet_amount: float, remaining_stack: float, pot: float) -> bool:
    if bet_amount >= remaining_stack * float(engine_value("all_in.stack_fraction")):
        return True
    return compute_spr(remaining_stack, pot) <= float(engine_value("all_in.max_spr"))


__all__ = [
    "bet_size_sets",
    "compute_spr",
    "get_size_set",
    "has_nut_flush",
    "has_nut_straight",
    "has_strong_blockers",
    "infer_betting_mode",
    "is_valid_leverage_mode",
    "leverage_profile",
    "should_be_all_in",
]
