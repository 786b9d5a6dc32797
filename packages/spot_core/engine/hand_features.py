"""Pair quality and draw / made-hand features for hero's two cards on a board."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from spot_core.cards import (
    RANK_ORDER,
    WHEEL,
    parse_cards,
    straight_cards,
    straight_exists,
    straight_tops,
)

from .types import HandFeatures, PairQuality, StraightDraw, TurnType, WEAK_PAIRS


def pair_quality(hand: Sequence[str], board: Sequence[str]) -> PairQuality:
    hero = parse_cards(hand)
    brd = parse_cards(board)
    board_ranks = [c.rank for c in brd]
    uniq_desc = sorted({c.value for c in brd}, reverse=True)
    highest, lowest = uniq_desc[0], uniq_desc[-1]

    if hero[0].rank == hero[1].rank and hero[0].rank not in board_ranks:
        return PairQuality.OVERPAIR if hero[0].value > highest else PairQuality.UNDERPAIR

    paired = next((c for c in hero if c.rank in board_ranks), None)
    if paired is not None:
        if paired.value == highest:
            return PairQuality.TOP_PAIR
        if paired.value == lowest:
            return PairQuality.BOTTOM_PAIR
        if len(uniq_desc) >= 2 and paired.value == uniq_desc[1]:
            return PairQuality.SECOND_PAIR
        return PairQuality.MIDDLE_PAIR

    if any(n >= 2 for n in Counter(board_ranks).values()):
        return PairQuality.BOARD_PAIR_ONLY
    return PairQuality.NO_PAIR


def should_give_up(pq: PairQuality, turn_type: TurnType) -> bool:
    return pq in WEAK_PAIRS and turn_type is not TurnType.BLANK


def _hero_contributes(tops: list[int], hero_values: set[int], board_values: set[int]) -> bool:
    for top in tops:
        if any(v in hero_values and v not in board_values for v in straight_cards(top)):
            return True
    return False


def straight_draw_type(hand: Sequence[str], board: Sequence[str]) -> StraightDraw:
    base = {c.value for c in parse_cards([*board, *hand])}
    if straight_exists(base):
        # 已成顺：不再视为听牌
        return StraightDraw.NONE
    outs = sum(1 for v in RANK_ORDER.values() if straight_exists(base | {v}))
    if outs >= 2:
        return StraightDraw.OESD
    if outs == 1:
        return StraightDraw.GUTSHOT
    return StraightDraw.NONE


def hand_features(hand: Sequence[str], board: Sequence[str]) -> HandFeatures:
    hero = parse_cards(hand)
    brd = parse_cards(board)
    board_ranks = [c.rank for c in brd]
    hero_values = {c.value for c in hero}
    board_values = {c.value for c in brd}

    pocket = hero[0].rank == hero[1].rank
    has_pair = pocket or any(c.rank in board_ranks for c in hero)
    if pocket:
        pair_rank: str | None = hero[0].rank
    else:
        pair_rank = next((c.rank for c in hero if c.rank in board_ranks), None)

    suits = Counter(c.suit for c in [*hero, *brd])
    has_flush_draw = max(suits.values()) == 4
    flush_suit = next((s for s, n in suits.items() if n == 4), None)
    is_nut_flush_draw = has_flush_draw and any(
        c.suit == flush_suit and c.rank == "A" for c in hero
    )
    made_flush_suits = {s for s, n in suits.items() if n >= 5}
    has_flush = any(c.suit in made_flush_suits for c in hero)

    sd = straight_draw_type(hand, board)
    has_draw = has_flush_draw or sd is not StraightDraw.NONE
    combo_draw = has_flush_draw and sd in (StraightDraw.OESD, StraightDraw.GUTSHOT)
    has_pair_plus_draw = has_pair and has_draw

    eq = 0.15
    if has_pair:
        eq += 0.18
    if has_flush_draw:
        eq += 0.28 if is_nut_flush_draw else 0.22
    if sd is StraightDraw.GUTSHOT:
        eq += 0.10
    if sd is StraightDraw.OESD:
        eq += 0.18
    if combo_draw:
        eq += 0.05
    if has_pair_plus_draw:
        eq += 0.08
    eq = min(eq, 0.85)

    all_values = hero_values | board_values
    tops = straight_tops(all_values)
    has_straight = _hero_contributes(tops, hero_values, board_values)
    is_wheel = all(v in all_values for v in WHEEL) and _hero_contributes(
        [5], hero_values, board_values
    )

    return HandFeatures(
        has_pair=has_pair,
        pair_rank=pair_rank,
        has_flush_draw=has_flush_draw,
        is_nut_flush_draw=is_nut_flush_draw,
        straight_draw=sd,
        combo_draw=combo_draw,
        has_pair_plus_draw=has_pair_plus_draw,
        has_straight=has_straight,
        is_wheel_straight=is_wheel,
        has_flush=has_flush,
        equity_proxy=round(eq, 3),
    )


__all__ = ["hand_features", "pair_quality", "should_give_up", "straight_draw_type"]
