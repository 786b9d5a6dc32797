"""Board texture classifiers for the flop, turn and river cards."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from itertools import combinations

from spot_core.cards import RANK_ORDER, parse_card, parse_cards, straight_exists

from .types import FlopClass, RiverType, TurnType

_ALL_VALUES = sorted(RANK_ORDER.values())


def _turn_completes_straight(flop_values: set[int], turn_value: int) -> bool:
    # 任意两张手牌 r1<r2：翻牌不成顺而加上转牌成顺
    for r1, r2 in combinations(_ALL_VALUES, 2):
        if straight_exists(flop_values | {r1, r2}):
            continue
        if straight_exists(flop_values | {turn_value, r1, r2}):
            return True
    return False


def classify_turn(flop: Sequence[str], turn: str) -> TurnType:
    """Classify the turn card against the flop; first matching rule wins."""
    flop_cards = parse_cards(flop)
    turn_card = parse_card(turn)

    if any(c.rank == turn_card.rank for c in flop_cards):
        return TurnType.PAIRED

    suit_counts = Counter(c.suit for c in flop_cards)
    two_tone = next((s for s, n in suit_counts.items() if n == 2), None)
    if two_tone is not None and turn_card.suit == two_tone:
        return TurnType.FLUSH_COMPLETER

    flop_values = {c.value for c in flop_cards}
    if turn_card.value > max(flop_values):
        return TurnType.OVERCARD

    if _turn_completes_straight(flop_values, turn_card.value):
        return TurnType.STRAIGHT_COMPLETER

    return TurnType.BLANK


def classify_river(board4: Sequence[str], river: str) -> RiverType:
    cards = parse_cards(board4)
    river_card = parse_card(river)

    if Counter(c.suit for c in cards)[river_card.suit] >= 3:
        return RiverType.FLUSH_COMPLETER

    values = sorted([c.value for c in cards] + [river_card.value])
    for i in range(len(values) - 4):
        if values[i + 4] - values[i] <= 4:
            return RiverType.STRAIGHT_COMPLETER

    board_values = [c.value for c in cards]
    if river_card.value in board_values:
        return RiverType.PAIRED
    if river_card.value > max(board_values):
        return RiverType.OVERCARD
    return RiverType.BLANK


def classify_flop(flop: Sequence[str]) -> FlopClass:
    cards = parse_cards(flop[:3])
    values = [c.value for c in cards]
    hi, lo = max(values), min(values)

    if len({c.rank for c in cards}) < 3:
        return FlopClass.PAIRED
    if len({c.suit for c in cards}) == 1:
        return FlopClass.MONOTONE
    if hi >= 14:
        return FlopClass.DRY_AXX
    if hi >= 12:
        return FlopClass.DRY_KXX_QXX
    if hi - lo <= 4:
        return FlopClass.MEDIUM_CONNECTED
    return FlopClass.LOW_DISCONNECTED


def is_dynamic_board(board: Sequence[str]) -> bool:
    """Three to a suit, or three unique values chained by gaps of at most two."""
    cards = parse_cards(board)
    if any(n >= 3 for n in Counter(c.suit for c in cards).values()):
        return True
    uniq = sorted({c.value for c in cards})
    run = best = 1
    for prev, cur in zip(uniq, uniq[1:]):
        if cur - prev <= 2:
            run += 1
            best = max(best, run)
        else:
            run = 1
    return best >= 3


__all__ = ["classify_flop", "classify_river", "classify_turn", "is_dynamic_board"]
