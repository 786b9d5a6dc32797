from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from spot_core.cards import get_rank_value, parse_cards, straight_exists

from .hand_features import pair_quality
from .types import (
    DANGEROUS_TURNS,
    HandClass,
    HandFeatures,
    HandIntent,
    PairQuality,
    TurnType,
    WEAK_PAIRS,
)


def classify_hand(
    hand: Sequence[str], board: Sequence[str], turn_type: TurnType = TurnType.BLANK
) -> HandClass:
    """Ordered decision list, first match wins.

    made flush/straight -> quads -> full house -> hero trips -> two pair
    family -> one pair (bottom pair degrades on dangerous turns) -> pocket
    pair vs board -> air.
    """
    hero = parse_cards(hand)
    brd = parse_cards(board)
    cards = [*hero, *brd]
    hero_ranks = [c.rank for c in hero]
    board_ranks = [c.rank for c in brd]
    top_board = max(c.value for c in brd)
    pocket = hero_ranks[0] == hero_ranks[1]
    pq = pair_quality(hand, board)
    dangerous = turn_type in DANGEROUS_TURNS

    if any(n >= 5 for n in Counter(c.suit for c in cards).values()):
        return HandClass.MONSTER
    if straight_exists(c.value for c in cards):
        return HandClass.MONSTER

    counts = Counter(c.rank for c in cards)
    if any(n == 4 for n in counts.values()):
        return HandClass.MONSTER
    trips = [r for r, n in counts.items() if n >= 3]
    pairs = [r for r, n in counts.items() if n >= 2]
    if trips and len(pairs) >= 2:
        return HandClass.MONSTER
    if trips and trips[0] in hero_ranks:
        return HandClass.MONSTER

    hero_on_board = [r for r in hero_ranks if r in board_ranks]

    if len(pairs) >= 2:
        board_pairs = [r for r, n in Counter(board_ranks).items() if n >= 2]
        if board_pairs and len(hero_on_board) == 1:
            if pq is PairQuality.BOTTOM_PAIR and dangerous:
                return HandClass.WEAK
            return HandClass.MEDIUM
        if len(hero_on_board) == 2 and not pocket:
            return HandClass.STRONG_VALUE
        if pocket and board_pairs and hero_ranks[0] not in board_pairs:
            if get_rank_value(hero_ranks[0]) > top_board:
                return HandClass.STRONG_VALUE
            return HandClass.MEDIUM
        return HandClass.STRONG_VALUE

    if hero_on_board:
        if pq is PairQuality.BOTTOM_PAIR:
            return HandClass.WEAK if dangerous else HandClass.MEDIUM
        if max(get_rank_value(r) for r in hero_on_board) == top_board:
            return HandClass.STRONG_VALUE
        return HandClass.MEDIUM

    if pocket:
        # 口袋对低于公共牌最高张：任何转牌都算弱
        if get_rank_value(hero_ranks[0]) < top_board:
            return HandClass.WEAK
        return HandClass.STRONG_VALUE

    return HandClass.AIR


def classify_intent(
    hand_class: HandClass,
    features: HandFeatures,
    pq: PairQuality,
    turn_type: TurnType = TurnType.BLANK,
) -> HandIntent:
    if hand_class in (HandClass.MONSTER, HandClass.STRONG_VALUE):
        return HandIntent.MADE_VALUE
    if features.combo_draw or features.has_pair_plus_draw:
        return HandIntent.COMBO_DRAW
    if pq in WEAK_PAIRS and turn_type is not TurnType.BLANK:
        return HandIntent.GIVE_UP
    if features.has_pair and hand_class in (HandClass.MEDIUM, HandClass.WEAK):
        return HandIntent.THIN_VALUE
    if features.has_draw:
        return HandIntent.DRAW
    if hand_class in (HandClass.MEDIUM, HandClass.WEAK):
        return HandIntent.THIN_VALUE
    return HandIntent.PURE_BLUFF


__all__ = ["classify_hand", "classify_intent"]
