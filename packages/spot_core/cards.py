from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from spot_core.engine.types import SpotContractError

SUITS = ["s", "h", "d", "c"]  # spades, hearts, diamonds, clubs
RANKS = ["A", "K", "Q", "J", "T", "9", "8", "7", "6", "5", "4", "3", "2"]  # 按强度降序

RANK_ORDER: dict[str, int] = {rank: 14 - i for i, rank in enumerate(RANKS)}
WHEEL = (14, 2, 3, 4, 5)


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    @property
    def value(self) -> int:
        return RANK_ORDER[self.rank]

    def __str__(self) -> str:
        return self.rank + self.suit


def parse_card(card: str) -> Card:
    if not isinstance(card, str) or len(card) != 2:
        raise SpotContractError(f"Invalid card format: {card!r}")
    rank, suit = card[0], card[1]
    if rank not in RANK_ORDER:
        raise SpotContractError(f"Invalid rank: {rank!r} in {card!r}")
    if suit not in SUITS:
        raise SpotContractError(f"Invalid suit: {suit!r} in {card!r}")
    return Card(rank, suit)


def parse_cards(cards: Iterable[str]) -> list[Card]:
    return [parse_card(c) for c in cards]


def get_rank_value(rank: str) -> int:
    try:
        return RANK_ORDER[rank]
    except KeyError:
        raise SpotContractError(f"Invalid rank: {rank!r}") from None


def card_value(card: str) -> int:
    return parse_card(card).value


def suit_counts(cards: Sequence[str]) -> Counter[str]:
    return Counter(parse_card(c).suit for c in cards)


def straight_tops(values: Iterable[int]) -> list[int]:
    """All straight tops present in ``values`` (descending); the wheel counts as 5."""
    vs = set(values)
    tops = [hi for hi in range(14, 5, -1) if all(v in vs for v in range(hi - 4, hi + 1))]
    if all(v in vs for v in WHEEL):
        tops.append(5)
    return tops


def straight_exists(values: Iterable[int]) -> bool:
    return bool(straight_tops(values))


def straight_cards(top: int) -> tuple[int, ...]:
    if top == 5:
        return WHEEL
    return tuple(range(top, top - 5, -1))


__all__ = [
    "Card",
    "RANKS",
    "RANK_ORDER",
    "SUITS",
    "WHEEL",
    "card_value",
    "get_rank_value",
    "parse_card",
    "parse_cards",
    "straight_cards",
    "straight_exists",
    "straight_tops",
    "suit_counts",
]
