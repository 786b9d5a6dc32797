# spot_core/engine/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NoReturn


class SpotContractError(ValueError):
    """Caller bug: malformed cards, wrong option count and similar."""


class ConfigError(RuntimeError):
    """Raised when a required engine configuration field is missing."""


def unreachable(value: object) -> NoReturn:
    raise SpotContractError(f"Unhandled variant: {value!r}")


class Street(str, Enum):
    FLOP = "f"
    TURN = "t"
    RIVER = "r"

    @property
    def label(self) -> str:
        return {"f": "flop", "t": "turn", "r": "river"}[self.value]

    @property
    def board_size(self) -> int:
        return {"f": 3, "t": 4, "r": 5}[self.value]


class HandClass(str, Enum):
    MONSTER = "monster"
    STRONG_VALUE = "strong_value"
    MEDIUM = "medium"
    WEAK = "weak"
    AIR = "air"


class PairQuality(str, Enum):
    OVERPAIR = "overpair"
    TOP_PAIR = "top_pair"
    SECOND_PAIR = "second_pair"
    MIDDLE_PAIR = "middle_pair"
    BOTTOM_PAIR = "bottom_pair"
    UNDERPAIR = "underpair"
    BOARD_PAIR_ONLY = "board_pair_only"
    NO_PAIR = "no_pair"


class TurnType(str, Enum):
    BLANK = "blank_turn"
    OVERCARD = "overcard_turn"
    STRAIGHT_COMPLETER = "straight_completer"
    FLUSH_COMPLETER = "flush_completer"
    PAIRED = "paired_turn"


class RiverType(str, Enum):
    BLANK = "blank_river"
    OVERCARD = "overcard_river"
    STRAIGHT_COMPLETER = "straight_completer"
    FLUSH_COMPLETER = "flush_completer"
    PAIRED = "paired_river"


class FlopClass(str, Enum):
    DRY_AXX = "dry_Axx_highcard"
    DRY_KXX_QXX = "dry_Kxx_Qxx"
    LOW_DISCONNECTED = "low_disconnected"
    MEDIUM_CONNECTED = "medium_connected"
    MONOTONE = "monotone"
    PAIRED = "paired"


class StraightDraw(str, Enum):
    NONE = "none"
    GUTSHOT = "gutshot"
    OESD = "oesd"


class HandIntent(str, Enum):
    MADE_VALUE = "made_value"
    THIN_VALUE = "thin_value"
    COMBO_DRAW = "combo_draw"
    DRAW = "draw"
    PURE_BLUFF = "pure_bluff"
    GIVE_UP = "give_up"


class Leverage(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Polarity(str, Enum):
    MERGED = "merged"
    POLARIZED = "polarized"


class RangeAdvantage(str, Enum):
    HERO = "hero"
    NEUTRAL = "neutral"
    VILLAIN = "villain"


class StackPressure(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BettingMode(str, Enum):
    STANDARD = "standard"
    OVERBET = "overbet"


class ActionIntent(str, Enum):
    CHECK = "check"
    SMALL = "small"
    LARGE = "large"
    OVERBET = "overbet"

    @property
    def order(self) -> int:
        return INTENT_ORDER.index(self)

    def distance(self, other: ActionIntent) -> int:
        return abs(self.order - other.order)


INTENT_ORDER: tuple[ActionIntent, ...] = (
    ActionIntent.CHECK,
    ActionIntent.SMALL,
    ActionIntent.LARGE,
    ActionIntent.OVERBET,
)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# 牌力分组（多处规则共享）
DANGEROUS_TURNS = frozenset(
    {TurnType.STRAIGHT_COMPLETER, TurnType.PAIRED, TurnType.FLUSH_COMPLETER}
)
WEAK_PAIRS = frozenset({PairQuality.BOTTOM_PAIR, PairQuality.UNDERPAIR})


@dataclass(frozen=True)
class HandFeatures:
    has_pair: bool
    pair_rank: str | None
    has_flush_draw: bool
    is_nut_flush_draw: bool
    straight_draw: StraightDraw
    combo_draw: bool
    has_pair_plus_draw: bool
    has_straight: bool
    is_wheel_straight: bool
    has_flush: bool
    equity_proxy: float

    @property
    def has_draw(self) -> bool:
        return self.has_flush_draw or self.straight_draw is not StraightDraw.NONE


@dataclass(frozen=True)
class BettingContext:
    street: Street
    hero_is_ip: bool
    leverage: Leverage
    polarity: Polarity
    range_advantage: RangeAdvantage
    nut_advantage: bool
    stack_pressure: StackPressure
    check_dominant: bool
    allows_small_bet: bool
    allows_large_bet: bool
    allows_overbet: bool
    reasons: tuple[str, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class OptionSet:
    opts: tuple[ActionIntent, ...]
    best_idx: int
    reasons: tuple[str, ...] = field(default=(), compare=False)

    @property
    def anchor(self) -> ActionIntent:
        return self.opts[self.best_idx]


@dataclass(frozen=True)
class PedagogyMeta:
    summary: str
    solver_notes: tuple[str, ...]
    concepts: tuple[str, ...]


@dataclass(frozen=True)
class PedagogyOutput:
    freq: tuple[float, ...]
    ev: tuple[float, ...]
    meta: PedagogyMeta


@dataclass(frozen=True)
class Rejection:
    code: str
    reason: str
    rejected: bool = True

    def to_dict(self) -> dict[str, object]:
        return {"rejected": self.rejected, "code": self.code, "reason": self.reason}


__all__ = [
    "ActionIntent",
    "BettingContext",
    "BettingMode",
    "ConfigError",
    "DANGEROUS_TURNS",
    "Difficulty",
    "FlopClass",
    "HandClass",
    "HandFeatures",
    "HandIntent",
    "INTENT_ORDER",
    "Leverage",
    "OptionSet",
    "PairQuality",
    "PedagogyMeta",
    "PedagogyOutput",
    "Polarity",
    "RangeAdvantage",
    "Rejection",
    "RiverType",
    "SpotContractError",
    "StackPressure",
    "Street",
    "StraightDraw",
    "TurnType",
    "WEAK_PAIRS",
    "unreachable",
]
