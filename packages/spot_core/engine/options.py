"""Option builder: exactly three distinct action intents around an anchor.

Difficulty never changes which options exist, only how far the two
companions sit from the anchor on the check < small < large < overbet axis.
The anchor is the strategic center of the node, not a solver answer.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .config_loader import engine_value
from .leverage import should_be_all_in
from .types import (
    ActionIntent,
    BettingContext,
    Difficulty,
    INTENT_ORDER,
    Leverage,
    OptionSet,
    Polarity,
    unreachable,
)


def infer_anchor(ctx: BettingContext) -> ActionIntent:
    if ctx.check_dominant:
        # 有杠杆且允许小注时，即使 check_dominant 也以下注为锚
        if ctx.leverage in (Leverage.HIGH, Leverage.MEDIUM) and ctx.allows_small_bet:
            if ctx.polarity is Polarity.POLARIZED and ctx.allows_large_bet:
                return ActionIntent.LARGE
            return ActionIntent.SMALL
        return ActionIntent.CHECK
    if ctx.polarity is Polarity.MERGED:
        return ActionIntent.SMALL
    if ctx.polarity is Polarity.POLARIZED:
        return ActionIntent.LARGE
    unreachable(ctx.polarity)


def build_intent_universe(ctx: BettingContext) -> list[ActionIntent]:
    universe = [ActionIntent.CHECK]
    if ctx.allows_small_bet:
        universe.append(ActionIntent.SMALL)
    if ctx.allows_large_bet:
        universe.append(ActionIntent.LARGE)
    if ctx.allows_overbet:
        universe.append(ActionIntent.OVERBET)
    return universe


def difficulty_level(difficulty: int | str | Difficulty) -> Difficulty:
    if isinstance(difficulty, Difficulty):
        return difficulty
    if isinstance(difficulty, str):
        return Difficulty(difficulty)
    if difficulty <= 3:
        return Difficulty.EASY
    if difficulty <= 7:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def _closest(target: ActionIntent, universe: Sequence[ActionIntent]) -> ActionIntent:
    if not universe:
        return ActionIntent.CHECK
    # min() keeps the first of equal distances
    return min(universe, key=lambda i: i.distance(target))


def _at_index(idx: int, universe: Sequence[ActionIntent]) -> ActionIntent:
    target = INTENT_ORDER[max(0, min(idx, len(INTENT_ORDER) - 1))]
    if target in universe:
        return target
    return _closest(target, universe)


def _ensure_three(
    opts: Sequence[ActionIntent],
    universe: Sequence[ActionIntent],
    anchor: ActionIntent,
    reasons: list[str],
) -> list[ActionIntent]:
    unique = list(dict.fromkeys(opts))
    if len(unique) >= 3:
        return unique[:3]

    reasons.append(f"Only {len(unique)} unique options, expanding")
    candidates = sorted(
        (i for i in universe if i not in unique), key=lambda i: i.distance(anchor)
    )
    unique.extend(candidates[: 3 - len(unique)])

    if len(unique) < 3:
        reasons.append("Universe too small, expanding to full intent order")
        for intent in INTENT_ORDER:
            if len(unique) >= 3:
                break
            if intent not in unique:
                unique.append(intent)
                reasons.append(f"Added {intent.value} from full intent order")
    return unique


def build_options(ctx: BettingContext, difficulty: int | str | Difficulty) -> OptionSet:
    reasons: list[str] = []

    anchor = infer_anchor(ctx)
    reasons.append(
        f"Anchor = {anchor.value} (check_dominant={ctx.check_dominant}, "
        f"polarity={ctx.polarity.value})"
    )

    universe = build_intent_universe(ctx)
    reasons.append(f"Universe = [{', '.join(i.value for i in universe)}]")

    level = difficulty_level(difficulty)
    effective = anchor if anchor in universe else _closest(anchor, universe)
    reasons.append(f"Effective anchor = {effective.value}")

    less, more = engine_value(f"spacing.{level.value}")
    lo = _at_index(effective.order - int(less), universe)
    hi = _at_index(effective.order + int(more), universe)
    reasons.append(f"{level.value.capitalize()}: spacing (-{less}, +{more})")

    opts = sorted(_ensure_three([lo, effective, hi], universe, effective, reasons), key=lambda i: i.order)
    best_idx = opts.index(effective) if effective in opts else 0
    reasons.append(
        f"Options = [{', '.join(i.value for i in opts)}], best_idx = {best_idx}"
    )
    return OptionSet(opts=tuple(opts), best_idx=best_idx, reasons=tuple(reasons))


def intent_to_sizing(intent: ActionIntent) -> int | None:
    if intent is ActionIntent.CHECK:
        return None
    if intent in (ActionIntent.SMALL, ActionIntent.LARGE, ActionIntent.OVERBET):
        return int(engine_value(f"option_sizing.{intent.value}"))
    unreachable(intent)


def render_options(
    intents: Sequence[ActionIntent],
    pot: float,
    effective_stack: float | None = None,
) -> list[list[Any]]:
    """Concrete spot tuples: ``["x"]``, ``["b", pct, exact]`` or ``["a", "AI", stack]``.

    With a stack given, only the most aggressive bet may turn into an all-in,
    so two options never collapse into the same shove.
    """
    bets = [i for i in intents if i is not ActionIntent.CHECK]
    shove = max(bets, key=lambda i: i.order) if bets and effective_stack is not None else None

    out: list[list[Any]] = []
    for intent in intents:
        pct = intent_to_sizing(intent)
        if pct is None:
            out.append(["x"])
            continue
        amount = round(pot * pct / 100, 4)
        if intent is shove and should_be_all_in(amount, effective_stack, pot):
            out.append(["a", "AI", round(effective_stack, 4)])
        else:
            out.append(["b", pct, amount])
    return out


__all__ = [
    "build_intent_universe",
    "build_options",
    "difficulty_level",
    "infer_anchor",
    "intent_to_sizing",
    "render_options",
]
