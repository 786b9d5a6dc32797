"""Pedagogy phase: frequencies, payoff scores and teaching meta for three options.

Numbers are teaching approximations bound by ordering rules (the anchor gets
the largest frequency and the unique highest payoff), not solver output.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .config_loader import engine_value
from .meta_selector import correct_consistency, gate_concepts, select_meta
from .types import (
    ActionIntent,
    BettingContext,
    Difficulty,
    HandIntent,
    OptionSet,
    PedagogyMeta,
    PedagogyOutput,
    Polarity,
    SpotContractError,
    Street,
)


def _round_half_up(values: np.ndarray, decimals: int) -> np.ndarray:
    # np.round 是银行家舍入；这里统一四舍五入
    scale = 10.0**decimals
    return np.floor(values * scale + 0.5) / scale


def _require_three(opts: Sequence[ActionIntent], stage: str) -> None:
    if len(opts) != 3:
        raise SpotContractError(f"{stage} expects 3 options, got {len(opts)}")


def frequency_spread(difficulty: Difficulty) -> dict[str, float]:
    return {k: float(v) for k, v in engine_value(f"frequency_spreads.{difficulty.value}").items()}


def assign_frequencies(
    option_set: OptionSet, ctx: BettingContext, difficulty: Difficulty
) -> tuple[float, ...]:
    opts, best = option_set.opts, option_set.best_idx
    _require_three(opts, "Frequency engine")

    spread = frequency_spread(difficulty)

    if ctx.check_dominant and ActionIntent.CHECK in opts and opts.index(ActionIntent.CHECK) == best:
        bias = engine_value("frequency_bias.check_anchor")
        spread["best"] = min(spread["best"] + bias["best"], bias["best_cap"])
        spread["second"] = max(spread["second"] + bias["second"], bias["second_floor"])
        spread["worst"] = max(spread["worst"] + bias["worst"], bias["worst_floor"])

    if ctx.polarity is Polarity.POLARIZED and difficulty is not Difficulty.HARD:
        bias = engine_value("frequency_bias.polarized")
        spread["best"] = min(spread["best"] + bias["best"], bias["best_cap"])
        spread["worst"] = max(spread["worst"] + bias["worst"], bias["worst_floor"])
        spread["second"] = 1.0 - spread["best"] - spread["worst"]

    freq = np.zeros(3)
    freq[best] = spread["best"]
    i1, i2 = (i for i in range(3) if i != best)
    # 离锚点更近的拿 second；距离相同取较小下标
    if abs(i1 - best) <= abs(i2 - best):
        freq[i1], freq[i2] = spread["second"], spread["worst"]
    else:
        freq[i1], freq[i2] = spread["worst"], spread["second"]

    freq = _round_half_up(freq / freq.sum(), 2)
    return tuple(float(f) for f in freq)


def compute_payoffs(best_idx: int, difficulty: Difficulty, n_options: int = 3) -> tuple[float, ...]:
    if n_options != 3:
        raise SpotContractError(f"Payoff engine expects 3 options, got {n_options}")
    spread = engine_value(f"payoff_spreads.{difficulty.value}")
    dist = np.abs(np.arange(n_options) - best_idx)
    ev = _round_half_up(float(spread["best"]) - dist * float(spread["gap"]), 1)
    return tuple(float(e) for e in ev)


def run_pedagogy(
    option_set: OptionSet,
    ctx: BettingContext,
    intent: HandIntent,
    street: Street,
    difficulty: Difficulty,
) -> PedagogyOutput:
    _require_three(option_set.opts, "Pedagogy phase")

    freq = assign_frequencies(option_set, ctx, difficulty)
    ev = compute_payoffs(option_set.best_idx, difficulty, len(option_set.opts))
    anchor = option_set.anchor

    raw = select_meta(intent, ctx, street, anchor)
    meta = PedagogyMeta(
        summary=raw.summary,
        solver_notes=raw.solver_notes,
        concepts=gate_concepts(raw.concepts, ctx, street, intent),
    )
    meta = correct_consistency(meta, anchor, street)
    return PedagogyOutput(freq=freq, ev=ev, meta=meta)


def validate_pedagogy_output(output: PedagogyOutput, best_idx: int) -> tuple[bool, list[str]]:
    errors: list[str] = []

    if len(output.freq) != 3:
        errors.append(f"Expected 3 frequencies, got {len(output.freq)}")
    total = float(np.sum(output.freq)) if output.freq else 0.0
    if abs(total - 1.0) > 0.01:
        errors.append(f"Frequencies must sum to 1.0, got {total}")
    if any(f < 0 for f in output.freq):
        errors.append("Frequencies must be non-negative")

    if len(output.ev) != 3:
        errors.append(f"Expected 3 EVs, got {len(output.ev)}")
    if output.ev and not (0 <= best_idx < len(output.ev) and output.ev[best_idx] == max(output.ev)):
        errors.append(f"bestIdx ({best_idx}) must have highest EV")

    if not output.meta.summary:
        errors.append("Meta summary is required")
    if not output.meta.solver_notes:
        errors.append("Meta solverNotes is required")

    return not errors, errors


__all__ = [
    "assign_frequencies",
    "compute_payoffs",
    "frequency_spread",
    "run_pedagogy",
    "validate_pedagogy_output",
]
