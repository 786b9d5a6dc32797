from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from string import Formatter
from typing import Any

from .config_loader import require, templates_config
from .types import (
    ActionIntent,
    BettingContext,
    HandIntent,
    PedagogyMeta,
    Polarity,
    Street,
    unreachable,
)

"""Teaching copy for a node: summary, solver notes and concept tags.

Selection looks only at hand intent, polarity, street and the anchor; it
never inspects cards. Copy lives in config/meta_templates.yaml.

Public API:
- select_meta(intent, ctx, street, anchor) -> PedagogyMeta
- filter_concepts(concepts) -> tuple[str, ...]
- gate_concepts(concepts, ctx, street, intent) -> tuple[str, ...]
- correct_consistency(meta, anchor, street) -> PedagogyMeta
"""

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrapCheck:
    eligible: bool
    reason: str


def check_trap_eligibility(ctx: BettingContext, street: Street, anchor: ActionIntent) -> TrapCheck:
    if anchor is not ActionIntent.CHECK:
        return TrapCheck(False, "Anchor is not check")
    if street is not Street.RIVER:
        return TrapCheck(False, "Trap requires river; turn is too early")
    if ctx.polarity is not Polarity.POLARIZED:
        return TrapCheck(False, "Trap requires polarized context")
    if not ctx.nut_advantage:
        return TrapCheck(False, "No nut advantage: pot-control, not trap")
    if not ctx.allows_small_bet and not ctx.allows_large_bet:
        return TrapCheck(False, "Betting not allowed: forced check, not trap")
    return TrapCheck(True, "All trap gates passed (river + polarized + nut advantage)")


def _format_template(tpl: str, ctx: Mapping[str, Any]) -> str:
    """Fill known ``{field}`` placeholders; unknown ones stay verbatim."""
    parts: list[str] = []
    for literal, field, fmt_spec, _conv in Formatter().parse(str(tpl)):
        parts.append(literal or "")
        if not field:
            continue
        if field in ctx:
            try:
                parts.append(format(ctx[field], fmt_spec or ""))
            except (TypeError, ValueError):
                parts.append(str(ctx[field]))
        elif fmt_spec:
            parts.append("{" + field + ":" + fmt_spec + "}")
        else:
            parts.append("{" + field + "}")
    return "".join(parts)


def allowed_concepts() -> tuple[str, ...]:
    return tuple(str(c) for c in require(templates_config(), "allowed_concepts"))


def filter_concepts(concepts: Iterable[str]) -> tuple[str, ...]:
    allowed = set(allowed_concepts())
    return tuple(c for c in concepts if c in allowed)


def _template_key(
    intent: HandIntent, ctx: BettingContext, street: Street, anchor: ActionIntent, trap: TrapCheck
) -> str:
    polarized = ctx.polarity is Polarity.POLARIZED
    river = street is Street.RIVER
    if intent is HandIntent.MADE_VALUE:
        if anchor is ActionIntent.CHECK:
            return "made_value_trap" if trap.eligible else "made_value_check"
        return "made_value_polarized" if polarized else "made_value_merged"
    if intent is HandIntent.THIN_VALUE:
        return "thin_value_check" if anchor is ActionIntent.CHECK else "thin_value_bet"
    if intent is HandIntent.COMBO_DRAW:
        if river:
            return "combo_draw_river"
        return "combo_draw_polarized" if polarized else "combo_draw_merged"
    if intent is HandIntent.DRAW:
        return "draw_river" if river else "draw"
    if intent is HandIntent.PURE_BLUFF:
        return "pure_bluff_polarized" if polarized else "pure_bluff_merged"
    if intent is HandIntent.GIVE_UP:
        return "give_up"
    unreachable(intent)


def _render(tpl: Mapping[str, Any], street: Street) -> PedagogyMeta:
    fields = {"street": street.label}
    return PedagogyMeta(
        summary=_format_template(str(tpl.get("summary") or ""), fields).strip(),
        solver_notes=tuple(_format_template(str(n), fields) for n in tpl.get("solver_notes") or ()),
        concepts=tuple(str(c) for c in tpl.get("concepts") or ()),
    )


def select_meta(
    intent: HandIntent | str,
    ctx: BettingContext,
    street: Street,
    anchor: ActionIntent = ActionIntent.SMALL,
) -> PedagogyMeta:
    """Raw template for the node; concept filtering and gating happen afterwards."""
    templates = require(templates_config(), "templates")
    try:
        hi = HandIntent(intent)
    except ValueError:
        return _render(require(templates, "default"), street)
    trap = check_trap_eligibility(ctx, street, anchor)
    return _render(require(templates, _template_key(hi, ctx, street, anchor, trap)), street)


def gate_concepts(
    concepts: Sequence[str], ctx: BettingContext, street: Street, intent: HandIntent
) -> tuple[str, ...]:
    out = filter_concepts(concepts)
    oop_check_node = (
        ctx.check_dominant
        and not ctx.hero_is_ip
        and street in (Street.TURN, Street.RIVER)
    )
    if not oop_check_node or intent is HandIntent.MADE_VALUE:
        return out

    gating = require(templates_config(), "oop_gating")
    disallowed = set(gating.get("disallowed") or ())
    out = tuple(c for c in out if c not in disallowed)
    if not any(c in out for c in gating.get("required_any") or ()):
        out = tuple(gating.get("fallback") or ())
    return out


def prefers_betting(summary: str) -> bool:
    markers = require(templates_config(), "betting_preference_markers")
    low = summary.lower()
    return any(str(m) in low for m in markers)


def correct_consistency(meta: PedagogyMeta, anchor: ActionIntent, street: Street) -> PedagogyMeta:
    """A check anchor never ships with copy that argues for betting."""
    if anchor is not ActionIntent.CHECK or not prefers_betting(meta.summary):
        return meta
    fix = _render(require(templates_config(), "consistency_fix"), street)
    _LOG.debug("meta_consistency_corrected", extra={"street": street.value})
    return PedagogyMeta(summary=fix.summary, solver_notes=fix.solver_notes, concepts=meta.concepts)


__all__ = [
    "TrapCheck",
    "allowed_concepts",
    "check_trap_eligibility",
    "correct_consistency",
    "filter_concepts",
    "gate_concepts",
    "prefers_betting",
    "select_meta",
]
