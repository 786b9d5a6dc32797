"""Single-raised-pot spot generator: scenario construction around the engine.

One attempt = deal a scenario from a seed, classify it, run the gates and the
three engine phases (betting context, options, pedagogy) and assemble the
spot dict. A veto at any stage is returned as a rejected result; the retry
wrapper walks seed, seed+1, ... until an attempt survives.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from spot_core.cards import RANKS, SUITS, card_value
from spot_core.engine.board import classify_flop, classify_river, classify_turn
from spot_core.engine.betting_context import BettingInput, compute_betting_context
from spot_core.engine.codes import RCodes, mk_rejection
from spot_core.engine.config_loader import engine_value, missing_engine_keys
from spot_core.engine.gates import barrel_gate, hard_gate, intent_gate, survivor_gate
from spot_core.engine.hand_class import classify_hand, classify_intent
from spot_core.engine.hand_features import hand_features, pair_quality
from spot_core.engine.leverage import get_size_set, infer_betting_mode, leverage_profile
from spot_core.engine.options import build_options, difficulty_level, render_options
from spot_core.engine.pedagogy import run_pedagogy
from spot_core.engine.types import (
    Rejection,
    RiverType,
    SpotContractError,
    Street,
    TurnType,
)
from spot_core.rng import RNG, pick_one

from .line_builder import build_postflop_line, positions
from .ranges import RangeBook, enumerate_combos
from .utils import clamp_list

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpotRequest:
    id: str
    seed: int
    street: Street
    hero_pos: str
    villain_pos: str
    hero_is_ip: bool
    difficulty: int = 6


@dataclass
class GenerateResult:
    spot: dict[str, Any] | None
    rejected: bool
    reason: str | None = None
    code: str | None = None
    line_pattern: str | None = None
    attempts: int = 1
    trace: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratorSettings:
    max_retries: int
    allin_options: bool
    table_format: str

    @classmethod
    def build(cls) -> GeneratorSettings:
        missing_engine_keys()
        return cls(
            max_retries=_env_int("SPOTGEN_MAX_RETRIES", int(engine_value("generator.max_retries"))),
            allin_options=_env_flag("SPOTGEN_ALLIN_OPTIONS"),
            table_format=str(engine_value("generator.table_format")),
        )


def _env_flag(name: str) -> bool:
    # 只有 "1" 开启
    return (os.getenv(name) or "").strip() == "1"


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        _LOG.warning("invalid_env_int", extra={"env": name, "value": raw})
        return default


def _rejected(rej: Rejection, **kw: Any) -> GenerateResult:
    return GenerateResult(spot=None, rejected=True, reason=rej.reason, code=rej.code, **kw)


def hero_is_opener(hero: str, villain: str) -> bool:
    order = positions()
    for pos in (hero, villain):
        if pos not in order:
            raise SpotContractError(f"Unknown position: {pos!r}")
    if hero == villain:
        raise SpotContractError(f"Hero and villain share a seat: {hero!r}")
    return order.index(hero) < order.index(villain) or (hero == "SB" and villain == "BB")


def random_card(rng: RNG, used: set[str]) -> str:
    while True:
        card = pick_one(rng, RANKS) + pick_one(rng, SUITS)
        if card not in used:
            return card


def deal_board(rng: RNG, n: int, used: set[str]) -> list[str]:
    board: list[str] = []
    for _ in range(n):
        card = random_card(rng, used)
        used.add(card)
        board.append(card)
    return board


def generate_spot(
    req: SpotRequest,
    *,
    ranges: RangeBook | None = None,
    settings: GeneratorSettings | None = None,
) -> GenerateResult:
    """One attempt with ``req.seed``; rejections come back as values, not exceptions."""
    ranges = ranges or RangeBook.load()
    settings = settings or GeneratorSettings.build()
    street = Street(req.street)
    rng = RNG(req.seed)

    opener = hero_is_opener(req.hero_pos, req.villain_pos)
    classes = ranges.hero_classes(req.hero_pos, req.villain_pos, opener)
    if not classes:
        return _rejected(
            mk_rejection(
                RCodes.NO_RANGE,
                data={"pos": req.hero_pos, "role": "opening" if opener else "defending"},
            )
        )

    hand_cls = pick_one(rng, classes)
    combos = enumerate_combos(hand_cls)
    if not combos:
        return _rejected(mk_rejection(RCodes.NO_COMBOS, data={"hand_class": hand_cls}))
    hand = list(pick_one(rng, combos))

    board = deal_board(rng, street.board_size, set(hand))
    flop_class = classify_flop(board[:3])

    line = build_postflop_line(street, req.hero_is_ip, req.hero_pos, req.villain_pos, opener, rng)
    pattern_id = line.pattern.id if line.pattern else None

    turn_type = TurnType.BLANK
    if street is not Street.FLOP:
        turn_type = classify_turn(board[:3], board[3])
    river_type = classify_river(board[:4], board[4]) if street is Street.RIVER else RiverType.BLANK

    pq = pair_quality(hand, board)
    hc = classify_hand(hand, board, turn_type)
    feats = hand_features(hand, board)
    intent = classify_intent(hc, feats, pq, turn_type)
    trace: dict[str, Any] = {
        "hand_class": hc.value,
        "intent": intent.value,
        "pair_quality": pq.value,
        "turn_type": turn_type.value,
        "river_type": river_type.value,
    }

    rej = intent_gate(intent) or barrel_gate(hc, feats, turn_type, [card_value(c) for c in board])
    if rej is not None:
        return _rejected(rej, line_pattern=pattern_id, trace=trace)

    leverage = leverage_profile(
        hand_class=hc,
        intent=intent,
        turn_type=turn_type,
        features=feats,
        hand=hand,
        board=board,
        pq=pq,
    )
    mode = infer_betting_mode(
        leverage=leverage,
        hand_class=hc,
        intent=intent,
        turn_type=turn_type,
        hand=hand,
        board=board,
        effective_stack=line.effective_stack,
        pot=line.pot,
        features=feats,
    )
    sizes = get_size_set(leverage, mode)
    if isinstance(sizes, Rejection):
        return _rejected(sizes, line_pattern=pattern_id, trace=trace)
    trace.update(leverage=leverage.value, betting_mode=mode.value, size_set=list(sizes))

    ctx = compute_betting_context(
        BettingInput(
            street=street,
            hero_is_ip=req.hero_is_ip,
            leverage=leverage,
            effective_stack=line.effective_stack,
            pot=line.pot,
            hero_is_opener=opener,
            hand_class=hc,
            has_straight=feats.has_straight,
            has_flush=feats.has_flush,
            combo_draw=feats.combo_draw,
            pair_plus_draw=feats.has_pair_plus_draw,
        )
    )
    rej = hard_gate(ctx)
    if rej is not None:
        return _rejected(rej, line_pattern=pattern_id, trace=trace)

    level = difficulty_level(req.difficulty)
    option_set = build_options(ctx, level)
    opts = render_options(
        option_set.opts,
        line.pot,
        line.effective_stack if settings.allin_options else None,
    )

    rej = survivor_gate(ctx, option_set)
    if rej is not None:
        return _rejected(rej, line_pattern=pattern_id, trace=trace)

    ped = run_pedagogy(option_set, ctx, intent, street, level)
    trace["best_idx"] = option_set.best_idx

    tags = clamp_list(
        [street.label, "SRP", "IP" if req.hero_is_ip else "OOP", flop_class.value],
        int(engine_value("tags.max_tags")),
    )
    spot = {
        "id": req.id,
        "fmt": settings.table_format,
        "str": street.value,
        "difficulty": req.difficulty,
        "tags": tags,
        "data": {
            "id": req.id,
            "st": engine_value("line.starting_stack"),
            "fmt": settings.table_format,
            "str": street.value,
            "hero": {"pos": req.hero_pos, "hand": hand},
            "v": [req.villain_pos],
            "brd": board,
            "pot": line.pot,
            "hist": line.hist,
            "opts": opts,
            "sol": {"b": option_set.best_idx, "ev": list(ped.ev)},
            "meta": {
                "concept": clamp_list(ped.meta.concepts, int(engine_value("tags.max_concepts"))),
                "summary": ped.meta.summary,
                "solverNotes": list(ped.meta.solver_notes[: int(engine_value("tags.max_notes"))]),
                "freq": list(ped.freq),
            },
        },
    }
    return GenerateResult(spot=spot, rejected=False, line_pattern=pattern_id, trace=trace)


def try_generate_spot(
    req: SpotRequest,
    max_retries: int | None = None,
    *,
    ranges: RangeBook | None = None,
    settings: GeneratorSettings | None = None,
) -> GenerateResult:
    """Retry with seed, seed+1, ...; exhaustion is a rejected result, never an exception."""
    settings = settings or GeneratorSettings.build()
    ranges = ranges or RangeBook.load()
    tries = settings.max_retries if max_retries is None else max_retries

    for i in range(tries):
        seed = req.seed + i
        attempt = SpotRequest(
            id=req.id,
            seed=seed,
            street=req.street,
            hero_pos=req.hero_pos,
            villain_pos=req.villain_pos,
            hero_is_ip=req.hero_is_ip,
            difficulty=req.difficulty,
        )
        res = generate_spot(attempt, ranges=ranges, settings=settings)
        if not res.rejected and res.spot is not None:
            res.attempts = i + 1
            _LOG.info(
                "spot_generated",
                extra={
                    "id": req.id,
                    "seed": seed,
                    "attempts": i + 1,
                    "hand_class": res.trace.get("hand_class"),
                    "intent": res.trace.get("intent"),
                    "leverage": res.trace.get("leverage"),
                    "best_idx": res.trace.get("best_idx"),
                    "line_pattern": res.line_pattern,
                },
            )
            return res
        _LOG.debug(
            "spot_attempt_rejected",
            extra={"seed": seed, "code": res.code, "reason": res.reason},
        )

    _LOG.warning(
        "spot_generation_exhausted",
        extra={"id": req.id, "seed": req.seed, "attempts": tries},
    )
    rej = mk_rejection(RCodes.MAX_RETRIES)
    return _rejected(rej, attempts=tries)


__all__ = [
    "GenerateResult",
    "GeneratorSettings",
    "SpotRequest",
    "deal_board",
    "generate_spot",
    "hero_is_opener",
    "random_card",
    "try_generate_spot",
]
