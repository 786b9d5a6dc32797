"""Structural and arithmetic checks for a finished spot dict.

``validate_spot_output(spot) -> (ok, errors)`` never raises on bad input;
every problem becomes one human readable error string.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from typing import Any

from spot_core.engine.board import classify_turn
from spot_core.engine.config_loader import engine_value
from spot_core.engine.hand_class import classify_hand, classify_intent
from spot_core.engine.hand_features import hand_features, pair_quality
from spot_core.engine.types import HandIntent, SpotContractError, TurnType

STREET_ORDER = ("p", "f", "t", "r")


def _is_num(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def _dump(x: Any) -> str:
    return json.dumps(x, default=str)


def blinds() -> dict[str, float]:
    return {k: float(v) for k, v in engine_value("line.blinds").items()}


def is_street_marker(a: Any) -> bool:
    return isinstance(a, list) and len(a) == 2 and a[0] == "-" and a[1] in STREET_ORDER


def _contribution(a: Any) -> float:
    if not isinstance(a, list) or len(a) < 4:
        return 0.0
    if a[1] in ("c", "b", "r", "a") and _is_num(a[3]):
        return float(a[3])
    return 0.0


def pot_from_hist(hist: Sequence[Any]) -> float:
    """Blinds plus the exact amount of every call, bet, raise and all-in."""
    return sum(blinds().values()) + sum(_contribution(a) for a in hist)


def _check_street_order(hist: Sequence[Any], errors: list[str]) -> None:
    cur = -1
    for a in hist:
        if not is_street_marker(a):
            continue
        idx = STREET_ORDER.index(a[1])
        if idx < cur:
            errors.append(f"Street marker goes backwards: {_dump(a)}")
        cur = idx


def _check_action(a: Any, errors: list[str]) -> None:
    if not isinstance(a, list):
        errors.append(f"Non-array hist action: {_dump(a)}")
        return
    if is_street_marker(a):
        return
    if not (a and isinstance(a[0], str) and a[0]):
        errors.append(f"Invalid position in action: {_dump(a)}")
    code = a[1] if len(a) > 1 else None
    if not isinstance(code, str):
        errors.append(f"Invalid action code type: {_dump(a)}")
        return

    if code in ("x", "f"):
        if len(a) != 2:
            errors.append(f"Action {code} must be length-2: {_dump(a)}")
        return

    exact_ok = len(a) == 4 and _is_num(a[3]) and a[3] >= 0
    if code == "c":
        if len(a) != 4 or a[2] is not None:
            errors.append(f'Call must be [pos,"c",null,exact]: {_dump(a)}')
        elif not exact_ok:
            errors.append(f"Call exact must be >=0: {_dump(a)}")
        return
    if code == "b":
        if len(a) != 4:
            errors.append(f'Bet must be [pos,"b",sizeRef,exact]: {_dump(a)}')
            return
        if not ((_is_num(a[2]) and a[2] > 0) or a[2] == "pot"):
            errors.append(f"Bet sizeRef invalid: {_dump(a)}")
        if not exact_ok:
            errors.append(f"Bet exact must be >=0: {_dump(a)}")
        return
    if code == "r":
        if len(a) != 4 or not (isinstance(a[2], str) and a[2]):
            errors.append(f"Raise sizeRef must be string: {_dump(a)}")
        elif not exact_ok:
            errors.append(f"Raise exact must be >=0: {_dump(a)}")
        return
    if code == "a":
        if len(a) != 4 or a[2] not in ("AI", None):
            errors.append(f'All-in must be [pos,"a","AI"|null,exact]: {_dump(a)}')
        elif not exact_ok:
            errors.append(f"All-in exact must be >=0: {_dump(a)}")
        return
    errors.append(f'Unknown action code "{code}" in hist: {_dump(a)}')


def _check_option(o: Any, errors: list[str]) -> None:
    if not isinstance(o, list) or not o:
        errors.append(f"Invalid option: {_dump(o)}")
        return
    code = o[0]
    if code in ("x", "f"):
        if len(o) != 1:
            errors.append(f"Option {code} must be length-1: {_dump(o)}")
        return
    exact_ok = len(o) == 3 and _is_num(o[2]) and o[2] >= 0
    if code == "c":
        if not (len(o) == 3 and o[1] is None and _is_num(o[2])):
            errors.append(f'Call option must be ["c",null,exact]: {_dump(o)}')
        return
    if code == "b":
        if len(o) != 3:
            errors.append(f'Bet option must be ["b",sizeRef,exact]: {_dump(o)}')
            return
        if not (_is_num(o[1]) or o[1] == "pot"):
            errors.append(f"Bet option sizeRef invalid: {_dump(o)}")
        if not exact_ok:
            errors.append(f"Bet option exact invalid: {_dump(o)}")
        return
    if code == "r":
        if not (len(o) == 3 and isinstance(o[1], str)):
            errors.append(f'Raise option must be ["r",sizeRef,exact]: {_dump(o)}')
        elif not exact_ok:
            errors.append(f"Raise option exact invalid: {_dump(o)}")
        return
    if code == "a":
        if not (len(o) == 3 and o[1] in ("AI", None)):
            errors.append(f'All-in option must be ["a","AI"|null,exact]: {_dump(o)}')
        elif not exact_ok:
            errors.append(f"All-in option exact invalid: {_dump(o)}")
        return
    errors.append(f'Unknown option code "{code}": {_dump(o)}')


def _check_sizing(data: Mapping[str, Any], errors: list[str]) -> None:
    pot = data.get("pot")
    if not _is_num(pot) or pot <= 0:
        return
    for o in data.get("opts") or ():
        if not (isinstance(o, list) and len(o) == 3 and o[0] == "b" and _is_num(o[1])):
            continue
        expected = o[1] / 100 * pot
        if not _is_num(o[2]) or abs(o[2] - expected) >= 1e-3:
            errors.append(
                f"Option bet sizing mismatch: sizeRef={o[1]}% pot={pot} "
                f"expected={expected} got={o[2]}"
            )


def _check_meta(data: Mapping[str, Any], errors: list[str]) -> None:
    meta = data.get("meta")
    if not isinstance(meta, Mapping):
        return
    concept = meta.get("concept")
    if not isinstance(concept, list):
        errors.append("meta.concept must be string[]")
    elif len(concept) > int(engine_value("tags.max_concepts")):
        errors.append("meta.concept must be <= 6 items")
    if "solverNotes" in meta:
        notes = meta["solverNotes"]
        if not isinstance(notes, list):
            errors.append("meta.solverNotes must be string[]")
        elif not 2 <= len(notes) <= int(engine_value("tags.max_notes")):
            errors.append("meta.solverNotes should be 2-4 bullets")
    if not meta.get("summary"):
        errors.append("meta.summary is required")

    freq = meta.get("freq")
    if isinstance(freq, list):
        if len(freq) != 3:
            errors.append(f"Expected 3 frequencies, got {len(freq)}")
        if not all(_is_num(f) for f in freq):
            errors.append("Frequencies must be numbers")
        else:
            if abs(sum(freq) - 1.0) > 0.01:
                errors.append(f"Frequencies must sum to 1.0, got {sum(freq)}")
            if any(f < 0 for f in freq):
                errors.append("Frequencies must be non-negative")


def _check_solution(data: Mapping[str, Any], errors: list[str]) -> None:
    opts = data.get("opts")
    sol = data.get("sol") or {}
    if isinstance(opts, list):
        if len(opts) != 3:
            errors.append(f"Expected exactly 3 options, got {len(opts)}")
        if len({_dump(o) for o in opts}) != len(opts):
            errors.append("Options must be pairwise unique")
    b, ev = sol.get("b"), sol.get("ev")
    if not (isinstance(b, int) and isinstance(ev, list) and all(_is_num(e) for e in ev)):
        return
    if not 0 <= b < len(ev):
        errors.append(f"sol.b ({b}) out of range")
        return
    if len(ev) != 3:
        errors.append(f"Expected 3 EVs, got {len(ev)}")
    if any(e >= ev[b] for i, e in enumerate(ev) if i != b):
        errors.append(f"bestIdx ({b}) must hold the unique highest EV")


def _check_give_up(data: Mapping[str, Any], errors: list[str]) -> None:
    brd = data.get("brd")
    hand = (data.get("hero") or {}).get("hand")
    if not (isinstance(brd, list) and len(brd) >= 3 and isinstance(hand, list) and len(hand) == 2):
        return
    try:
        turn_type = classify_turn(brd[:3], brd[3]) if len(brd) > 3 else TurnType.BLANK
        hc = classify_hand(hand, brd, turn_type)
        intent = classify_intent(hc, hand_features(hand, brd), pair_quality(hand, brd), turn_type)
    except SpotContractError as exc:
        errors.append(f"Invalid cards: {exc}")
        return
    has_bet = any(isinstance(o, list) and o and o[0] in ("b", "a") for o in data.get("opts") or ())
    if intent is HandIntent.GIVE_UP and has_bet:
        errors.append("Intent mismatch: give_up hand must not be offered betting options")


def validate_spot_output(spot: Any) -> tuple[bool, list[str]]:
    errors: list[str] = []
    if not isinstance(spot, Mapping):
        return False, ["Spot must be an object"]

    if not isinstance(spot.get("id"), str):
        errors.append("spot.id must be string")
    if not isinstance(spot.get("fmt"), str):
        errors.append("spot.fmt must be string")
    if not isinstance(spot.get("str"), str):
        errors.append("spot.str must be string")
    if not _is_num(spot.get("difficulty")):
        errors.append("spot.difficulty must be number")
    tags = spot.get("tags")
    if not isinstance(tags, list):
        errors.append("spot.tags must be string[]")
    elif len(tags) > int(engine_value("tags.max_tags")):
        errors.append("spot.tags must be <= 6 items")

    data = spot.get("data")
    if not isinstance(data, Mapping):
        errors.append("spot.data must be object")
        return False, errors

    if not isinstance(data.get("id"), str):
        errors.append("data.id must be string")
    if not (_is_num(data.get("st")) and data["st"] > 0):
        errors.append("data.st must be positive number")
    if not isinstance(data.get("fmt"), str):
        errors.append("data.fmt must be string")
    if not isinstance(data.get("str"), str):
        errors.append("data.str must be string")
    hero = data.get("hero") or {}
    if not isinstance(hero.get("pos"), str):
        errors.append("data.hero.pos must be string")
    if not (isinstance(hero.get("hand"), list) and len(hero["hand"]) == 2):
        errors.append("data.hero.hand must be [c1,c2]")
    if not isinstance(data.get("v"), list):
        errors.append("data.v must be string[]")
    if not isinstance(data.get("brd"), list):
        errors.append("data.brd must be string[]")
    if not (_is_num(data.get("pot")) and data["pot"] >= 0):
        errors.append("data.pot must be number")
    sol = data.get("sol")
    if not (isinstance(sol, Mapping) and isinstance(sol.get("b"), int) and isinstance(sol.get("ev"), list)):
        errors.append("data.sol must have b and ev[]")

    hist = data.get("hist")
    if isinstance(hist, list):
        _check_street_order(hist, errors)
        for a in hist:
            _check_action(a, errors)
        if _is_num(data.get("pot")):
            computed = pot_from_hist(hist)
            if abs(computed - data["pot"]) >= 1e-6:
                errors.append(f"data.pot mismatch: expected {computed} got {data['pot']}")
    else:
        errors.append("data.hist must be array")

    opts = data.get("opts")
    if isinstance(opts, list):
        for o in opts:
            _check_option(o, errors)
    else:
        errors.append("data.opts must be array")

    _check_sizing(data, errors)
    _check_meta(data, errors)
    _check_solution(data, errors)
    _check_give_up(data, errors)
    return not errors, errors


__all__ = ["blinds", "is_street_marker", "pot_from_hist", "validate_spot_output"]
