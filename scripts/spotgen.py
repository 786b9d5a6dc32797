#!/usr/bin/env python3
"""
Spot generator CLI: build single-raised-pot training spots from seeds.

Usage examples:

  # One spot, printed with its validation result and theory notes
  python scripts/spotgen.py preview --seed 42 --street t --hero BTN --villain BB --notes

  # 50 spots starting at s101, written to a JSON file
  python scripts/spotgen.py generate --count 50 --start 101 --seed 7 --out spots.json

  # Validate (and optionally repair) an existing spot file
  python scripts/spotgen.py validate spots.json --repair spots.fixed.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any


def _ensure_path() -> None:
    # Allow running from repo root without installation
    here = Path(__file__).resolve()
    pkg = here.parent.parent / "packages"
    if str(pkg) not in sys.path:
        sys.path.insert(0, str(pkg))


_ensure_path()

from spot_core.engine.board import classify_flop, classify_turn  # type: ignore  # noqa: E402
from spot_core.engine.types import Street, TurnType  # type: ignore  # noqa: E402
from spot_core.rng import RNG, pick_one  # type: ignore  # noqa: E402
from spot_core.spots.difficulty import features_from_spot, score_difficulty  # type: ignore  # noqa: E402
from spot_core.spots.generator import (  # type: ignore  # noqa: E402
    GeneratorSettings,
    SpotRequest,
    try_generate_spot,
)
from spot_core.spots.line_builder import positions  # type: ignore  # noqa: E402
from spot_core.spots.ranges import RangeBook  # type: ignore  # noqa: E402
from spot_core.spots.repair import repair_spot_math  # type: ignore  # noqa: E402
from spot_core.spots.theory import TheoryCache, build_solver_notes  # type: ignore  # noqa: E402
from spot_core.spots.utils import format_spot_id  # type: ignore  # noqa: E402
from spot_core.spots.validator import validate_spot_output  # type: ignore  # noqa: E402

# 翻后行动顺序：盲位先行，BTN 最后
_POSTFLOP_ORDER = ("SB", "BB", "UTG", "MP", "CO", "BTN")


def hero_in_position(hero: str, villain: str) -> bool:
    return _POSTFLOP_ORDER.index(hero) > _POSTFLOP_ORDER.index(villain)


def _dump(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2)


def _request(
    spot_id: str, seed: int, street: str, hero: str, villain: str, difficulty: int
) -> SpotRequest:
    return SpotRequest(
        id=spot_id,
        seed=seed,
        street=Street(street),
        hero_pos=hero,
        villain_pos=villain,
        hero_is_ip=hero_in_position(hero, villain),
        difficulty=difficulty,
    )


def _theory_notes(spot: dict[str, Any], cache: TheoryCache) -> list[str]:
    brd = spot["data"]["brd"]
    turn_type = classify_turn(brd[:3], brd[3]) if len(brd) > 3 else TurnType.BLANK
    try:
        corpus = cache.load()
    except OSError as exc:
        logging.getLogger(__name__).warning("theory_unavailable", extra={"error": str(exc)})
        return []
    return build_solver_notes(corpus, classify_flop(brd[:3]), turn_type)


def cmd_preview(args: argparse.Namespace) -> int:
    req = _request(args.id, args.seed, args.street, args.hero, args.villain, args.difficulty)
    res = try_generate_spot(req, args.max_retries, settings=GeneratorSettings.build())
    if res.rejected or res.spot is None:
        print(_dump({"rejected": True, "code": res.code, "reason": res.reason}))
        return 1
    ok, errors = validate_spot_output(res.spot)
    out: dict[str, Any] = {
        "spot": res.spot,
        "attempts": res.attempts,
        "line_pattern": res.line_pattern,
        "valid": ok,
        "errors": errors,
        "rubric": score_difficulty(features_from_spot(res.spot)),
    }
    if args.notes:
        out["theory"] = _theory_notes(res.spot, TheoryCache())
    print(_dump(out))
    return 0 if ok else 2


def cmd_generate(args: argparse.Namespace) -> int:
    settings = GeneratorSettings.build()
    ranges = RangeBook.load()
    seats = positions()
    streets = [s.value for s in Street] if args.street == "mix" else [args.street]
    picker = RNG(args.seed)

    spots: list[dict[str, Any]] = []
    failures: list[dict[str, Any]] = []
    for i in range(int(args.count)):
        spot_id = format_spot_id(int(args.start) + i)
        hero = pick_one(picker, seats)
        villain = pick_one(picker, [p for p in seats if p != hero])
        street = pick_one(picker, streets)
        req = _request(spot_id, args.seed + i * 1000, street, hero, villain, args.difficulty)
        res = try_generate_spot(req, args.max_retries, ranges=ranges, settings=settings)
        if res.rejected or res.spot is None:
            failures.append({"id": spot_id, "code": res.code, "reason": res.reason})
            continue
        ok, errors = validate_spot_output(res.spot)
        if not ok:
            failures.append({"id": spot_id, "code": "INVALID", "reason": "; ".join(errors)})
            continue
        spots.append(res.spot)

    Path(args.out).write_text(_dump(spots) + "\n", encoding="utf-8")
    print(_dump({"written": len(spots), "failed": failures, "out": str(args.out)}))
    return 0 if not failures else 1


def cmd_validate(args: argparse.Namespace) -> int:
    raw = json.loads(Path(args.file).read_text(encoding="utf-8"))
    spots = raw if isinstance(raw, list) else [raw]
    report = []
    fixed = []
    bad = 0
    for spot in spots:
        ok, errors = validate_spot_output(spot)
        if not ok and args.repair:
            spot = repair_spot_math(spot)
            ok, errors = validate_spot_output(spot)
        bad += 0 if ok else 1
        fixed.append(spot)
        sid = spot.get("id") if isinstance(spot, dict) else None
        rubric = score_difficulty(features_from_spot(spot)) if isinstance(spot, dict) else None
        report.append({"id": sid, "valid": ok, "errors": errors, "rubric": rubric})
    if args.repair:
        Path(args.repair).write_text(_dump(fixed) + "\n", encoding="utf-8")
    print(_dump({"count": len(spots), "invalid": bad, "report": report}))
    return 0 if bad == 0 else 2


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Training spot generator (local, no server)")
    ap.add_argument("--log-level", default="WARNING", help="DEBUG|INFO|WARNING (default: WARNING)")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_common = argparse.ArgumentParser(add_help=False)
    ap_common.add_argument("--seed", type=int, default=42, help="Base seed (default: 42)")
    ap_common.add_argument(
        "--difficulty", type=int, default=6, help="1-10, bucketed easy/medium/hard (default: 6)"
    )
    ap_common.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Seeds tried per spot (default: env SPOTGEN_MAX_RETRIES or engine config)",
    )

    sp1 = sub.add_parser("preview", parents=[ap_common], help="Generate and print one spot")
    sp1.add_argument("--id", default="s001", help="Spot id (default: s001)")
    sp1.add_argument("--street", choices=["f", "t", "r"], default="t", help="Decision street")
    sp1.add_argument("--hero", choices=_POSTFLOP_ORDER, default="BTN", help="Hero seat")
    sp1.add_argument("--villain", choices=_POSTFLOP_ORDER, default="BB", help="Villain seat")
    sp1.add_argument("--notes", action="store_true", help="Attach theory notes from the corpus")
    sp1.set_defaults(func=cmd_preview)

    sp2 = sub.add_parser("generate", parents=[ap_common], help="Generate N spots to a JSON file")
    sp2.add_argument("--count", type=int, default=10, help="Number of spots (default: 10)")
    sp2.add_argument("--start", type=int, default=1, help="First spot number (default: 1)")
    sp2.add_argument(
        "--street", choices=["f", "t", "r", "mix"], default="mix", help="Decision street"
    )
    sp2.add_argument("--out", default="spots.json", help="Output file (default: spots.json)")
    sp2.set_defaults(func=cmd_generate)

    sp3 = sub.add_parser("validate", help="Validate a spot JSON file")
    sp3.add_argument("file", help="JSON file with one spot or a list of spots")
    sp3.add_argument("--repair", default=None, help="Write math-repaired spots to this file")
    sp3.set_defaults(func=cmd_validate)

    args = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    return int(args.func(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
