from pathlib import Path

from spot_core.engine.types import FlopClass, TurnType
from spot_core.spots.theory import (
    TheoryCache,
    build_solver_notes,
    extract_bullets,
    extract_section,
    normalize_line,
    theory_root,
)

FLOP_MD = """# Flop

## Low Disconnected Boards

- Overpairs carry  most of the equity.
- Example: 7-3-2 rainbow.
* Bet small at high frequency.
- Check-raise sparingly.

## Monotone Boards

- Bet small.
"""

TURN_MD = """## Blank Turns
- Keep barrelling.
## Paired Turns
- Small barrels.
"""

CORE_MD = """## Large Bet Strategy
- Polarize when sizing up.
- Second bullet.
"""


def _fake_loader(calls):
    docs = {
        "postflop_core.md": CORE_MD,
        "flop_matrix.md": FLOP_MD,
        "turn_matrix.md": TURN_MD,
        "river_matrix.md": "",
    }

    def load(p: Path) -> str:
        calls.append(p.name)
        return docs[p.name]

    return load


def test_extract_section_stops_at_next_heading():
    sec = extract_section(FLOP_MD, "low disconnected")
    assert "## Monotone Boards" not in sec
    assert any("Check-raise" in line for line in sec)
    assert extract_section(FLOP_MD, "Nope") == []


def test_extract_bullets_skips_examples_and_normalizes():
    sec = extract_section(FLOP_MD, "Low Disconnected Boards")
    assert extract_bullets(sec, 5) == [
        "Overpairs carry most of the equity.",
        "Bet small at high frequency.",
        "Check-raise sparingly.",
    ]
    assert extract_bullets(sec, 1) == ["Overpairs carry most of the equity."]


def test_normalize_line():
    assert normalize_line("  a \t b\n c ") == "a b c"


def test_cache_reads_each_root_once(tmp_path):
    calls = []
    cache = TheoryCache(loader=_fake_loader(calls))
    first = cache.load(tmp_path)
    second = cache.load(tmp_path)
    assert first is second
    assert sorted(calls) == ["flop_matrix.md", "postflop_core.md", "river_matrix.md", "turn_matrix.md"]
    cache.clear()
    cache.load(tmp_path)
    assert len(calls) == 8


def test_solver_notes_low_board_blank_turn(tmp_path):
    corpus = TheoryCache(loader=_fake_loader([])).load(tmp_path)
    notes = build_solver_notes(corpus, FlopClass.LOW_DISCONNECTED, TurnType.BLANK)
    assert notes == [
        "Overpairs carry most of the equity.",
        "Bet small at high frequency.",
        "Keep barrelling.",
        "Polarize when sizing up.",
    ]


def test_solver_notes_other_board_without_turn(tmp_path):
    corpus = TheoryCache(loader=_fake_loader([])).load(tmp_path)
    notes = build_solver_notes(corpus, "monotone", None)
    assert notes == ["Polarize when sizing up."]


def test_bundled_corpus_has_notes():
    corpus = TheoryCache().load()
    notes = build_solver_notes(corpus, FlopClass.LOW_DISCONNECTED, TurnType.PAIRED)
    assert 1 <= len(notes) <= 4
    assert not any(n.lower().startswith("example:") for n in notes)


def test_theory_dir_override(tmp_path, monkeypatch):
    monkeypatch.setenv("SPOTGEN_THEORY_DIR", str(tmp_path))
    assert theory_root() == tmp_path.resolve()
