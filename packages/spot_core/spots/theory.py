"""Theory snippets: short solver-style notes pulled from the markdown corpus."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from spot_core.engine.config_loader import engine_value
from spot_core.engine.types import FlopClass, TurnType

_LOG = logging.getLogger(__name__)

_DEFAULT_ROOT = Path(__file__).resolve().parents[1] / "config" / "theory"

_HEADING = re.compile(r"^#{1,3}\s+")
_BULLET = re.compile(r"^[-*]\s+")

# 转牌类型 -> turn_matrix 中的章节标题
TURN_SECTIONS: dict[TurnType, str] = {
    TurnType.BLANK: "Blank Turns",
    TurnType.OVERCARD: "Overcards to the Flop",
    TurnType.STRAIGHT_COMPLETER: "Straight Completers",
    TurnType.FLUSH_COMPLETER: "Flush-Completing Turns",
    TurnType.PAIRED: "Paired Turns",
}

Loader = Callable[[Path], str]


@dataclass(frozen=True)
class TheoryCorpus:
    postflop_core: str
    flop_docs: str
    turn_docs: str
    river_docs: str


def _read_text(p: Path) -> str:
    return p.read_text(encoding="utf-8")


def theory_root() -> Path:
    override = os.getenv("SPOTGEN_THEORY_DIR")
    return Path(override).expanduser().resolve() if override else _DEFAULT_ROOT


class TheoryCache:
    """One parsed corpus per root directory; the loader is swappable for tests."""

    def __init__(self, loader: Loader | None = None):
        self._loader: Loader = loader or _read_text
        self._corpora: dict[Path, TheoryCorpus] = {}

    def load(self, root: str | Path | None = None) -> TheoryCorpus:
        key = Path(root) if root is not None else theory_root()
        hit = self._corpora.get(key)
        if hit is not None:
            return hit
        corpus = TheoryCorpus(
            postflop_core=self._loader(key / "postflop_core.md"),
            flop_docs=self._loader(key / "flop_matrix.md"),
            turn_docs=self._loader(key / "turn_matrix.md"),
            river_docs=self._loader(key / "river_matrix.md"),
        )
        self._corpora[key] = corpus
        _LOG.debug("theory_corpus_loaded", extra={"root": str(key)})
        return corpus

    def clear(self) -> None:
        self._corpora.clear()


def normalize_line(s: str) -> str:
    return re.sub(r"\s+", " ", s).strip()


def extract_section(md: str, heading: str, max_lines: int = 120) -> list[str]:
    """Lines after the first line mentioning ``heading`` up to the next heading."""
    lines = md.split("\n")
    needle = heading.lower()
    start = next((i for i, line in enumerate(lines) if needle in line.lower()), None)
    if start is None:
        return []
    out: list[str] = []
    for line in lines[start + 1 :]:
        if len(out) >= max_lines:
            break
        if _HEADING.match(line) and out:
            break
        out.append(line)
    return out


def extract_bullets(section: Sequence[str], max_bullets: int) -> list[str]:
    bullets: list[str] = []
    for line in section:
        t = line.strip()
        if not _BULLET.match(t):
            continue
        b = normalize_line(_BULLET.sub("", t))
        if not b or b.lower().startswith("example:"):
            continue
        bullets.append(b)
        if len(bullets) >= max_bullets:
            break
    return bullets


def build_solver_notes(
    corpus: TheoryCorpus, flop_class: FlopClass | str, turn_type: TurnType | None
) -> list[str]:
    notes: list[str] = []
    if FlopClass(flop_class) is FlopClass.LOW_DISCONNECTED:
        notes.extend(extract_bullets(extract_section(corpus.flop_docs, "Low Disconnected Boards"), 2))

    heading = TURN_SECTIONS.get(turn_type) if turn_type is not None else None
    if heading:
        notes.extend(extract_bullets(extract_section(corpus.turn_docs, heading), 1))

    notes.extend(extract_bullets(extract_section(corpus.postflop_core, "Large Bet Strategy"), 1))
    return [n for n in notes if n][: int(engine_value("tags.max_notes"))]


__all__ = [
    "TURN_SECTIONS",
    "TheoryCache",
    "TheoryCorpus",
    "build_solver_notes",
    "extract_bullets",
    "extract_section",
    "normalize_line",
    "theory_root",
]
