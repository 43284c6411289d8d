"""Wave file discovery with an explicit wave-to-file mapping.

Survey releases ship one file per wave, named with a wave letter prefix:

    <root>/UKDA-6614-tab/tab/us_w1/a_indresp.tab
    <root>/UKDA-6614-tab/tab/us_w2/b_indresp.tab
    ...

BHPS files (``bhps_w1/ba_indresp.tab``) can live in the same tree; the
inclusion filter (default ``"us"``) keeps them out.

Selection rule:
    The wave is parsed from the file name (``a`` = wave 1, ``b`` = wave 2, ...)
    and validated against the expected set of letters. Directory traversal
    order never decides which file belongs to which wave.
"""
from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from wavejoin.errors import WaveDiscoveryError

logger = logging.getLogger("wavejoin.discovery")

WAVE_LETTERS = string.ascii_lowercase
TABULAR_SUFFIXES = (".tab", ".tsv", ".csv", ".txt")


@dataclass(frozen=True)
class WaveFile:
    """One input file assigned to a wave."""
    wave: int
    letter: str
    path: Path

    def column(self, base: str) -> str:
        """Wave-prefixed column name, e.g. ``sex`` -> ``a_sex`` for wave 1."""
        return f"{self.letter}_{base}"


def wave_letter(wave: int) -> str:
    """Return the letter prefix for a 1-based wave number."""
    if not 1 <= wave <= len(WAVE_LETTERS):
        raise ValueError(f"wave must be between 1 and {len(WAVE_LETTERS)}, got {wave}")
    return WAVE_LETTERS[wave - 1]


def wave_index(letter: str) -> int:
    """Return the 1-based wave number for a letter prefix."""
    if len(letter) != 1 or letter.lower() not in WAVE_LETTERS:
        raise ValueError(f"not a wave letter: {letter!r}")
    return WAVE_LETTERS.index(letter.lower()) + 1


def _filename_regex(pattern: str) -> re.Pattern:
    return re.compile(
        r"^(?P<letter>[a-z])_" + re.escape(pattern.lower()) + r"\.(?:tab|tsv|csv|txt)$"
    )


def discover_wave_files(
    root: Path | str,
    pattern: str = "indresp",
    include: str = "us",
    n_waves: int = 7,
) -> List[WaveFile]:
    """List one file per wave under ``root``, wave 1 first.

    Args:
        root: Directory searched recursively.
        pattern: Substring every candidate file name must contain.
        include: Substring the path below ``root`` must contain (empty string
            disables).
        n_waves: Number of expected waves; letters ``a`` .. ``wave_letter(n_waves)``.

    Raises:
        WaveDiscoveryError: root missing, a wave matched by more than one file,
            or an expected wave without a file.
    """
    root = Path(root)
    if not root.is_dir():
        raise WaveDiscoveryError(f"root directory not found: {root}")

    expected = [wave_letter(i) for i in range(1, n_waves + 1)]
    rx = _filename_regex(pattern)
    include_l = include.lower()

    found: Dict[str, Path] = {}
    for p in sorted(root.rglob(f"*{pattern}*")):
        if not p.is_file() or p.suffix.lower() not in TABULAR_SUFFIXES:
            continue
        if include_l and include_l not in p.relative_to(root).as_posix().lower():
            logger.debug(f"[discover] excluded by filter '{include}': {p}")
            continue
        m = rx.match(p.name.lower())
        if not m:
            logger.debug(f"[discover] name does not follow <letter>_{pattern}: {p.name}")
            continue
        letter = m.group("letter")
        if letter not in expected:
            logger.warning(f"[discover] ignoring wave '{letter}' beyond expected {n_waves} waves: {p}")
            continue
        if letter in found:
            raise WaveDiscoveryError(
                f"wave {wave_index(letter)} ('{letter}') matched by more than one file: "
                f"{found[letter]} and {p}"
            )
        found[letter] = p

    missing = [ltr for ltr in expected if ltr not in found]
    if missing:
        raise WaveDiscoveryError(
            f"found {len(found)} of {n_waves} waves under {root}; "
            f"no '{pattern}' file for wave letter(s) {', '.join(missing)}"
        )

    files = [WaveFile(wave=wave_index(ltr), letter=ltr, path=found[ltr]) for ltr in expected]
    logger.info(f"[discover] {len(files)} wave file(s) under {root}")
    return files
