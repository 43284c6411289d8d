from __future__ import annotations

import csv
import hashlib
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from wavejoin.common.discovery import WaveFile
from wavejoin.errors import DuplicateIdError, MissingColumnError, WaveReadError

logger = logging.getLogger("wavejoin.io")

_SEP_BY_SUFFIX = {".tab": "\t", ".tsv": "\t", ".csv": ","}


def sniff_sep(path: Path) -> str:
    """Delimiter from the extension, else sniffed from the header line."""
    sep = _SEP_BY_SUFFIX.get(path.suffix.lower())
    if sep is not None:
        return sep
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as fh:
        first = fh.readline()
    try:
        return csv.Sniffer().sniff(first, delimiters="\t,;|").delimiter
    except csv.Error:
        return "\t" if "\t" in first else ","


def read_header(path: Path, sep: Optional[str] = None) -> List[str]:
    sep = sep or sniff_sep(path)
    return list(pd.read_csv(path, sep=sep, nrows=0).columns)


def wave_columns(wave: WaveFile, variables: Sequence[str], id_col: str = "pidp") -> List[str]:
    """``[id_col, <letter>_<var>, ...]`` for one wave."""
    return [id_col] + [wave.column(v) for v in variables]


def load_wave(wave: WaveFile, variables: Sequence[str], id_col: str = "pidp") -> pd.DataFrame:
    """Read one wave file keeping only the id and the wave-prefixed variables.

    Raises MissingColumnError if any requested column is absent; no column of
    missing values is ever substituted.
    """
    path = Path(wave.path)
    if not path.is_file():
        raise FileNotFoundError(f"wave {wave.wave} input not found: {path}")

    cols = wave_columns(wave, variables, id_col)
    try:
        sep = sniff_sep(path)
        header = read_header(path, sep)
    except (OSError, UnicodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise WaveReadError(f"wave {wave.wave}: cannot read {path}: {e}") from e

    missing = [c for c in cols if c not in header]
    if missing:
        raise MissingColumnError(missing, wave=wave.wave, path=path)

    try:
        df = pd.read_csv(path, sep=sep, usecols=cols)
    except (OSError, UnicodeError, pd.errors.ParserError) as e:
        raise WaveReadError(f"wave {wave.wave}: cannot parse {path}: {e}") from e

    logger.info(f"[load] wave {wave.wave} ({wave.letter}) {path.name}: {len(df)} rows, {len(cols) - 1} var(s)")
    return df[cols]


def check_unique_ids(
    df: pd.DataFrame,
    id_col: str,
    wave: Optional[int] = None,
    path: Optional[Path] = None,
    policy: str = "error",
) -> int:
    """Count duplicated ids; raise (policy 'error') or log a warning (policy 'warn')."""
    n_dup = int(df[id_col].duplicated(keep=False).sum())
    if n_dup:
        err = DuplicateIdError(id_col, n_dup, wave=wave, path=path)
        if policy == "error":
            raise err
        logger.warning(f"[load] {err}")
    return n_dup


def read_joined(path: Path | str) -> pd.DataFrame:
    """Read a joined table written by ``write_table``."""
    path = Path(path)
    return pd.read_csv(path, sep=sniff_sep(path))


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return h.hexdigest()
