from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from wavejoin.common.discovery import wave_letter

logger = logging.getLogger("wavejoin.eda")


def recode_missing(
    df: pd.DataFrame,
    columns: Optional[Iterable[str]] = None,
    codes: Optional[Iterable[float]] = None,
) -> pd.DataFrame:
    """Replace survey missing-value codes with NaN.

    By default every negative value counts as missing (-1 don't know,
    -2 refused, -7 proxy, -8 inapplicable, -9 missing). Pass ``codes`` to
    restrict the recode to specific values.
    """
    out = df.copy()
    cols = list(columns) if columns is not None else list(out.columns)
    code_set = None if codes is None else set(codes)
    for c in cols:
        if not pd.api.types.is_numeric_dtype(out[c]):
            continue
        s = out[c].astype(float)
        mask = s < 0 if code_set is None else s.isin(code_set)
        out[c] = s.mask(mask, np.nan)
    return out


def wave_column_groups(df: pd.DataFrame, id_col: str, n_waves: int) -> dict:
    """Map wave number -> list of that wave's prefixed columns present in ``df``."""
    groups = {}
    for i in range(1, n_waves + 1):
        prefix = wave_letter(i) + "_"
        cols = [c for c in df.columns if c != id_col and c.startswith(prefix)]
        if cols:
            groups[i] = cols
    return groups


def wave_presence(df: pd.DataFrame, id_col: str = "pidp", n_waves: int = 7) -> pd.DataFrame:
    """Respondents present per wave.

    An id counts as present in a wave when any of that wave's columns is
    non-missing.
    """
    rows = []
    for i, cols in wave_column_groups(df, id_col, n_waves).items():
        n = int(df[cols].notna().any(axis=1).sum())
        rows.append({"wave": i, "wave_letter": wave_letter(i), "respondents": n})
    return pd.DataFrame(rows, columns=["wave", "wave_letter", "respondents"])


def infer_variables(df: pd.DataFrame, id_col: str = "pidp") -> List[str]:
    """Base variable names from ``<letter>_<base>`` columns, first-seen order."""
    rx = re.compile(r"^[a-z]_(?P<base>.+)$")
    seen: List[str] = []
    for c in df.columns:
        if c == id_col:
            continue
        m = rx.match(c)
        if m and m.group("base") not in seen:
            seen.append(m.group("base"))
    return seen


def to_long(
    df: pd.DataFrame,
    id_col: str = "pidp",
    variables: Optional[Sequence[str]] = None,
    n_waves: int = 7,
) -> pd.DataFrame:
    """Reshape a wide joined table into one row per (id, wave).

    Only rows where the id has at least one non-missing value in that wave
    are kept. Variables a wave does not carry are missing for that wave.
    """
    variables = list(variables) if variables is not None else infer_variables(df, id_col)
    parts = []
    for i in range(1, n_waves + 1):
        letter = wave_letter(i)
        present = {v: f"{letter}_{v}" for v in variables if f"{letter}_{v}" in df.columns}
        if not present:
            continue
        part = df[[id_col] + list(present.values())].rename(columns={c: v for v, c in present.items()})
        part = part[part[list(present.keys())].notna().any(axis=1)]
        part = part.reindex(columns=[id_col] + variables)
        part.insert(1, "wave", i)
        part.insert(2, "wave_letter", letter)
        parts.append(part)
    if not parts:
        logger.warning(f"[eda] no wave-prefixed columns found for {variables}")
        return pd.DataFrame(columns=[id_col, "wave", "wave_letter"] + variables)
    out = pd.concat(parts, ignore_index=True)
    return out.sort_values([id_col, "wave"], kind="mergesort").reset_index(drop=True)
