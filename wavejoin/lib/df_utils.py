"""Dataframe helpers: key-based wave merges and dtype cleanup.

Small helpers used by the wave accumulator.
"""
from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
import pandas as pd

from wavejoin.config import JOIN_TYPES


def merge_waves(left: pd.DataFrame, right: pd.DataFrame, id_col: str = "pidp", how: str = "outer") -> pd.DataFrame:
    """Join two wave tables on ``id_col``.

    With ``how="outer"`` the result has one row per id present in either
    operand; columns from the side an id is absent from are missing.
    """
    if how not in JOIN_TYPES:
        raise ValueError(f"how must be one of {JOIN_TYPES}, got {how!r}")
    if id_col not in left.columns or id_col not in right.columns:
        raise ValueError(f"Both left and right must contain an '{id_col}' column to merge on")
    overlap = (set(left.columns) & set(right.columns)) - {id_col}
    if overlap:
        raise ValueError(f"column(s) present on both sides of the merge: {sorted(overlap)}")
    return pd.merge(left, right, on=id_col, how=how, sort=True)


def restore_integer_columns(df: pd.DataFrame, exclude: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Cast float columns holding only whole numbers (plus NaN) to nullable Int64.

    Outer joins turn integer survey codes into floats once a missing value
    appears; this brings them back so ``2`` is written as ``2`` and not ``2.0``.
    """
    skip = set(exclude or [])
    out = df.copy()
    for c in out.columns:
        if c in skip or not pd.api.types.is_float_dtype(out[c]):
            continue
        s = out[c]
        vals = s.dropna().to_numpy()
        if len(vals) and np.all(np.isfinite(vals)) and np.all(vals == np.round(vals)):
            out[c] = s.astype("Int64")
    return out

