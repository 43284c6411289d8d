"""Exploratory figures for a joined multi-wave table.

Every function writes one PNG into ``outdir`` and returns its path. Figures
are drawn on the non-interactive Agg backend so they render in batch runs.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402

from wavejoin.eda.explore import wave_presence  # noqa: E402

logger = logging.getLogger("wavejoin.eda")

DPI = 140
MAX_CATEGORIES = 20


def _save(fig, outdir: Path, name: str) -> Path:
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    path = outdir / name
    fig.tight_layout()
    fig.savefig(path, dpi=DPI)
    plt.close(fig)
    logger.info(f"[plot] {path}")
    return path


def is_categorical(s: pd.Series, max_categories: int = MAX_CATEGORIES) -> bool:
    if not pd.api.types.is_numeric_dtype(s):
        return True
    return s.dropna().nunique() <= max_categories


def plot_wave_presence(df: pd.DataFrame, outdir: Path, id_col: str = "pidp", n_waves: int = 7) -> Path:
    """Bar chart of respondents present in each wave."""
    counts = wave_presence(df, id_col=id_col, n_waves=n_waves)
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.bar(counts["wave"].astype(str), counts["respondents"], color="0.35")
    ax.set_title("Respondents per wave")
    ax.set_xlabel("Wave")
    ax.set_ylabel("Respondents")
    return _save(fig, outdir, "wave_presence.png")


def plot_distribution_by_wave(long_df: pd.DataFrame, variable: str, outdir: Path) -> Path:
    """Count plot by wave for categorical variables, box plot for continuous ones."""
    if variable not in long_df.columns:
        raise KeyError(f"variable '{variable}' not in long table")
    sub = long_df[["wave", variable]].dropna()
    if sub.empty:
        raise ValueError(f"variable '{variable}' has no non-missing values to plot")

    fig, ax = plt.subplots(figsize=(8, 4.5))
    if is_categorical(sub[variable]):
        sub = sub.assign(**{variable: sub[variable].astype(str), "wave": sub["wave"].astype(str)})
        order = sorted(sub[variable].unique(), key=_natural_key)
        sns.countplot(data=sub, x=variable, hue="wave", order=order, palette="Greys", ax=ax)
        ax.set_ylabel("Count")
        ax.legend(title="Wave", fontsize="small")
    else:
        sns.boxplot(data=sub, x="wave", y=variable, color="0.8", ax=ax)
        ax.set_xlabel("Wave")
    ax.set_title(f"{variable} by wave")
    return _save(fig, outdir, f"{variable}_by_wave.png")


def plot_mean_by_wave(
    long_df: pd.DataFrame,
    variable: str,
    outdir: Path,
    hue: Optional[str] = None,
) -> Path:
    """Line plot of the per-wave mean, optionally split by ``hue``."""
    if variable not in long_df.columns:
        raise KeyError(f"variable '{variable}' not in long table")
    cols = ["wave", variable] + ([hue] if hue else [])
    sub = long_df[cols].dropna()
    if sub.empty:
        raise ValueError(f"variable '{variable}' has no non-missing values to plot")
    sub = sub.assign(**{variable: pd.to_numeric(sub[variable], errors="coerce")})
    if hue:
        sub = sub.assign(**{hue: sub[hue].astype(str)})

    fig, ax = plt.subplots(figsize=(7, 4))
    sns.lineplot(data=sub, x="wave", y=variable, hue=hue, marker="o", errorbar=None, ax=ax)
    ax.set_xticks(sorted(sub["wave"].unique()))
    ax.set_title(f"Mean {variable} by wave" + (f" and {hue}" if hue else ""))
    ax.set_xlabel("Wave")
    ax.set_ylabel(f"Mean {variable}")
    suffix = f"_by_{hue}" if hue else ""
    return _save(fig, outdir, f"{variable}_mean_by_wave{suffix}.png")


def _natural_key(v: str):
    try:
        return (0, float(v), v)
    except ValueError:
        return (1, 0.0, v)
