"""Fold per-wave tables into one wide table keyed by respondent id.

Each wave is loaded, projected to the requested columns, merged into the
running result and released before the next wave is read.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from wavejoin.common.discovery import WaveFile, discover_wave_files
from wavejoin.common.io import check_unique_ids, load_wave, sha256_file
from wavejoin.common.progress import Timer, progress_bar
from wavejoin.config import JoinCfg
from wavejoin.errors import AccumulationError
from wavejoin.lib.df_utils import merge_waves, restore_integer_columns
from wavejoin.lib.io_guards import write_manifest, write_table

logger = logging.getLogger("wavejoin.join")


@dataclass
class JoinResult:
    df: pd.DataFrame
    waves: List[WaveFile]
    wave_rows: List[int] = field(default_factory=list)
    accumulated_rows: List[int] = field(default_factory=list)
    duplicates: List[int] = field(default_factory=list)


def iter_wave_tables(
    waves: Sequence[WaveFile],
    variables: Sequence[str],
    id_col: str = "pidp",
    on_duplicate: str = "error",
) -> Iterator[Tuple[WaveFile, pd.DataFrame, int]]:
    """Yield ``(wave, table, n_duplicate_ids)`` one wave at a time."""
    for w in waves:
        df = load_wave(w, variables, id_col)
        n_dup = check_unique_ids(df, id_col, wave=w.wave, path=w.path, policy=on_duplicate)
        yield w, df, n_dup
        # drop this wave before the next file is read
        del df


def join_waves(
    waves: Sequence[WaveFile],
    variables: Sequence[str],
    id_col: str = "pidp",
    how: str = "outer",
    on_duplicate: str = "error",
) -> JoinResult:
    """Join the wave tables in the given order.

    Wave 1 initializes the accumulator; every later wave is merged into it
    with ``merge_waves(acc, table, id_col, how)``.
    """
    if not waves:
        raise ValueError("no wave files to join")

    wave_rows: List[int] = []
    acc_rows: List[int] = []
    dups: List[int] = []
    seen_ids: set = set()

    def step(acc: Optional[pd.DataFrame], item: Tuple[WaveFile, pd.DataFrame, int]) -> pd.DataFrame:
        w, table, n_dup = item
        wave_rows.append(len(table))
        dups.append(n_dup)
        seen_ids.update(table[id_col].tolist())
        merged = table.copy() if acc is None else merge_waves(acc, table, id_col=id_col, how=how)

        if how == "outer":
            if acc_rows and len(merged) < acc_rows[-1]:
                raise AccumulationError(
                    f"wave {w.wave}: accumulated rows dropped from {acc_rows[-1]} to {len(merged)}"
                )
            if not any(dups) and len(merged) != len(seen_ids):
                raise AccumulationError(
                    f"wave {w.wave}: {len(merged)} accumulated rows but {len(seen_ids)} distinct ids"
                )
        acc_rows.append(len(merged))
        logger.info(f"[join] wave {w.wave} ({w.letter}): +{len(table)} rows -> {len(merged)} accumulated")
        bar.update(1)
        return merged

    acc: Optional[pd.DataFrame] = None
    with progress_bar(total=len(waves), desc=f"join ({how})") as bar:
        for item in iter_wave_tables(waves, variables, id_col, on_duplicate):
            acc = step(acc, item)
            # no reference to the merged wave may survive into the next load
            del item

    acc = acc.sort_values(id_col, kind="mergesort").reset_index(drop=True)
    acc = restore_integer_columns(acc)
    return JoinResult(df=acc, waves=list(waves), wave_rows=wave_rows, accumulated_rows=acc_rows, duplicates=dups)


def manifest_path_for(out: Path) -> Path:
    return out.with_name(out.name + ".manifest.json")


def build_manifest(result: JoinResult, cfg: JoinCfg, out: Path) -> dict:
    return {
        "type": "wave_join",
        "settings": {
            "id_col": cfg.id_col,
            "variables": list(cfg.variables),
            "how": cfg.how,
            "on_duplicate": cfg.on_duplicate,
            "n_waves": cfg.n_waves,
        },
        "inputs": [
            {
                "wave": w.wave,
                "letter": w.letter,
                "path": str(w.path),
                "rows": n,
                "duplicate_ids": d,
                "sha256": sha256_file(Path(w.path)),
            }
            for w, n, d in zip(result.waves, result.wave_rows, result.duplicates)
        ],
        "outputs": {
            "path": str(out),
            "rows_total": int(len(result.df)),
            "cols_total": int(len(result.df.columns)),
            "accumulated_rows": list(result.accumulated_rows),
            "sha256": sha256_file(out) if out.exists() else None,
        },
    }


def join_run(cfg: JoinCfg, out: Path | str, *, mkdir: bool = False, dry_run: bool = False) -> JoinResult:
    """Discover, join and write; the whole run aborts on the first error."""
    out = Path(out)
    with Timer(f"wavejoin join [{cfg.root} -> {out.name}]", logger=logger):
        waves = discover_wave_files(cfg.root, cfg.pattern, cfg.include, cfg.n_waves)
        for w in waves:
            logger.info(f"[join] wave {w.wave} ({w.letter}): {w.path}")
        result = join_waves(waves, cfg.variables, cfg.id_col, cfg.how, cfg.on_duplicate)
        write_table(result.df, out, mkdir=mkdir, dry_run=dry_run)
        write_manifest(build_manifest(result, cfg, out), manifest_path_for(out), dry_run=dry_run)
    return result
