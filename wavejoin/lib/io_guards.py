"""Atomic-write helpers for the joined table and its manifest.

Callers should use `write_table()` and `write_manifest()`. Both write to a
temporary file in the target directory and move it into place, so a failed
run never leaves a half-written output behind.

Unlike scratch outputs, the target directory is not created implicitly: a
missing directory is reported as an error unless ``mkdir=True`` is passed.
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import pandas as pd

logger = logging.getLogger("wavejoin.io")


def _compute_backup_path(p: Path, backup_name: Optional[str]) -> Path:
    """Backup path for ``p``.

    - None -> <stem>_prev<suffix>
    - a name with a suffix -> used as the exact filename
    - otherwise a token -> <stem>_<token><suffix>
    """
    if backup_name is None:
        return p.with_name(p.stem + "_prev" + p.suffix)
    if Path(backup_name).suffix:
        return p.with_name(backup_name)
    return p.with_name(p.stem + "_" + backup_name + p.suffix)


def _check_target_dir(p: Path, mkdir: bool) -> None:
    d = p.parent
    if not d.exists():
        if not mkdir:
            raise FileNotFoundError(f"output directory does not exist: {d}")
        d.mkdir(parents=True, exist_ok=True)
    if not d.is_dir():
        raise NotADirectoryError(f"output parent is not a directory: {d}")
    if not os.access(d, os.W_OK):
        raise PermissionError(f"output directory is not writable: {d}")


def write_table(
    df: pd.DataFrame,
    path: Path | str,
    *,
    sep: str = "\t",
    mkdir: bool = False,
    dry_run: bool = False,
    backup_name: Optional[str] = None,
) -> Path:
    """Write ``df`` as delimited text (tab by default), header included.

    An existing file at ``path`` is copied to its backup path first. Missing
    values are written as empty fields.
    """
    p = Path(path)
    if dry_run:
        logger.info(f"DRY RUN: would write {len(df)} rows x {len(df.columns)} cols -> {p}")
        if p.exists():
            logger.info(f"DRY RUN: would backup existing {p} -> {_compute_backup_path(p, backup_name)}")
        return p

    _check_target_dir(p, mkdir)
    if p.exists():
        backup = _compute_backup_path(p, backup_name)
        shutil.copy2(p, backup)
        logger.debug(f"[write] backup {p} -> {backup}")

    with tempfile.NamedTemporaryFile("w", delete=False, dir=str(p.parent), prefix=p.name + ".tmp.", newline="") as tf:
        tmp = Path(tf.name)
    try:
        df.to_csv(tmp, sep=sep, index=False, na_rep="", lineterminator="\n")
        tmp.replace(p)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    logger.info(f"[write] {len(df)} rows x {len(df.columns)} cols -> {p}")
    return p


def write_manifest(manifest: dict, path: Path | str, *, dry_run: bool = False) -> Path:
    p = Path(path)
    if dry_run:
        logger.info(f"DRY RUN: would write manifest -> {p}")
        return p
    tmp = p.with_suffix(p.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8", newline="\n") as f:
        json.dump(manifest, f, ensure_ascii=False, indent=2, sort_keys=True)
        f.write("\n")
    os.replace(str(tmp), str(p))
    return p
