# wavejoin/common/progress.py
from __future__ import annotations
import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Optional

from tqdm import tqdm


def _should_show_tqdm() -> bool:
    """Decide whether the per-wave progress bar is drawn.

    - WAVEJOIN_TQDM=1 forces display
    - WAVEJOIN_TQDM=0 disables
    - CI environment disables
    - otherwise only when stdout is a TTY
    """
    flag = os.getenv("WAVEJOIN_TQDM")
    if flag == "1":
        return True
    if flag == "0":
        return False
    if os.getenv("CI"):
        return False
    return bool(getattr(sys.stdout, "isatty", None) and sys.stdout.isatty())


class Timer:
    """Log a start line and an elapsed-time line around a block."""

    def __init__(self, label: str = "task", logger: Optional[logging.Logger] = None):
        self.label = label
        self.logger = logger or logging.getLogger("wavejoin")
        self.start = 0.0
        self.elapsed = 0.0

    def __enter__(self):
        self.start = time.perf_counter()
        self.logger.info(f">>> {self.label} ...")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed = time.perf_counter() - self.start
        if exc is None:
            self.logger.info(f"[OK] {self.label}: {self.elapsed:.2f}s")
        else:
            self.logger.error(f"[ERROR] {self.label}: {self.elapsed:.2f}s ({exc_type.__name__})")


@contextmanager
def progress_bar(total: Optional[int], desc: str = "", unit: str = "wave"):
    """Context manager yielding a tqdm bar updated by item count.

    Visibility is controlled by WAVEJOIN_TQDM and TTY detection.
    """
    disable = not _should_show_tqdm()
    with tqdm(total=total, desc=desc, unit=unit, unit_scale=False, disable=disable) as bar:
        yield bar
