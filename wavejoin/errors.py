from __future__ import annotations

from pathlib import Path
from typing import List, Optional


class WaveDiscoveryError(RuntimeError): ...


class WaveReadError(RuntimeError): ...


class AccumulationError(RuntimeError): ...


class MissingColumnError(KeyError):
    """Requested columns are absent from a wave file."""

    def __init__(self, missing: List[str], wave: Optional[int] = None, path: Optional[Path] = None):
        self.missing = list(missing)
        self.wave = wave
        self.path = path
        super().__init__(missing)

    def __str__(self) -> str:
        where = f"wave {self.wave} ({self.path})" if self.wave is not None else str(self.path)
        return f"missing column(s) {', '.join(self.missing)} in {where}"


class DuplicateIdError(ValueError):
    """The id column is not unique within one wave's table."""

    def __init__(self, id_col: str, n_duplicates: int, wave: Optional[int] = None, path: Optional[Path] = None):
        self.id_col = id_col
        self.n_duplicates = n_duplicates
        self.wave = wave
        self.path = path
        super().__init__(
            f"{n_duplicates} duplicated '{id_col}' value(s) in wave {wave} ({path}); "
            "full join would multiply rows"
        )
