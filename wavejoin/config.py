from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

JOIN_TYPES = ("outer", "inner", "left", "right")
DUPLICATE_POLICIES = ("error", "warn")


@dataclass
class DiscoveryCfg:
    root: Path = Path("data")
    pattern: str = "indresp"
    include: str = "us"
    n_waves: int = 7


@dataclass
class JoinCfg(DiscoveryCfg):
    id_col: str = "pidp"
    variables: List[str] = field(default_factory=lambda: ["sex", "dvage", "vote6"])
    how: str = "outer"
    on_duplicate: str = "error"

    def __post_init__(self):
        self.root = Path(self.root)
        if self.how not in JOIN_TYPES:
            raise ValueError(f"how must be one of {JOIN_TYPES}, got {self.how!r}")
        if self.on_duplicate not in DUPLICATE_POLICIES:
            raise ValueError(f"on_duplicate must be one of {DUPLICATE_POLICIES}, got {self.on_duplicate!r}")
        if not 1 <= self.n_waves <= 26:
            raise ValueError(f"n_waves must be between 1 and 26, got {self.n_waves}")
