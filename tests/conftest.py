import sys
from pathlib import Path

import pandas as pd
import pytest

# Ensure repository root is on sys.path so tests can import local modules
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

LETTERS = "abcdefg"


@pytest.fixture(autouse=True)
def _quiet_progress(monkeypatch):
    # no progress bars in test output
    monkeypatch.setenv("WAVEJOIN_TQDM", "0")
    yield


def write_wave(path: Path, letter: str, ids, sep: str = "\t", extra: bool = True) -> Path:
    """Write a small indresp-like file for one wave.

    Values are derived from the id so expected cells are easy to compute:
    sex = 1 + id % 2, dvage = 20 + id + wave index, vote6 = 1 + id % 4.
    """
    ids = list(ids)
    w = LETTERS.index(letter) + 1
    data = {
        f"{letter}_hidp": [i * 10 for i in ids],
        "pidp": ids,
        f"{letter}_sex": [1 + i % 2 for i in ids],
        f"{letter}_dvage": [20 + i + w for i in ids],
        f"{letter}_vote6": [1 + i % 4 for i in ids],
    }
    if not extra:
        data.pop(f"{letter}_hidp")
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(data).to_csv(path, sep=sep, index=False)
    return path


@pytest.fixture
def survey_tree(tmp_path):
    """UKHLS-like release: us_w1..us_w7 plus BHPS files that must be ignored.

    Wave k holds ids k..k+3, so every wave adds exactly one new id.
    Waves are written in reverse order to decouple discovery from creation order.
    """
    root = tmp_path / "UKDA-6614-tab" / "tab"
    for w in range(7, 0, -1):
        letter = LETTERS[w - 1]
        write_wave(root / f"us_w{w}" / f"{letter}_indresp.tab", letter, range(w, w + 4))
        write_wave(root / f"us_w{w}" / f"{letter}_hhresp.tab", letter, range(w, w + 4))
    write_wave(root / "bhps_w1" / "ba_indresp.tab", "a", [900, 901])
    write_wave(root / "bhps_w2" / "a_indresp.tab", "a", [902])
    return root
