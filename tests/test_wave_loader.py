from pathlib import Path

import pandas as pd
import pytest

from wavejoin.common.discovery import WaveFile
from wavejoin.common.io import check_unique_ids, load_wave, sniff_sep
from wavejoin.errors import DuplicateIdError, MissingColumnError

from conftest import write_wave


def test_load_keeps_id_and_requested_columns(tmp_path):
    path = write_wave(tmp_path / "a_indresp.tab", "a", [1, 2, 3])
    df = load_wave(WaveFile(1, "a", path), ["sex", "dvage"])
    assert list(df.columns) == ["pidp", "a_sex", "a_dvage"]
    assert len(df) == len(pd.read_csv(path, sep="\t"))
    assert df["a_dvage"].tolist() == [22, 23, 24]


def test_load_comma_separated(tmp_path):
    path = write_wave(tmp_path / "b_indresp.csv", "b", [5, 6], sep=",")
    df = load_wave(WaveFile(2, "b", path), ["vote6"])
    assert list(df.columns) == ["pidp", "b_vote6"]
    assert df["pidp"].tolist() == [5, 6]


def test_sniff_sep_for_txt(tmp_path):
    path = write_wave(tmp_path / "a_indresp.txt", "a", [1], sep="\t")
    assert sniff_sep(path) == "\t"
    path2 = write_wave(tmp_path / "b_indresp.txt", "b", [1], sep=",")
    assert sniff_sep(path2) == ","


def test_missing_column_fails_loudly(tmp_path):
    path = write_wave(tmp_path / "a_indresp.tab", "a", [1, 2])
    with pytest.raises(MissingColumnError) as ei:
        load_wave(WaveFile(1, "a", path), ["sex", "height"])
    err = ei.value
    assert err.missing == ["a_height"]
    assert err.wave == 1
    assert "a_height" in str(err) and str(path) in str(err)


def test_missing_id_column(tmp_path):
    path = write_wave(tmp_path / "a_indresp.tab", "a", [1])
    with pytest.raises(MissingColumnError, match="hidp_x"):
        load_wave(WaveFile(1, "a", path), ["sex"], id_col="hidp_x")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="wave 3"):
        load_wave(WaveFile(3, "c", Path(tmp_path / "c_indresp.tab")), ["sex"])


def test_duplicate_ids_raise_by_default():
    df = pd.DataFrame({"pidp": [1, 2, 2], "a_sex": [1, 2, 2]})
    with pytest.raises(DuplicateIdError) as ei:
        check_unique_ids(df, "pidp", wave=1, path=Path("a_indresp.tab"))
    assert ei.value.n_duplicates == 2
    assert "wave 1" in str(ei.value)


def test_duplicate_ids_warn_policy(caplog):
    df = pd.DataFrame({"pidp": [1, 1], "a_sex": [1, 2]})
    with caplog.at_level("WARNING", logger="wavejoin.io"):
        n = check_unique_ids(df, "pidp", wave=1, policy="warn")
    assert n == 2
    assert "duplicated 'pidp'" in caplog.text
