import numpy as np
import pandas as pd
import pytest

from wavejoin.eda.explore import infer_variables, recode_missing, to_long, wave_presence
from wavejoin.eda import plots


@pytest.fixture
def joined():
    return pd.DataFrame(
        {
            "pidp": [1, 2, 3, 4],
            "a_sex": [1, 2, 1, np.nan],
            "a_dvage": [30, 41, -9, np.nan],
            "a_vote6": [1, 2, -1, np.nan],
            "b_sex": [np.nan, 2, 1, 2],
            "b_dvage": [np.nan, 42, 50, 25],
            "b_vote6": [np.nan, 3, 4, 1],
        }
    )


def test_recode_missing_negative_codes(joined):
    out = recode_missing(joined, columns=["a_dvage", "a_vote6"])
    assert np.isnan(out.loc[2, "a_dvage"])
    assert np.isnan(out.loc[2, "a_vote6"])
    assert out.loc[0, "a_dvage"] == 30
    # untouched input
    assert joined.loc[2, "a_dvage"] == -9


def test_recode_missing_specific_codes(joined):
    out = recode_missing(joined, codes=[-9])
    assert np.isnan(out.loc[2, "a_dvage"])
    assert out.loc[2, "a_vote6"] == -1


def test_infer_variables(joined):
    assert infer_variables(joined) == ["sex", "dvage", "vote6"]


def test_wave_presence(joined):
    pres = wave_presence(joined, n_waves=7)
    assert pres["wave"].tolist() == [1, 2]
    assert pres["respondents"].tolist() == [3, 3]


def test_to_long(joined):
    long_df = to_long(joined, n_waves=7)
    assert list(long_df.columns) == ["pidp", "wave", "wave_letter", "sex", "dvage", "vote6"]
    assert len(long_df) == 6
    row = long_df[(long_df["pidp"] == 2) & (long_df["wave"] == 2)].iloc[0]
    assert row["wave_letter"] == "b"
    assert row["dvage"] == 42
    assert set(long_df.loc[long_df["pidp"] == 4, "wave"]) == {2}


def test_plots_write_files(joined, tmp_path):
    df = recode_missing(joined)
    long_df = to_long(df)
    paths = [
        plots.plot_wave_presence(df, tmp_path),
        plots.plot_distribution_by_wave(long_df, "vote6", tmp_path),
        plots.plot_distribution_by_wave(long_df, "dvage", tmp_path),
        plots.plot_mean_by_wave(long_df, "dvage", tmp_path, hue="sex"),
    ]
    for p in paths:
        assert p.exists() and p.stat().st_size > 0
    assert paths[3].name == "dvage_mean_by_wave_by_sex.png"


def test_plot_unknown_variable(joined, tmp_path):
    with pytest.raises(KeyError):
        plots.plot_mean_by_wave(to_long(joined), "height", tmp_path)
