import pytest

from wavejoin.common.discovery import discover_wave_files, wave_index, wave_letter
from wavejoin.errors import WaveDiscoveryError

from conftest import write_wave


def test_discover_orders_by_wave_letter(survey_tree):
    waves = discover_wave_files(survey_tree)
    assert [w.wave for w in waves] == [1, 2, 3, 4, 5, 6, 7]
    assert [w.letter for w in waves] == list("abcdefg")
    for w in waves:
        assert w.path.name == f"{w.letter}_indresp.tab"
        assert w.path.parent.name == f"us_w{w.wave}"


def test_discover_skips_bhps_and_other_files(survey_tree):
    waves = discover_wave_files(survey_tree)
    paths = [w.path.relative_to(survey_tree).as_posix() for w in waves]
    assert not any("bhps" in p for p in paths)
    assert not any("hhresp" in p for p in paths)


def test_discover_without_filter_sees_duplicate_wave(survey_tree):
    # bhps_w2/a_indresp.tab collides with us_w1/a_indresp.tab once the filter is off
    with pytest.raises(WaveDiscoveryError, match="more than one file"):
        discover_wave_files(survey_tree, include="")


def test_discover_missing_wave(survey_tree):
    (survey_tree / "us_w4" / "d_indresp.tab").unlink()
    with pytest.raises(WaveDiscoveryError) as ei:
        discover_wave_files(survey_tree)
    assert "6 of 7" in str(ei.value)
    assert "d" in str(ei.value).split("wave letter(s)")[-1]


def test_discover_fewer_waves_expected(survey_tree):
    waves = discover_wave_files(survey_tree, n_waves=3)
    assert [w.letter for w in waves] == ["a", "b", "c"]


def test_discover_missing_root(tmp_path):
    with pytest.raises(WaveDiscoveryError, match="not found"):
        discover_wave_files(tmp_path / "nope")


def test_discover_accepts_csv(tmp_path):
    root = tmp_path / "release"
    write_wave(root / "us" / "a_indresp.csv", "a", [1, 2], sep=",")
    write_wave(root / "us" / "b_indresp.csv", "b", [2, 3], sep=",")
    waves = discover_wave_files(root, n_waves=2)
    assert [w.path.suffix for w in waves] == [".csv", ".csv"]


def test_wave_letter_roundtrip_bounds():
    assert wave_letter(1) == "a"
    assert wave_letter(7) == "g"
    assert wave_index("g") == 7
    with pytest.raises(ValueError):
        wave_letter(0)
    with pytest.raises(ValueError):
        wave_letter(27)
    with pytest.raises(ValueError):
        wave_index("ab")
