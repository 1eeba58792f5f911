"""Tests for the table-size sweep driver and its configuration."""
from __future__ import annotations

import random
from typing import Any

import pytest

from bf_prime.config import AnalyzerConfig, SweepConfig
from bf_prime.errors import ConfigurationError
from bf_prime.sweep import SweepRow, format_table, main, run_sweep


def small_config(**overrides: Any) -> SweepConfig:
    params = dict(num_items=200, num_probes=500, start=1000, stop=3000, step=1000, seed=3)
    params.update(overrides)
    return SweepConfig(**params)


def test_run_sweep_rows() -> None:
    rows = list(run_sweep(small_config()))
    assert [r.table_size for r in rows] == [1000, 2000, 3000]
    assert [r.num_hashes for r in rows] == [3, 6, 10]
    for row in rows:
        assert row.num_probes == 500
        assert 0 <= row.false_positives <= 500
        assert row.empirical_rate == row.false_positives / 500
        assert 0.0 < row.expected_rate < 1.0


def test_run_sweep_seed_is_reproducible() -> None:
    assert list(run_sweep(small_config())) == list(run_sweep(small_config()))
    rng_rows = list(run_sweep(small_config(seed=None), random.Random(3)))
    assert rng_rows == list(run_sweep(small_config()))


def test_format_table() -> None:
    rows = [
        SweepRow(1000, 3, 25, 500, 0.05, 0.04),
        SweepRow(2000, 6, 0, 500, 0.0, 0.0),
    ]
    table = format_table(rows).splitlines()
    assert len(table) == 4
    assert "Table size" in table[0]
    assert set(table[1]) == {"-"}
    assert "25/500" in table[2]
    assert "+25.00%" in table[2]
    assert table[3].endswith("N/A")


def test_main_prints_table(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--items", "50", "--probes", "100", "--start", "500",
                 "--stop", "1000", "--step", "500", "--seed", "1"])
    out = capsys.readouterr().out
    assert code == 0
    assert "50 items, 100 probes" in out
    assert "Table size" in out


def test_main_rejects_bad_range(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--start", "5000", "--stop", "1000"])
    assert excinfo.value.code == 2
    assert "stop must not be smaller than start" in capsys.readouterr().err


def test_main_rejects_unreachable_item_count(capsys: pytest.CaptureFixture[str]) -> None:
    """Asking for more distinct strings than exist fails before any output."""
    with pytest.raises(SystemExit) as excinfo:
        main(["--length", "1", "--items", "300", "--probes", "10"])
    captured = capsys.readouterr()
    assert excinfo.value.code == 2
    assert "only 255 exist" in captured.err
    assert captured.out == ""


def test_sweep_config_validation() -> None:
    with pytest.raises(ConfigurationError):
        SweepConfig(num_items=0)
    with pytest.raises(ConfigurationError):
        SweepConfig(num_probes=0)
    with pytest.raises(ConfigurationError):
        SweepConfig(step=0)
    with pytest.raises(ConfigurationError, match="distinct strings requested"):
        SweepConfig(num_items=5, num_probes=5, analyzer=AnalyzerConfig(string_length=1, alphabet_size=9))
    SweepConfig(num_items=5, num_probes=4, analyzer=AnalyzerConfig(string_length=1, alphabet_size=9))
    assert list(SweepConfig(start=10, stop=30, step=10).table_sizes()) == [10, 20, 30]
    assert SweepConfig().analyzer == AnalyzerConfig()


def test_analyzer_config_validation() -> None:
    assert AnalyzerConfig().sample_space == 255 ** 5
    assert AnalyzerConfig(string_length=0).sample_space == 1
    with pytest.raises(ConfigurationError):
        AnalyzerConfig(string_length=-1)
    with pytest.raises(ConfigurationError):
        AnalyzerConfig(alphabet_size=0)
    with pytest.raises(ConfigurationError):
        AnalyzerConfig(max_attempts=0)
