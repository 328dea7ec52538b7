import numpy as np

from bincounter.cli.demo import main, run, sample_values
from bincounter import load_config


def test_sample_values_stay_in_range():
    rng = np.random.default_rng(3)
    v = sample_values(rng, 1000)
    assert v.shape == (1000,)
    assert np.all(v > 0.0)
    assert np.all(v <= 2.0)


def test_main_defaults(capsys):
    assert main(["--seed", "1", "--samples", "500"]) == 0
    out = capsys.readouterr().out

    assert out.startswith("TotalEntries: 502\n")
    assert "CountBelowRangeMin: 1" in out
    assert "CountAboveRangeMax: 1" in out
    assert "MedianBinIdx:" in out
    assert out.count("\t:\t") == 30


def test_main_with_config_file(tmp_path, capsys):
    cfg = tmp_path / "demo.yaml"
    cfg.write_text("bins: 5\nsamples: 100\nseed: 3\noutliers: []\n")

    assert main(["--config", str(cfg), "--no-stats"]) == 0
    out = capsys.readouterr().out

    assert "TotalEntries: 100" in out
    assert "CountBelowRangeMin" not in out
    assert out.count("\t:\t") == 5


def test_main_outlier_flags(capsys):
    assert main(["--samples", "0", "--outlier", "7", "--outlier", "-7", "--outlier", "8"]) == 0
    out = capsys.readouterr().out

    assert "TotalEntries: 3" in out
    assert "CountBelowRangeMin: 1" in out
    assert "CountAboveRangeMax: 2" in out


def test_main_bad_config_returns_2(tmp_path, capsys):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("colour: red\n")
    assert main(["--config", str(cfg)]) == 2
    assert capsys.readouterr().out == ""


def test_main_rejects_inverted_range():
    assert main(["--range-min", "3", "--range-max", "1"]) == 2


def test_run_is_reproducible():
    import io

    cfg = load_config(overrides={"seed": 11, "samples": 200})
    a = run(cfg, out=io.StringIO())
    b = run(cfg, out=io.StringIO())
    assert np.array_equal(a.bins, b.bins)
    assert a.total_observations == 202


def test_main_rejects_range_collapsing_in_single_precision(capsys):
    assert main(["--range-min", "1.0", "--range-max", "1.00000001", "--samples", "1"]) == 2
    assert capsys.readouterr().out == ""
