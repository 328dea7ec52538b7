import numpy as np
import pytest

import bincounter as bc
from bincounter import BinCounter, MAXINT64


def _filled(values, num_bins=10, lo=-1, hi=1):
    b = BinCounter(num_bins, lo, hi)
    b.fill(values)
    return b


def test_merge_adds_everything():
    a = _filled([-2.0, 0.05, 0.55])
    b = _filled([0.55, 3.0, -0.95])

    a.merge_(b)

    assert a.total_observations == 6
    assert sum(a.bins.tolist()) == 6
    assert a.count_below_range_min == 1
    assert a.count_above_range_max == 1
    assert a.min_observation == -2.0
    assert a.max_observation == 3.0
    assert a.mean == pytest.approx((-2.0 + 0.05 + 0.55 + 0.55 + 3.0 - 0.95) / 6, rel=1e-6)


def test_merge_into_empty():
    a = BinCounter(10, -1, 1)
    b = _filled([0.1, 0.2])
    a += b
    assert np.array_equal(a.bins, b.bins)
    assert a.min_observation == b.min_observation


def test_add_and_sum_leave_inputs_untouched():
    a = _filled([0.1])
    b = _filled([0.2, 0.3])

    c = a + b
    assert c.total_observations == 3
    assert a.total_observations == 1
    assert b.total_observations == 2

    s = sum([a, b])
    assert s.total_observations == 3
    assert a.total_observations == 1


def test_merge_incompatible_binning():
    a = BinCounter(10, -1, 1)
    with pytest.raises(ValueError):
        a.merge_(BinCounter(5, -1, 1))
    with pytest.raises(ValueError):
        a.merge_(BinCounter(10, -1, 2))
    with pytest.raises(TypeError):
        a.merge_(np.zeros(10))
    with pytest.raises(TypeError):
        a += 1


def test_merge_saturates():
    a = BinCounter(3, -1, 1)
    a.log(0.0, MAXINT64 - 2)
    b = BinCounter(3, -1, 1)
    b.log(-5.0, 3)
    b.log(0.9, 4)

    a.merge_(b)

    assert a.is_full
    assert a.total_observations == MAXINT64
    assert a.bins[0] == 2
    assert a.bins[2] == 0
    assert a.count_below_range_min == 2
    assert a.count_above_range_max == 0
    assert sum(a.bins.tolist()) == a.total_observations


def test_merge_counter_list():
    parts = [_filled([v]) for v in (-0.5, 0.0, 0.5)]
    out = bc.merge_counter_list(parts)

    assert out.total_observations == 3
    assert out is not parts[0]
    assert all(p.total_observations == 1 for p in parts)


def test_merge_counter_list_empty():
    with pytest.raises(ValueError):
        bc.merge_counter_list([])


def test_saturating_merge_only_reports_taken_extremes():
    a = BinCounter(3, -1, 1)
    a.log(0.0, MAXINT64 - 1)
    b = BinCounter(3, -1, 1)
    b.log(-0.9)
    b.log(0.9)

    a.merge_(b)

    assert a.is_full
    assert a.bins.tolist() == [1, MAXINT64 - 1, 0]
    assert a.min_observation == pytest.approx(-0.9)
    # the bin holding 0.9 did not fit
    assert a.max_observation == 0.0
