import numpy as np
import pytest

from bafseg.utils.pcf import (
    PcfFitter,
    compact,
    exact_pcf,
    get_mad,
    mark_candidates,
    running_median,
    select_fast_pcf,
)


def test_exact_pcf_step():
    y = np.array([0.2] * 20 + [0.8] * 20)
    yhat = exact_pcf(y, kmin=3, gamma=0.1)
    assert len(yhat) == len(y)
    assert np.allclose(yhat, y)


def test_exact_pcf_large_penalty():
    y = np.array([0.2] * 20 + [0.8] * 20)
    yhat = exact_pcf(y, kmin=3, gamma=1000)
    assert np.allclose(yhat, 0.5)


def test_exact_pcf_kmin():
    y = np.array([0.0] * 10 + [1.0] * 2 + [0.0] * 10)
    lengths, means = exact_pcf(y, kmin=3, gamma=0.01, yest=False)
    assert lengths.sum() == len(y)
    assert np.all(lengths >= 3)
    assert len(lengths) == len(means)


def test_exact_pcf_short_input():
    y = np.array([0.1, 0.9, 0.5])
    assert np.allclose(exact_pcf(y, kmin=3, gamma=0.01), np.mean(y))
    assert len(exact_pcf(np.array([]), kmin=3, gamma=1)) == 0


def test_select_fast_pcf_long_track():
    rng = np.random.default_rng(1)
    y = np.concatenate([np.full(1500, 0.3), np.full(1500, 0.7)]) + rng.normal(0, 0.05, 3000)

    lengths, means = select_fast_pcf(y, kmin=3, gamma=1, yest=False)
    assert len(lengths) == 2
    assert abs(lengths[0] - 1500) <= 2
    assert means[0] == pytest.approx(0.3, abs=0.01)
    assert means[1] == pytest.approx(0.7, abs=0.01)

    yhat = select_fast_pcf(y, kmin=3, gamma=1)
    assert len(yhat) == len(y)
    assert np.array_equal(yhat, select_fast_pcf(y, kmin=3, gamma=1))


def test_fitter_matches_exact_on_short_track():
    rng = np.random.default_rng(7)
    y = rng.uniform(0, 1, 200)
    assert np.array_equal(PcfFitter().fit(y, 3, 0.5), exact_pcf(y, 3, 0.5))


def test_mark_and_compact():
    y = np.concatenate([np.zeros(50), np.ones(50)])
    mark = mark_candidates(y)
    assert mark[-1]
    assert mark[49]

    nr, sums = compact(y, mark)
    assert nr.sum() == len(y)
    assert sums.sum() == pytest.approx(y.sum())


def test_running_median_short_input():
    x = np.array([1.0, 5.0, 2.0, 4.0])
    assert len(running_median(x, 25)) == len(x)


def test_get_mad():
    assert np.isnan(get_mad(np.array([0.3])))
    assert np.isnan(get_mad(np.array([0.0, 0.0, 0.3])))
    assert get_mad(np.full(100, 0.3)) == 0

    rng = np.random.default_rng(3)
    mad = get_mad(rng.normal(0, 0.1, 5000))
    assert mad == pytest.approx(0.1, rel=0.15)
