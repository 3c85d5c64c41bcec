import numpy as np
import pytest

from pyrobustid import (
    ConvergenceStatus,
    DegenerateEmbedding,
    InvalidDimension,
    LowRankFilter,
    StoppingCriterion,
    TimeSeries,
    default_embedding_dim,
    lowrankfilter,
)
from pyrobustid._utils.metrics import rms


def test_concrete_scenario_heavy_tailed_noise(five_tone_signal, impulsive_noise, rng):
    """N=10000, five tones at 100 kHz, heavy-tailed noise at 1% of the signal std, n=200."""
    clean = five_tone_signal(10_000)
    noisy = clean + impulsive_noise(rng, clean, ratio=0.01)

    res = lowrankfilter(noisy, 200, stopping=StoppingCriterion(max_iters=1000, tol=1e-5))

    assert res.status is not ConvergenceStatus.DEGENERATE
    assert res.signal.shape == clean.shape
    err_noisy = rms(noisy - clean)
    err_filtered = rms(res.signal - clean)
    assert err_filtered * 5.0 <= err_noisy


def test_sparse_part_holds_the_spikes(five_tone_signal):
    clean = five_tone_signal(1500)
    noisy = clean.copy()
    idx = np.array([200, 600, 1100])
    noisy[idx] += [6.0, -8.0, 5.0]

    res = LowRankFilter(embedding_dim=80, stopping=StoppingCriterion(tol=1e-6)).filter_signal(noisy)

    assert res.converged
    assert rms(res.signal - clean) < 0.05 * rms(noisy - clean)
    np.testing.assert_allclose(res.signal + res.sparse_signal, noisy, atol=1e-3)
    assert np.all(np.abs(res.sparse_signal[idx]) > 1.0)


def test_timeseries_input_keeps_sample_time(five_tone_signal):
    ts = TimeSeries(values=five_tone_signal(600), dt=1e-5)

    res = lowrankfilter(ts, 40)

    assert res.dt == ts.dt
    out = res.as_series()
    assert isinstance(out, TimeSeries)
    assert out.dt == ts.dt
    assert len(out) == len(ts)


def test_default_embedding_dim():
    assert default_embedding_dim(10_000) == 500
    assert default_embedding_dim(100_000) == 2000
    assert default_embedding_dim(10) == 1


def test_default_embedding_dim_is_used(five_tone_signal):
    res = lowrankfilter(five_tone_signal(800))
    assert res.embedding_dim == 40


def test_embedding_dim_must_fit_the_series():
    with pytest.raises(InvalidDimension):
        lowrankfilter(np.ones(50), 50)
    with pytest.raises(InvalidDimension):
        LowRankFilter(embedding_dim=0).filter_signal(np.ones(50))


def test_not_converged_returns_best_effort(five_tone_signal):
    flt = LowRankFilter(embedding_dim=30, stopping=StoppingCriterion(max_iters=10, tol=0.0))
    res = flt.filter_signal(five_tone_signal(400))

    assert res.status is ConvergenceStatus.NOT_CONVERGED
    assert res.iterations == 10
    assert np.all(np.isfinite(res.signal))
    assert flt.stopping.max_iters == 10


def test_degenerate_zero_fallback():
    with pytest.warns(DegenerateEmbedding):
        res = lowrankfilter(np.zeros(100), 10)

    assert res.status is ConvergenceStatus.DEGENERATE
    np.testing.assert_array_equal(res.signal, 0.0)


def test_degenerate_passthrough_fallback(five_tone_signal):
    x = five_tone_signal(300)
    with pytest.warns(DegenerateEmbedding):
        res = lowrankfilter(x, 20, lam=1e-8, degenerate_fallback="passthrough")

    assert res.status is ConvergenceStatus.DEGENERATE
    np.testing.assert_array_equal(res.signal, x)
    np.testing.assert_array_equal(res.sparse_signal, 0.0)


def test_degenerate_zero_fallback_on_rank_collapse(five_tone_signal):
    x = five_tone_signal(300)
    with pytest.warns(DegenerateEmbedding):
        res = lowrankfilter(x, 20, lam=1e-8)

    np.testing.assert_array_equal(res.signal, 0.0)
    np.testing.assert_allclose(res.sparse_signal, x)


def test_unknown_fallback():
    with pytest.raises(ValueError):
        LowRankFilter(embedding_dim=10, degenerate_fallback="interpolate")


def test_verbose(five_tone_signal, capsys):
    lowrankfilter(five_tone_signal(300), 20, verbose=True)
    assert "[LowRankFilter] Completed in" in capsys.readouterr().out
