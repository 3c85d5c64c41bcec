import numpy as np
import pytest
from scipy import signal

from pyrobustid import (
    ARModel,
    InvalidDimension,
    TimeSeries,
    ar_psd,
    freq_response,
    magnitude_response,
    phase_response,
    response_error,
    welch_psd,
)


@pytest.fixture
def resonant_model():
    p = 0.95 * np.exp(0.6j)
    return ARModel.from_poles([p, np.conj(p)])


def test_matches_scipy_freqz(resonant_model, grid):
    _, h_ref = signal.freqz(resonant_model.num, resonant_model.den, worN=grid)
    np.testing.assert_allclose(freq_response(resonant_model, grid), h_ref, rtol=1e-10)
    np.testing.assert_allclose(resonant_model.frequency_response(grid), h_ref, rtol=1e-10)


def test_sample_time_scales_the_grid(resonant_model):
    slow = ARModel(den=resonant_model.den, num=resonant_model.num, dt=0.01)
    w = np.array([10.0, 60.0, 100.0])
    np.testing.assert_allclose(freq_response(slow, w), freq_response(resonant_model, w * 0.01))


def test_magnitude_and_phase(resonant_model, grid):
    mag = magnitude_response(resonant_model, grid)
    mag_db = magnitude_response(resonant_model, grid, db=True)
    np.testing.assert_allclose(mag_db, 20.0 * np.log10(mag))
    # resonance close to the pole angle
    assert abs(grid[np.argmax(mag)] - 0.6) < 0.05

    phase = phase_response(resonant_model, grid)
    assert np.all(np.abs(np.diff(phase)) < np.pi)
    wrapped = phase_response(resonant_model, grid, unwrap=False)
    assert np.all(np.abs(wrapped) <= np.pi)


def test_response_error(resonant_model, grid):
    assert response_error(resonant_model, resonant_model, grid) == 0.0

    gained = ARModel(den=resonant_model.den, num=2.0 * resonant_model.num)
    assert response_error(resonant_model, gained, grid) == pytest.approx(20.0 * np.log10(2.0))
    assert response_error(resonant_model, gained, grid, db=False) > 0.0


def test_empty_grid(resonant_model):
    with pytest.raises(InvalidDimension):
        freq_response(resonant_model, [])


def test_ar_psd_matches_welch(resonant_model, rng):
    n = 2 ** 16
    e = rng.standard_normal(n)
    y = TimeSeries(values=resonant_model.simulate(e), dt=1e-3)

    f, pxx = welch_psd(y, nperseg=1024)
    assert f[-1] == pytest.approx(500.0)

    model = ARModel(den=resonant_model.den, num=resonant_model.num, dt=y.dt)
    p_model = ar_psd(model, 2.0 * np.pi * f, noise_variance=1.0)

    band = (f > 20.0) & (f < 480.0)
    ratio_db = 10.0 * np.log10(pxx[band] / p_model[band])
    assert np.median(np.abs(ratio_db)) < 1.0


def test_welch_defaults():
    f, pxx = welch_psd(np.sin(np.arange(100)))
    assert f.size == pxx.size == 51
