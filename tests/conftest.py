# tests/conftest.py

from __future__ import annotations

import numpy as np
import pytest

from pyrobustid import ARModel, TimeSeries
from pyrobustid._utils.noise import heavy_tailed_noise, scale_to_ratio, sinusoid_mixture


FIVE_TONES_HZ = (2000.0, 8000.0, 10000.0, 15000.0, 25000.0)
FS_HZ = 100_000.0


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def grid():
    """Angular frequency grid (rad/sample) that avoids the tone frequencies."""
    return np.linspace(0.0, np.pi, 512, endpoint=False)


@pytest.fixture
def five_tone_signal():
    """Five unit-amplitude sinusoids sampled at 100 kHz (rank-10 embeddings)."""
    def _make(n_samples: int = 2000) -> np.ndarray:
        return sinusoid_mixture(FIVE_TONES_HZ, FS_HZ, n_samples)

    return _make


@pytest.fixture
def two_tone_data():
    """
    Two sinusoids at 0.05 and 0.2 cycles/sample and the AR(4) model with
    poles on the unit circle at those frequencies.
    """
    n_samples = 4000
    freqs = np.array([0.05, 0.2])
    clean = sinusoid_mixture(freqs, 1.0, n_samples, phases=[0.3, 1.1])

    poles = np.concatenate([np.exp(2j * np.pi * freqs), np.exp(-2j * np.pi * freqs)])
    reference = ARModel.from_poles(poles)

    return {"clean": clean, "reference": reference, "na": 4, "n_samples": n_samples}


@pytest.fixture
def impulsive_noise():
    """Heavy-tailed (alpha = 1.5) noise scaled to a fraction of a reference std."""
    def _make(rng, reference: np.ndarray, ratio: float, alpha: float = 1.5) -> np.ndarray:
        noise = heavy_tailed_noise(rng, reference.size, alpha=alpha)
        return scale_to_ratio(noise, reference, ratio)

    return _make


@pytest.fixture
def arx_system_data(rng):
    """Noiseless ARX(2, 2) data with a stable denominator."""
    n_samples = 1500
    den = np.array([1.0, -1.2, 0.5])
    num = np.array([0.0, 0.8, 0.3])

    u = rng.standard_normal(n_samples)
    y = ARModel(den=den, num=num).simulate(u)

    return {"y": y, "u": u, "den": den, "num": num, "na": 2, "nb": 2}


@pytest.fixture
def series():
    return TimeSeries(values=np.sin(0.1 * np.arange(300)), dt=1e-3, name="tone")
