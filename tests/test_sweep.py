import numpy as np
import pytest

from pyrobustid import (
    ConvergenceStatus,
    Estimator,
    InvalidDimension,
    StoppingCriterion,
    estimate_ar,
    lowrankfilter,
    response_error,
    sweep,
)
from pyrobustid._utils.progress import ProgressConfig


def test_noise_level_sweep(two_tone_data, impulsive_noise, grid):
    clean = two_tone_data["clean"]
    reference = two_tone_data["reference"]

    def run(ratio):
        rng = np.random.default_rng(3)
        noisy = clean + impulsive_noise(rng, clean, ratio)
        return estimate_ar(noisy, two_tone_data["na"], Estimator.TLS)

    ratios = [1e-1, 1e-3, 1e-2]
    out = sweep(run, ratios, max_workers=3)

    assert out.values() == ratios
    assert len(out) == 3
    assert set(out.statuses().values()) == {ConvergenceStatus.CONVERGED}
    assert out.not_converged() == []
    for ratio in ratios:
        assert np.isfinite(response_error(reference, out[ratio].model, grid))
        assert out.points[ratio].runtime_ms >= 0.0


def test_non_convergence_is_recorded_per_point(five_tone_signal):
    x = five_tone_signal(400)

    def run(n):
        crit = StoppingCriterion(max_iters=10, tol=0.0) if n == 30 else None
        return lowrankfilter(x, n, stopping=crit)

    out = sweep(run, [20, 30, 40], max_workers=1)

    assert out.not_converged() == [30]
    assert out.converged() == [20, 40]
    assert out.statuses()[30] is ConvergenceStatus.NOT_CONVERGED
    assert out[30].iterations == 10


@pytest.mark.parametrize("max_workers", [1, None])
def test_structural_errors_propagate(five_tone_signal, max_workers):
    x = five_tone_signal(100)
    with pytest.raises(InvalidDimension):
        sweep(lambda n: lowrankfilter(x, n), [10, 200], max_workers=max_workers)


def test_duplicates_and_plain_results():
    out = sweep(lambda v: v * 2, [1, 2, 1, 3], max_workers=2)
    assert out.values() == [1, 2, 3]
    assert out.results() == [2, 4, 6]
    assert out.converged() == [1, 2, 3]


def test_status_from_dict_results():
    def run(v):
        status = ConvergenceStatus.NOT_CONVERGED if v > 1 else ConvergenceStatus.CONVERGED
        return {"value": v, "status": status}

    out = sweep(run, [1, 2])
    assert out.not_converged() == [2]


def test_verbose_progress(capsys):
    sweep(lambda v: v, [1, 2, 3], max_workers=1, verbose=True)
    lines = [l for l in capsys.readouterr().out.splitlines() if l.startswith("[Sweep]")]
    assert len(lines) == 3
    assert "3/3" in lines[-1]


def test_progress_print_every(capsys):
    sweep(lambda v: v, range(5), max_workers=1, progress=ProgressConfig(print_every=2))
    lines = [l for l in capsys.readouterr().out.splitlines() if l.startswith("[Sweep]")]
    # points 2, 4 and the last one
    assert len(lines) == 3
