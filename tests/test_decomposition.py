import logging

import numpy as np
import pytest

from pyrobustid import (
    ConvergenceStatus,
    DegenerateEmbedding,
    InvalidDimension,
    RobustPCA,
    StoppingCriterion,
    lag_embedding,
    rpca,
    singular_value_threshold,
    soft_threshold,
)


def test_soft_threshold():
    X = np.array([-3.0, -0.5, 0.0, 0.2, 2.0])
    np.testing.assert_allclose(soft_threshold(X, 1.0), [-2.0, 0.0, 0.0, 0.0, 1.0])


def test_singular_value_threshold_drops_small_directions(rng):
    U, _ = np.linalg.qr(rng.standard_normal((20, 4)))
    V, _ = np.linalg.qr(rng.standard_normal((8, 4)))
    X = U @ np.diag([10.0, 5.0, 0.5, 0.1]) @ V.T

    Y, rank = singular_value_threshold(X, 1.0)
    assert rank == 2
    np.testing.assert_allclose(np.linalg.svd(Y, compute_uv=False)[:3], [9.0, 4.0, 0.0], atol=1e-10)


def test_additivity_after_convergence(five_tone_signal, rng):
    x = five_tone_signal(1000)
    x[rng.choice(x.size, 20, replace=False)] += 5.0
    H = lag_embedding(x, 60)

    crit = StoppingCriterion(max_iters=500, tol=1e-6)
    res = RobustPCA(stopping=crit).decompose(H)

    assert res.status is ConvergenceStatus.CONVERGED
    rel = np.linalg.norm(res.low_rank + res.sparse - H) / np.linalg.norm(H)
    assert rel <= crit.tol
    assert res.residual == pytest.approx(rel)
    assert res.lam == pytest.approx(1.0 / np.sqrt(H.shape[0]))


def test_low_rank_property(five_tone_signal, rng):
    x = five_tone_signal(2000) + 1e-3 * rng.standard_normal(2000)
    H = lag_embedding(x, 100)

    res = rpca(H)

    assert res.status is ConvergenceStatus.CONVERGED
    assert abs(res.numerical_rank(1e-2) - 10) <= 2
    assert res.numerical_rank(1e-2) < min(H.shape) // 4


def test_recovers_sparse_spikes(five_tone_signal):
    x = five_tone_signal(1000)
    spiky = x.copy()
    spiky[[100, 400, 700]] += [8.0, -6.0, 7.0]
    H_clean = lag_embedding(x, 60)

    res = rpca(lag_embedding(spiky, 60), stopping=StoppingCriterion(tol=1e-6))

    err = np.linalg.norm(res.low_rank - H_clean) / np.linalg.norm(H_clean)
    assert err < 1e-2


def test_not_converged_is_reported_not_raised(five_tone_signal, caplog):
    H = lag_embedding(five_tone_signal(500), 40)

    with caplog.at_level(logging.WARNING, logger="pyrobustid"):
        res = RobustPCA(stopping=StoppingCriterion(max_iters=10, tol=0.0)).decompose(H)

    assert res.status is ConvergenceStatus.NOT_CONVERGED
    assert not res.converged
    assert res.iterations == 10
    assert np.isfinite(res.residual)
    assert any("did not converge" in r.getMessage() for r in caplog.records)


def test_zero_matrix_is_degenerate():
    H = np.zeros((30, 5))
    with pytest.warns(DegenerateEmbedding):
        res = rpca(H)

    assert res.status is ConvergenceStatus.DEGENERATE
    assert res.rank == 0
    np.testing.assert_array_equal(res.low_rank, 0.0)
    np.testing.assert_array_equal(res.sparse, H)


def test_rank_collapse_is_degenerate(five_tone_signal):
    H = lag_embedding(five_tone_signal(400), 30)
    with pytest.warns(DegenerateEmbedding):
        res = RobustPCA(lam=1e-8).decompose(H)

    assert res.status is ConvergenceStatus.DEGENERATE
    np.testing.assert_array_equal(res.low_rank, 0.0)
    np.testing.assert_allclose(res.sparse, H)


def test_verbose_prints_runtime(five_tone_signal, capsys):
    rpca(lag_embedding(five_tone_signal(300), 20), verbose=True)
    assert "[RobustPCA] Completed in" in capsys.readouterr().out


@pytest.mark.parametrize("kwargs", [{"lam": 0.0}, {"rho": 1.0}, {"mu": -1.0}])
def test_parameter_validation(kwargs):
    with pytest.raises(ValueError):
        RobustPCA(**kwargs)


def test_input_validation():
    with pytest.raises(InvalidDimension):
        rpca(np.ones(5))
    with pytest.raises(InvalidDimension):
        rpca(np.ones((0, 3)))
    with pytest.raises(TypeError):
        rpca(np.ones((4, 3)) * 1j)
    with pytest.raises(ValueError):
        rpca(np.full((4, 3), np.nan))
