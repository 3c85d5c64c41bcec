from time import perf_counter

import numpy as np

from pyrobustid import RobustPCA, StoppingCriterion, lag_embedding


def test_decomposition_cost_grows_polynomially_with_embedding_dim(five_tone_signal):
    """Fixed N, fixed iteration count: log(time) vs log(n) has a slope near [1, 2]."""
    x = five_tone_signal(4000)
    dims = np.array([50, 100, 200, 400])
    decomposer = RobustPCA(stopping=StoppingCriterion(max_iters=8, tol=0.0))

    times = []
    for n in dims:
        H = lag_embedding(x, int(n))
        best = np.inf
        for _ in range(3):
            tic = perf_counter()
            decomposer.decompose(H)
            best = min(best, perf_counter() - tic)
        times.append(best)

    slope = np.polyfit(np.log(dims), np.log(times), 1)[0]
    assert 0.9 < slope < 2.1
