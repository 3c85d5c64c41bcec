# sweep.py
#
#       Parameter sweeps (noise level, embedding dimension, ...) over
#       independent pipeline runs. Points share no state, so they run on a
#       thread pool; numpy/LAPACK release the GIL inside the SVDs.

from __future__ import annotations

import concurrent.futures
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional

from pyrobustid.base import ConvergenceStatus
from pyrobustid.logging import get_logger
from pyrobustid._utils.progress import ProgressConfig, report_progress

__all__ = ["SweepPoint", "SweepResult", "sweep"]

logger = get_logger(__name__)


@dataclass
class SweepPoint:
    """Result of one sweep point and its status flag."""

    value: Hashable
    result: Any
    status: ConvergenceStatus
    runtime_ms: float


@dataclass
class SweepResult:
    """Sweep results keyed by sweep value, in the order the values were given."""

    points: Dict[Hashable, SweepPoint] = field(default_factory=dict)
    runtime_ms: float = 0.0

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, value: Hashable) -> Any:
        return self.points[value].result

    def __iter__(self):
        return iter(self.points)

    def values(self) -> List[Hashable]:
        return list(self.points.keys())

    def results(self) -> List[Any]:
        return [p.result for p in self.points.values()]

    def statuses(self) -> Dict[Hashable, ConvergenceStatus]:
        return {k: p.status for k, p in self.points.items()}

    def converged(self) -> List[Hashable]:
        return [k for k, p in self.points.items() if p.status is ConvergenceStatus.CONVERGED]

    def not_converged(self) -> List[Hashable]:
        return [k for k, p in self.points.items() if p.status is not ConvergenceStatus.CONVERGED]

    def __repr__(self) -> str:
        return f"<SweepResult points={len(self)} not_converged={len(self.not_converged())}>"


def _status_of(result: Any) -> ConvergenceStatus:
    status = getattr(result, "status", None)
    if isinstance(status, ConvergenceStatus):
        return status
    if isinstance(result, dict) and isinstance(result.get("status"), ConvergenceStatus):
        return result["status"]
    return ConvergenceStatus.CONVERGED


def _timed(func: Callable[[Any], Any], value: Any):
    tic = perf_counter()
    out = func(value)
    return out, (perf_counter() - tic) * 1000.0


def sweep(
    func: Callable[[Any], Any],
    values: Iterable[Hashable],
    max_workers: Optional[int] = None,
    verbose: bool = False,
    progress: Optional[ProgressConfig] = None,
) -> SweepResult:
    """
    Evaluate ``func(value)`` for every sweep value.

    Parameters
    ----------
    func : callable
        One pipeline run. Its result's ``status`` attribute (or ``"status"``
        key) is recorded; results without one count as CONVERGED.
    values : iterable of hashable
        Sweep values (noise levels, embedding dimensions, ...). Duplicates are
        evaluated once.
    max_workers : int, optional
        Thread pool size; ``1`` runs sequentially in the calling thread.
    verbose : bool
        If True, prints one progress line per completed point.

    Returns
    -------
    SweepResult
        Keyed by sweep value. A point that did not converge is recorded with
        its status and never aborts the sweep.

    Raises
    ------
    Exception
        Whatever ``func`` raises (e.g. InvalidDimension, InsufficientData)
        propagates; remaining points are cancelled.
    """
    keys = list(dict.fromkeys(values))
    cfg = progress if progress is not None else ProgressConfig(verbose_progress=verbose)
    t0 = perf_counter()
    done: Dict[Hashable, SweepPoint] = {}

    def _record(key, out, runtime_ms):
        status = _status_of(out)
        done[key] = SweepPoint(value=key, result=out, status=status, runtime_ms=runtime_ms)
        if status is not ConvergenceStatus.CONVERGED:
            logger.info("sweep point %r finished with status %s", key, status)
        report_progress(done=len(done), total=len(keys), t0=t0, key=key, status=status, cfg=cfg)

    if max_workers == 1:
        for key in keys:
            out, runtime_ms = _timed(func, key)
            _record(key, out, runtime_ms)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(_timed, func, key): key for key in keys}
            try:
                for future in concurrent.futures.as_completed(futures):
                    out, runtime_ms = future.result()
                    _record(futures[future], out, runtime_ms)
            except BaseException:
                for f in futures:
                    f.cancel()
                raise

    points = {key: done[key] for key in keys}
    return SweepResult(points=points, runtime_ms=(perf_counter() - t0) * 1000.0)
