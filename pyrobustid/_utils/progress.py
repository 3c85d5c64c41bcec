# pyrobustid/_utils/progress.py
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any

__all__ = ["ProgressConfig", "report_progress"]


def _should_print(done: int, total: int, print_every: int) -> bool:
    """Print every N completed points and on last."""
    is_last = done >= int(total)
    pe = int(print_every)
    if pe <= 0:
        return is_last
    return is_last or (done % pe == 0)


@dataclass
class ProgressConfig:
    """
    Progress printing configuration for sweeps.

    Parameters
    ----------
    verbose_progress : bool
        If True, prints progress.
    print_every : int
        Print every `print_every` completed points (also prints on the last one).
    """
    verbose_progress: bool = True
    print_every: int = 1


def report_progress(
    *,
    done: int,
    total: int,
    t0: float,
    key: Any,
    status: Any,
    cfg: ProgressConfig,
    algo_tag: str = "Sweep",
) -> None:
    """
    Print a progress line for a sweep.

    Parameters
    ----------
    done : int
        Number of completed points (1-based).
    total : int
        Total number of points.
    t0 : float
        perf_counter() at the start of the sweep.
    key : Any
        Sweep value of the point that just completed.
    status : Any
        Status recorded for that point.
    """
    if not cfg.verbose_progress:
        return
    if not _should_print(done, total, cfg.print_every):
        return

    elapsed = perf_counter() - float(t0)
    eta = elapsed / float(done) * float(int(total) - done)

    print(
        f"[{algo_tag}] {done:>3}/{int(total)} | "
        f"value={key!s:>10} | status={status!s:<13} | "
        f"elapsed={elapsed:6.1f}s | ETA={eta:6.1f}s"
    )
