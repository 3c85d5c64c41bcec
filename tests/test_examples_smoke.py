from __future__ import annotations
import os
from pathlib import Path
import importlib.util
import numpy as np

REPO = Path(__file__).resolve().parents[1]
EXAMPLES = REPO / "examples"

def load_module(path: Path):
    name = f"ex_{path.stem}_{abs(hash(str(path)))%10**8}"
    spec = importlib.util.spec_from_file_location(name, str(path))
    mod = importlib.util.module_from_spec(spec)
    assert spec and spec.loader
    spec.loader.exec_module(mod)  # type: ignore
    return mod

def test_examples_smoke():
    assert EXAMPLES.exists()

    os.environ["MPLBACKEND"] = "Agg"

    files = sorted(p for p in EXAMPLES.rglob("*.py") if p.is_file() and not p.name.startswith("_"))
    assert files, "No examples found"
    assert {p.name for p in files} >= {"robust_ar_estimation.py", "lowrank_filtering.py"}

    for p in files:
        mod = load_module(p)
        if not hasattr(mod, "main"):
            continue

        ret = mod.main(seed=0, plot=False)

        assert ret is not None
        if isinstance(ret, dict) and "errors_db" in ret:
            assert ret["errors_db"]
            for err in ret["errors_db"].values():
                err = np.asarray(err, dtype=float).ravel()
                assert err.size > 0
                assert np.isfinite(err).all()
