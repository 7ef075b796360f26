from __future__ import annotations
import time
from typing import Optional

import numpy as np

from tfboot.bootstrap.aggregate import AggregatedResult, aggregate
from tfboot.bootstrap.engine import bootstrap_ci
from tfboot.data.base import Series
from tfboot.model.estimator import PosTrendFilter
from tfboot.model.solver import ConvexSolver, CvxpySolver
from .matrix import RunSpec


def make_solver(name: Optional[str]) -> ConvexSolver:
    return CvxpySolver(solver=name)


# ==== pos-TF point fit only (no bands) ====

def run_pos_tf_point(series: Series, spec: RunSpec) -> AggregatedResult:
    """Point fit through the estimator API; lower/upper are NaN since no replicates are drawn."""
    t0 = time.perf_counter()
    est = PosTrendFilter(order=spec.order, lam=spec.lam, solver=make_solver(spec.solver))
    alpha_hat = est.fit(series.keys, series.values).predict(None)
    nan = np.full(alpha_hat.size, np.nan)
    meta = {
        **est.info_,
        "name": series.name,
        "seed": spec.dataset_seed,
        "n": len(series),
        "n_replicates": 0,
        "n_effective": 0,
        "runtime_s": float(time.perf_counter() - t0),
    }
    return aggregate(est.keys_, series.values, alpha_hat, nan, nan, meta=meta)


# ==== pos-TF with bootstrap bands ====

def run_pos_tf_bootstrap(series: Series, spec: RunSpec) -> AggregatedResult:
    return bootstrap_ci(
        series,
        lam=spec.lam,
        order=spec.order,
        n_replicates=spec.n_replicates,
        confidence_level=spec.confidence_level,
        seed=spec.dataset_seed,
        solver=make_solver(spec.solver),
        n_workers=spec.n_workers,
        on_failure=spec.on_failure,
    )


METHODS = {
    "pos_tf": run_pos_tf_bootstrap,
    "pos_tf_point": run_pos_tf_point,
}


def method_switch(spec: RunSpec, series: Series) -> AggregatedResult:
    try:
        fn = METHODS[spec.method_key]
    except KeyError:
        raise ValueError(f"Unknown method key: {spec.method_key}") from None
    return fn(series, spec)
