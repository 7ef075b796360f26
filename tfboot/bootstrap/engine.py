# tfboot/bootstrap/engine.py
from __future__ import annotations
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
from scipy.stats import norm

from tfboot.data.base import Series
from tfboot.errors import BootstrapFailed, InsufficientReplicates, InvalidInput, SolverError
from tfboot.model.formulate import default_solver, formulate_and_solve, validate_fit_params
from tfboot.model.solver import ConvexSolver
from .aggregate import AggregatedResult, aggregate
from .resample import resample

logger = logging.getLogger(__name__)

FAILURE_POLICIES = ("abort", "skip")


def _as_series(series: Union[Series, np.ndarray, list]) -> Series:
    if isinstance(series, Series):
        return series
    return Series.from_values(series)


def critical_value(confidence_level: float) -> float:
    """Two-sided normal critical value, e.g. 1.959964 for 0.95."""
    level = float(confidence_level)
    if not (0.0 < level < 1.0):
        raise InvalidInput(f"confidence_level must lie in (0, 1), got {confidence_level!r}")
    return float(norm.ppf(0.5 + 0.5 * level))


def check_replicates(n_replicates: int) -> int:
    if isinstance(n_replicates, bool) or not isinstance(n_replicates, (int, np.integer)):
        raise InvalidInput(f"n_replicates must be an integer, got {n_replicates!r}")
    if n_replicates < 1:
        raise InvalidInput(f"n_replicates must be positive, got {n_replicates}")
    if n_replicates < 2:
        raise InsufficientReplicates("at least 2 bootstrap replicates are needed to estimate a standard deviation")
    return int(n_replicates)


def resolve_workers(n_workers: Optional[int], n_tasks: int) -> int:
    """Pool size: requested (or cpu count) workers, capped by the number of tasks."""
    if n_workers is None:
        n_workers = os.cpu_count() or 1
    n_workers = int(n_workers)
    if n_workers < 1:
        raise InvalidInput(f"n_workers must be >= 1, got {n_workers}")
    return max(1, min(n_workers, n_tasks))


def make_rng(seed: Optional[int], rng: Optional[np.random.Generator]) -> Tuple[np.random.Generator, Optional[int]]:
    """Generator plus the seed to record. Fresh entropy is drawn (and returned) when neither is given."""
    if rng is not None:
        if seed is not None:
            raise InvalidInput("pass either seed or rng, not both")
        return rng, None
    if seed is None:
        ss = np.random.SeedSequence()
        return np.random.default_rng(ss), int(ss.entropy)
    return np.random.default_rng(seed), int(seed)


def bootstrap_ci(series: Union[Series, np.ndarray, list],
                 lam: float,
                 order: int,
                 n_replicates: int,
                 confidence_level: float = 0.95,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None,
                 solver: Optional[ConvexSolver] = None,
                 n_workers: Optional[int] = None,
                 on_failure: str = "abort") -> AggregatedResult:
    """
    Point fit plus normal-approximation pointwise bootstrap bands.

    All R resamples are drawn up front from a single generator, then refitted
    on a thread pool; each replicate owns one row of the (R, m) distribution,
    so the bands depend only on the seed, never on n_workers.

    on_failure="abort" raises BootstrapFailed for the lowest-indexed failed replicate.
    on_failure="skip" drops failed replicates and records them in
    meta["failed_replicates"] (meta["n_effective"] < n_replicates).
    """
    series = _as_series(series).validate(strict=True)
    R = check_replicates(n_replicates)
    z = critical_value(confidence_level)
    if on_failure not in FAILURE_POLICIES:
        raise InvalidInput(f"on_failure must be one of {FAILURE_POLICIES}, got {on_failure!r}")
    m = len(series)
    validate_fit_params(m, lam, order)
    order, lam = int(order), float(lam)
    solver = solver or default_solver()
    rng, seed_used = make_rng(seed, rng)

    t0 = time.perf_counter()
    try:
        point = formulate_and_solve(series, lam, order, solver)
    except SolverError as err:
        raise err.with_context(stage="point_fit")

    samples = [resample(series, rng) for _ in range(R)]
    dist = np.full((R, m), np.nan, dtype=float)
    failures: Dict[int, SolverError] = {}

    def _fit_replicate(r: int) -> None:
        try:
            dist[r] = formulate_and_solve(samples[r], lam, order, solver).estimate
        except SolverError as err:
            raise err.with_context(stage="replicate", replicate=r)

    workers = resolve_workers(n_workers, R)
    logger.info("bootstrap '%s': m=%d order=%d lam=%.4g R=%d workers=%d seed=%s",
                series.name, m, order, lam, R, workers, seed_used)

    if workers == 1:
        for r in range(R):
            try:
                _fit_replicate(r)
            except SolverError as err:
                failures[r] = err
                if on_failure == "abort":
                    break
    else:
        ex = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tfboot-replicate")
        try:
            futures = {ex.submit(_fit_replicate, r): r for r in range(R)}
            for fut in as_completed(futures):
                if fut.cancelled():
                    continue
                try:
                    fut.result()
                except SolverError as err:
                    failures[futures[fut]] = err
                    if on_failure == "abort":
                        # replicates below the first failure keep running; the lowest failing index is reported
                        first = min(failures)
                        for other, idx in futures.items():
                            if idx > first:
                                other.cancel()
        finally:
            ex.shutdown(wait=True, cancel_futures=True)

    if failures and on_failure == "abort":
        r = min(failures)
        raise BootstrapFailed(r, failures[r])

    ok = np.array(sorted(set(range(R)) - set(failures)), dtype=int)
    if failures:
        logger.warning("bootstrap '%s': %d of %d replicates failed and were skipped: %s",
                       series.name, len(failures), R, sorted(failures))
    if ok.size < 2:
        raise InsufficientReplicates(f"only {ok.size} of {R} replicates succeeded; need at least 2")

    std = dist[ok].std(axis=0, ddof=1)
    est = np.asarray(point.estimate, dtype=float)
    lower = est - z * std
    upper = est + z * std
    runtime = time.perf_counter() - t0

    meta: Dict[str, Any] = {
        "name": series.name,
        "seed": seed_used,
        "n": m,
        "order": order,
        "lam": lam,
        "n_replicates": R,
        "n_effective": int(ok.size),
        "failed_replicates": sorted(failures),
        "confidence_level": float(confidence_level),
        "z": z,
        "std": std.tolist(),
        "solver": point.solver,
        "n_workers": workers,
        "on_failure": on_failure,
        "runtime_s": float(runtime),
    }
    logger.info("bootstrap '%s' done in %.2fs (%d/%d replicates)", series.name, runtime, ok.size, R)
    return aggregate(series.keys, series.values, est, lower, upper, meta=meta)
