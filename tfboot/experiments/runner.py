from __future__ import annotations
import csv
import logging
import time
from pathlib import Path
from typing import Dict, Any, List

from tfboot.registry import load_registry_from_yaml
from .matrix import ExperimentMatrix
from .methods import method_switch
from .metrics import compute_metrics
from .results_writer import write_run_entry
from .viz import save_band_plot

logger = logging.getLogger(__name__)

METRICS_HEADER = [
    "dataset_key", "dataset_label", "method_key", "method_label", "repetition", "seed",
    "n", "order", "lam", "n_replicates", "n_effective", "confidence_level",
    "mse", "mae", "mse_true", "coverage_true", "mean_band_width", "shape_violations", "runtime_s",
]


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _unique_path(base: Path) -> Path:
    """If base exists, add suffix -1, -2, ... to avoid overwrite."""
    if not base.exists():
        return base
    stem, suf = base.stem, base.suffix
    parent = base.parent
    k = 1
    while True:
        cand = parent / f"{stem}-{k}{suf}"
        if not cand.exists():
            return cand
        k += 1


def _fmt(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, float):
        return f"{v:.6g}"
    return str(v)


def run_all(matrix_yaml: str,
            datasets_yaml: str,
            output_dir: str | None = None,
            overwrite: bool | None = None,
            save_figs: bool | None = None,
            figs_dir: str | None = None,
            fig_dpi: int | None = None) -> List[Dict[str, Any]]:
    """
    Run every (dataset, method, repetition) in the matrix and append results to
    <output_dir>/metrics.csv and <output_dir>/runs.jsonl.

    Arguments left as None fall back to the matrix's `output` block.
    Returns the metric rows written, in run order.
    """
    mat = ExperimentMatrix.from_yaml(matrix_yaml)
    out = mat.output
    out_dir = Path(output_dir if output_dir is not None else out.dir).resolve()
    overwrite = out.overwrite if overwrite is None else overwrite
    save_figs = out.save_figs if save_figs is None else save_figs
    figs_root = Path(figs_dir if figs_dir is not None else out.figs_dir).resolve()
    fig_dpi = out.fig_dpi if fig_dpi is None else fig_dpi
    _ensure_dir(out_dir)

    metrics_path = out_dir / "metrics.csv"
    runs_path = out_dir / "runs.jsonl"

    if overwrite:
        for p in (metrics_path, runs_path):
            if p.exists():
                p.unlink()

    if not metrics_path.exists():
        with metrics_path.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(METRICS_HEADER)

    logger.info("Total runs needed: %d", len(mat.runs))

    written: List[Dict[str, Any]] = []
    for i, spec in enumerate(mat.runs, start=1):
        t_run = time.perf_counter()
        reg = load_registry_from_yaml(datasets_yaml, spec.dataset_seed)
        series = reg.load(spec.dataset_key).validate(strict=True)
        y_true = series.meta.get("y_true")

        logger.info("[%d/%d] %s | %s | r=%d: n=%d order=%d lam=%g R=%d",
                    i, len(mat.runs), spec.dataset_label, spec.method_label, spec.repetition,
                    len(series), spec.order, spec.lam, spec.n_replicates)

        result = method_switch(spec, series)
        m = compute_metrics(result, spec.order, y_true=y_true)

        row = {
            "dataset_key": spec.dataset_key,
            "dataset_label": spec.dataset_label,
            "method_key": spec.method_key,
            "method_label": spec.method_label,
            "repetition": spec.repetition,
            "seed": result.meta.get("seed"),
            "n": len(result),
            "order": spec.order,
            "lam": spec.lam,
            "n_replicates": result.meta.get("n_replicates"),
            "n_effective": result.meta.get("n_effective"),
            "confidence_level": spec.confidence_level,
            "mse": m["mse"],
            "mae": m["mae"],
            "mse_true": m.get("mse_true"),
            "coverage_true": m.get("coverage_true"),
            "mean_band_width": m["mean_band_width"],
            "shape_violations": m["shape_violations"],
            "runtime_s": m["runtime_s"],
        }
        with metrics_path.open("a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow([_fmt(row[k]) for k in METRICS_HEADER])

        fig_path = None
        if save_figs:
            png = figs_root / f"{spec.dataset_key}__{spec.method_key}__o{spec.order}__r{spec.repetition}.png"
            if not overwrite:
                png = _unique_path(png)
            title = f"{spec.dataset_label} • {spec.method_label} • lam={spec.lam:g}"
            fig_path = str(save_band_plot(result, png, y_true=y_true, title=title, dpi=fig_dpi))

        write_run_entry(runs_path, spec, result, m, fig_path=fig_path)
        written.append(row)

        logger.info("[%d/%d] %s | %s | r=%d -> mse=%.4g width=%.4g viol=%d time=%.3fs",
                    i, len(mat.runs), spec.dataset_label, spec.method_label, spec.repetition,
                    m["mse"], m["mean_band_width"], m["shape_violations"], time.perf_counter() - t_run)
    return written
