from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
import yaml

from tfboot.errors import InvalidInput
from tfboot.bootstrap.engine import FAILURE_POLICIES

# Keys a method entry (or `defaults`) may set.
FIT_KEYS = ("order", "lam", "n_replicates", "confidence_level", "n_workers", "on_failure", "solver")


@dataclass
class RunSpec:
    dataset_key: str
    dataset_label: str
    dataset_seed: Optional[int]
    method_key: str
    method_label: str
    order: int
    lam: float
    n_replicates: int
    confidence_level: float
    repetition: int
    n_workers: Optional[int] = None
    on_failure: str = "abort"
    solver: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OutputSpec:
    dir: str = "results"
    overwrite: bool = False
    save_figs: bool = True
    figs_dir: str = "results/figs"
    fig_dpi: int = 150


def _fit_settings(node: Dict[str, Any], base: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k in FIT_KEYS:
        if k in node:
            out[k] = node[k]
    return out


def _check(settings: Dict[str, Any], where: str) -> None:
    if settings["on_failure"] not in FAILURE_POLICIES:
        raise InvalidInput(f"{where}: on_failure must be one of {FAILURE_POLICIES}, got {settings['on_failure']!r}")
    if int(settings["order"]) not in (1, 2):
        raise InvalidInput(f"{where}: order must be 1 or 2, got {settings['order']!r}")
    if float(settings["lam"]) < 0:
        raise InvalidInput(f"{where}: lam must be >= 0, got {settings['lam']!r}")
    if not (0.0 < float(settings["confidence_level"]) < 1.0):
        raise InvalidInput(f"{where}: confidence_level must lie in (0, 1)")


@dataclass
class ExperimentMatrix:
    runs: List[RunSpec]
    output: OutputSpec = field(default_factory=OutputSpec)

    @staticmethod
    def from_yaml(path: str) -> "ExperimentMatrix":
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        return ExperimentMatrix.from_dict(cfg)

    @staticmethod
    def from_dict(cfg: Dict[str, Any]) -> "ExperimentMatrix":
        defaults = cfg.get("defaults", {}) or {}
        base = _fit_settings(defaults, {
            "order": 1,
            "lam": 1.0,
            "n_replicates": 200,
            "confidence_level": 0.95,
            "n_workers": None,
            "on_failure": "abort",
            "solver": None,
        })
        reps_default = int(defaults.get("repetitions", 1))

        methods = cfg.get("methods", []) or [{"key": "pos_tf", "label": "pos-TF"}]
        runs: List[RunSpec] = []
        for ds in cfg.get("datasets", []):
            key = ds["name"]
            label = ds.get("label", key)
            reps = int(ds.get("repetitions", reps_default))
            seed0 = ds.get("seed")
            for r in range(1, reps + 1):
                # consecutive seeds per repetition keep every run reproducible
                seed = None if seed0 is None else int(seed0) + r - 1
                for m in methods:
                    mkey = m["key"]
                    settings = _fit_settings(m, base)
                    _check(settings, f"method '{mkey}'")
                    runs.append(RunSpec(
                        dataset_key=key,
                        dataset_label=label,
                        dataset_seed=seed,
                        method_key=mkey,
                        method_label=m.get("label", mkey),
                        order=int(settings["order"]),
                        lam=float(settings["lam"]),
                        n_replicates=int(settings["n_replicates"]),
                        confidence_level=float(settings["confidence_level"]),
                        repetition=r,
                        n_workers=None if settings["n_workers"] is None else int(settings["n_workers"]),
                        on_failure=str(settings["on_failure"]),
                        solver=settings["solver"],
                        params=m.get("params", {}) or {},
                    ))

        out_cfg = cfg.get("output", {}) or {}
        output = OutputSpec(
            dir=str(out_cfg.get("dir", "results")),
            overwrite=bool(out_cfg.get("overwrite", False)),
            save_figs=bool(out_cfg.get("save_figs", True)),
            figs_dir=str(out_cfg.get("figs_dir", "results/figs")),
            fig_dpi=int(out_cfg.get("fig_dpi", 150)),
        )
        return ExperimentMatrix(runs=runs, output=output)
