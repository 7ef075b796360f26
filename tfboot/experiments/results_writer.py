from __future__ import annotations
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
import json, gzip, time

import numpy as np

from tfboot.bootstrap.aggregate import AggregatedResult
from .matrix import RunSpec


def _jsonable(v: Any) -> Any:
    if isinstance(v, np.ndarray):
        return v.tolist()
    if isinstance(v, (np.floating, np.integer)):
        return v.item()
    if isinstance(v, Mapping):
        return {str(k): _jsonable(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    return v


def _now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _open_maybe_gzip(path: Path):
    if str(path).endswith(".gz"):
        return gzip.open(path, mode="at", encoding="utf-8")
    return open(path, mode="a", encoding="utf-8")


def write_run_entry(
    path_jsonl: Union[str, Path],
    spec: RunSpec,
    result: AggregatedResult,
    metrics: Mapping[str, float],
    *,
    fig_path: Optional[str] = None,
    include_rows: bool = True,
) -> None:
    """
    Append one JSON object per run to results/runs.jsonl(.gz).
    NaN values (e.g. bounds of a point-only fit) are written as null.
    """
    path = Path(path_jsonl)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload: Dict[str, Any] = {
        "timestamp": _now_iso(),
        "spec": asdict(spec),
        "dataset_key": spec.dataset_key,
        "method_key": spec.method_key,
        "n": len(result),
        "order": int(spec.order),
        "metrics": dict(metrics),
        "meta": {k: v for k, v in result.meta.items() if k != "std"},
    }
    if include_rows:
        payload["rows"] = result.to_records()
        payload["std"] = result.meta.get("std")
    if fig_path is not None:
        payload["fig_path"] = fig_path

    payload = _nan_to_none(_jsonable(payload))
    with _open_maybe_gzip(path) as f:
        f.write(json.dumps(payload, separators=(",", ":")) + "\n")


def _nan_to_none(v: Any) -> Any:
    if isinstance(v, float) and not np.isfinite(v):
        return None
    if isinstance(v, dict):
        return {k: _nan_to_none(x) for k, x in v.items()}
    if isinstance(v, list):
        return [_nan_to_none(x) for x in v]
    return v
