from __future__ import annotations
from pathlib import Path
from typing import List, Dict, Any
import json, gzip, pandas as pd


def _read_jsonl(path: Path) -> List[Dict[str, Any]]:
    op = gzip.open if str(path).endswith(".gz") else open
    with op(path, "rt", encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def load_runs_jsonl(path: str | Path) -> pd.DataFrame:
    """
    Load results/runs.jsonl(.gz) and return one flattened row per run.
    """
    recs: List[Dict[str, Any]] = []
    for r in _read_jsonl(Path(path)):
        base: Dict[str, Any] = {
            "dataset": r.get("dataset_key"),
            "method": r.get("method_key"),
            "n": r.get("n"),
            "order": r.get("order"),
            "timestamp": r.get("timestamp"),
        }
        for group, prefix in (("spec", "spec_"), ("metrics", "metric_"), ("meta", "meta_")):
            node = r.get(group)
            if isinstance(node, dict):
                for k, v in node.items():
                    if not isinstance(v, (list, dict)):
                        base[f"{prefix}{k}"] = v
        recs.append(base)
    return pd.DataFrame(recs)


def load_bands_jsonl(path: str | Path) -> pd.DataFrame:
    """Long table of per-index rows (key, observed, estimate, lower, upper) for every run."""
    frames = []
    for r in _read_jsonl(Path(path)):
        rows = r.get("rows")
        if not rows:
            continue
        df = pd.DataFrame.from_records(rows)
        df.insert(0, "method", r.get("method_key"))
        df.insert(0, "dataset", r.get("dataset_key"))
        df.insert(2, "repetition", (r.get("spec") or {}).get("repetition"))
        frames.append(df)
    if not frames:
        return pd.DataFrame(columns=["dataset", "method", "repetition", "key", "observed", "estimate", "lower", "upper"])
    return pd.concat(frames, ignore_index=True)
