#!/usr/bin/env python3
# summarise_results.py
# Usage:
#   python summarise_results.py --metrics ../results/metrics.csv [--write-csv]

import argparse
from pathlib import Path
from typing import List

import numpy as np
import pandas as pd

GROUP_BY = ["dataset_key", "method_label", "order", "lam"]
VALUE_COLS = ["mse", "mse_true", "coverage_true", "mean_band_width", "shape_violations", "runtime_s"]


def iqr(series: pd.Series) -> float:
    q1 = series.quantile(0.25)
    q3 = series.quantile(0.75)
    return float(q3 - q1)


def safe_read_csv(path: Path, kind: str) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"{kind} file not found: {path}")
    df = pd.read_csv(path)
    if df.empty:
        raise ValueError(f"{kind} file is empty: {path}")
    return df


def group_summaries(df: pd.DataFrame, group_by: List[str], value_cols: List[str]) -> pd.DataFrame:
    group_by = [c for c in group_by if c in df.columns]
    value_cols = [c for c in value_cols if c in df.columns]
    if not group_by or not value_cols:
        return pd.DataFrame()
    out = df.groupby(group_by, dropna=False)[value_cols].agg(["mean", "median", iqr, "count"])
    out.columns = [f"{c}_{f}" for c, f in out.columns]
    return out.reset_index()


def main():
    ap = argparse.ArgumentParser(description="Summarise metrics.csv by dataset/method.")
    ap.add_argument("--metrics", type=Path, default=Path("../results/metrics.csv"))
    ap.add_argument("--write-csv", action="store_true", help="write summaries/metrics_summary.csv")
    args = ap.parse_args()

    df = safe_read_csv(args.metrics, "metrics")
    summary = group_summaries(df, GROUP_BY, VALUE_COLS)
    with pd.option_context("display.width", 200, "display.max_columns", None):
        print(summary.replace({np.nan: None}).to_string(index=False))

    if args.write_csv:
        out = Path("summaries")
        out.mkdir(exist_ok=True)
        summary.to_csv(out / "metrics_summary.csv", index=False)
        print(f"wrote {out / 'metrics_summary.csv'}")


if __name__ == "__main__":
    main()
