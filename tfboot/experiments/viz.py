from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence, Union
import numpy as np

from tfboot.bootstrap.aggregate import AggregatedResult

ArrayLike = Union[np.ndarray, Sequence[float]]


def save_band_plot(result: AggregatedResult,
                   path_png: str | Path,
                   y_true: Optional[ArrayLike] = None,
                   title: Optional[str] = None,
                   dpi: int = 150) -> Path:
    """
    Save a PNG: scatter of observations vs key, red line for the estimate and a
    shaded pointwise band (skipped when the bounds are NaN).
    """
    # Headless-safe import
    import matplotlib
    try:
        # If a non-interactive backend is already set, leave it
        if matplotlib.get_backend().lower() not in ("agg", "module://matplotlib_inline.backend_inline"):
            matplotlib.use("Agg", force=True)
    except Exception:
        matplotlib.use("Agg", force=True)

    import matplotlib.pyplot as plt

    x = result.column("key")
    y = result.column("observed")
    y_hat = result.column("estimate")
    lower = result.column("lower")
    upper = result.column("upper")

    fig = plt.figure(figsize=(8, 3.5))
    ax = fig.add_subplot(111)
    ax.scatter(x, y, s=12, alpha=0.3, label="y", color="grey")

    if np.all(np.isfinite(lower)) and np.all(np.isfinite(upper)):
        level = result.meta.get("confidence_level")
        band_label = f"{100 * level:.0f}% band" if level else "band"
        ax.fill_between(x, lower, upper, color="red", alpha=0.15, linewidth=0, label=band_label)
    if y_true is not None:
        ax.plot(x, np.asarray(y_true, dtype=float).ravel(), linewidth=1.0, linestyle="--",
                color="black", label="ground truth")
    ax.plot(x, y_hat, linewidth=1.0, color="red", label="fit")

    if title:
        ax.set_title(title)
    ax.set_xlabel("key")
    ax.set_ylabel("y")
    ax.legend(loc="best", frameon=False)
    ax.grid(False)

    path_png = Path(path_png)
    path_png.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path_png, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path_png
