import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tfboot import bootstrap_ci
from tfboot.registry import load_registry_from_yaml


def main(name: str = "synth_monotone", lam: float = 0.44, order: int = 1, n_replicates: int = 100):
    logging.basicConfig(level=logging.INFO, format="%(name)s | %(levelname)s | %(message)s")
    reg = load_registry_from_yaml(ROOT / "configs" / "datasets.yaml", seed=123)
    series = reg.load(name)
    res = bootstrap_ci(series, lam=float(lam), order=int(order), n_replicates=int(n_replicates), seed=123)
    print(res.to_frame().to_string(index=False, float_format=lambda v: f"{v: .4f}"))
    print(f"seed={res.meta['seed']}  R={res.meta['n_effective']}/{res.meta['n_replicates']}  z={res.meta['z']:.4f}")


if __name__ == "__main__":
    main(*sys.argv[1:5])
