import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tfboot.experiments.runner import run_all


def main(matrix_yaml: str = str(ROOT / "configs" / "experiments.yaml"),
         datasets_yaml: str = str(ROOT / "configs" / "datasets.yaml")):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    rows = run_all(matrix_yaml=matrix_yaml, datasets_yaml=datasets_yaml)
    print(f"{len(rows)} runs written")


if __name__ == "__main__":
    main(*sys.argv[1:3])
