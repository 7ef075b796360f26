import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tfboot.registry import load_registry_from_yaml


def main(datasets_yaml: str = str(ROOT / "configs" / "datasets.yaml")):
    reg = load_registry_from_yaml(datasets_yaml)
    print('Registered datasets:')
    for name in reg.list():
        print(" -", name)


if __name__ == '__main__':
    main(*sys.argv[1:2])
