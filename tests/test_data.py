"""Tests for Series, the data sources and the YAML registry."""

import textwrap

import numpy as np
import pytest

from tfboot.data import CsvSeries, GISTempAnnual, Series, SyntheticShape
from tfboot.errors import InvalidInput
from tfboot.registry import DataRegistry, load_registry_from_yaml

GISTEMP_TXT = """\
Land-Ocean Temperature Index (C)
--------------------------------

Year No_Smoothing  Lowess(5)
----------------------------
1880    -0.17   -0.10
1881    -0.09   -0.13
1882    -0.11   -0.17
1883    -0.17   -0.20
"""


def test_series_validation():
    """Tests length checks and strict/non-strict key ordering."""
    with pytest.raises(InvalidInput):
        Series(keys=[1, 2], values=[1.0])
    with pytest.raises(InvalidInput):
        Series(keys=[], values=[])
    s = Series(keys=[1, 1, 2], values=[0.0, 1.0, 2.0])
    s.validate(strict=False)
    with pytest.raises(InvalidInput):
        s.validate(strict=True)
    with pytest.raises(InvalidInput):
        Series(keys=[1, 2], values=[0.0, np.nan]).validate()


def test_series_access():
    """Tests len() and indexable (key, value) access."""
    s = Series.from_values([5.0, 6.0], start=2000)
    assert len(s) == 2
    assert s[1] == (2001.0, 6.0)


def test_gistemp_parser(tmp_path):
    """Tests that header lines are skipped and years become keys."""
    p = tmp_path / "nasa_temp.txt"
    p.write_text(GISTEMP_TXT, encoding="utf-8")
    s = GISTempAnnual(path=str(p)).load()
    np.testing.assert_array_equal(s.keys, [1880, 1881, 1882, 1883])
    np.testing.assert_allclose(s.values, [-0.17, -0.09, -0.11, -0.17])
    lo = GISTempAnnual(path=str(p), use_column="lowess", year_range=(1881, 1882)).load()
    np.testing.assert_allclose(lo.values, [-0.13, -0.17])
    assert lo.meta["years_span"] == (1881, 1882)


def test_gistemp_bad_column(tmp_path):
    p = tmp_path / "nasa_temp.txt"
    p.write_text(GISTEMP_TXT, encoding="utf-8")
    with pytest.raises(ValueError):
        GISTempAnnual(path=str(p), use_column="median").load()


def test_csv_series_sorts_and_drops_nan(tmp_path):
    """Tests the CSV loader."""
    p = tmp_path / "s.csv"
    p.write_text("year,value,other\n2002,3.0,x\n2000,1.0,y\n2001,,z\n", encoding="utf-8")
    s = CsvSeries(path=str(p)).load()
    np.testing.assert_array_equal(s.keys, [2000, 2002])
    np.testing.assert_array_equal(s.values, [1.0, 3.0])
    assert s.meta["rows_dropped"] == 1


@pytest.mark.parametrize("shape", ["monotone", "convex"])
def test_synthetic_is_seeded(shape):
    """Tests that synthetic sources are reproducible and carry the truth."""
    a = SyntheticShape(n=30, seed=4, shape=shape).load()
    b = SyntheticShape(n=30, seed=4, shape=shape).load()
    np.testing.assert_array_equal(a.values, b.values)
    assert a.meta["y_true"].shape == (30,)
    d = np.diff(a.meta["y_true"], n=1 if shape == "monotone" else 2)
    assert np.all(d >= -1e-12)


def test_registry_from_yaml(tmp_path):
    """Tests class import, relative path resolution and seed override."""
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "nasa_temp.txt").write_text(GISTEMP_TXT, encoding="utf-8")
    cfg = tmp_path / "datasets.yaml"
    cfg.write_text(textwrap.dedent("""\
        datasets:
          synth:
            cls: tfboot.data.synthetic.SyntheticShape
            params: {n: 12, sigma: 0.1}
          gistemp:
            cls: tfboot.data.gistemp.GISTempAnnual
            params: {path: data/nasa_temp.txt}
        """), encoding="utf-8")
    reg = load_registry_from_yaml(cfg, seed=3)
    assert set(reg.list()) == {"synth", "gistemp"}
    assert len(reg.load("gistemp")) == 4
    synth = reg.load("synth")
    assert synth.name == "synth" and synth.meta["seed"] == 3
    assert len(reg.load_with_params("synth", n=20)) == 20
    with pytest.raises(KeyError):
        reg.load("missing")


def test_registry_duplicate_name():
    reg = DataRegistry()
    reg.register_cls("a", SyntheticShape, n=5)
    with pytest.raises(KeyError):
        reg.register_cls("a", SyntheticShape, n=5)
