"""Pytest configuration for repository-relative imports and shared datasets."""

import os
import sys

import matplotlib
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

from maize.data_processing import load_observations  # noqa: E402

DARWIN_CSV = os.path.join(ROOT, "data", "darwin.csv")


@pytest.fixture
def darwin_csv():
    return DARWIN_CSV


@pytest.fixture
def darwin():
    return load_observations(DARWIN_CSV)


@pytest.fixture
def write_csv(tmp_path):
    """Write ``text`` to a CSV file under ``tmp_path`` and return its path."""

    def _write(text, name="observations.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
