"""Pytest configuration and fixtures."""

import json
from pathlib import Path

import pytest

from bookshelf.catalog.store import Catalog

SAMPLE_DATA = Path(__file__).resolve().parents[1] / "bookshelf" / "data" / "books.json"


@pytest.fixture
def scenario_records():
    """Three books: two dated, one without a year."""
    return [
        {"title": "Zed", "year": "1990"},
        {"title": "Ann", "year": "1980"},
        {"title": "Mid", "year": None},
    ]


@pytest.fixture
def sample_records():
    with SAMPLE_DATA.open("r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def scenario_catalog(scenario_records):
    catalog = Catalog()
    catalog.load(scenario_records)
    return catalog


@pytest.fixture
def sample_catalog(sample_records):
    catalog = Catalog()
    catalog.load(sample_records)
    return catalog


@pytest.fixture
def books_file(tmp_path, sample_records):
    path = tmp_path / "books.json"
    path.write_text(json.dumps(sample_records), encoding="utf-8")
    return path
