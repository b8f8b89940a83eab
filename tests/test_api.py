"""Tests for the HTTP surface."""
import pytest
from fastapi.testclient import TestClient

from bookshelf.config import Config
from bookshelf.main import create_app


@pytest.fixture
def client(books_file):
    app = create_app(Config(data_source=str(books_file), cover_prefix="static/"))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def broken_client(tmp_path):
    app = create_app(Config(data_source=str(tmp_path / "missing.json")))
    with TestClient(app) as client:
        yield client


def test_health(client, sample_records):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "loaded": True, "total": len(sample_records)}


def test_list_books(client, sample_records):
    data = client.get("/api/catalog/books").json()
    assert data["state"] == "loaded"
    assert data["sort"] == "title"
    assert data["display_count"] == data["total_count"] == len(sample_records)
    assert data["items"][0]["title"] == sample_records[0]["title"]
    assert data["items"][0]["cover_url"] == "static/" + sample_records[0]["imageLink"]


def test_commands_endpoint(client):
    response = client.post(
        "/api/catalog/commands",
        json={"type": "set_year_range", "min_year": 1900, "max_year": ""},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["state"] == "filtered"
    assert all(item["year"] >= 1900 for item in data["items"])

    data = client.post("/api/catalog/commands", json={"type": "set_sort", "criterion": "year"}).json()
    years = [item["year"] for item in data["items"]]
    assert years == sorted(years)

    data = client.post("/api/catalog/commands", json={"type": "reset"}).json()
    assert data["display_count"] == data["total_count"]
    assert data["sort"] == "title"
    assert data["min_year"] is None


def test_commands_endpoint_rejects_unknown_type(client):
    response = client.post("/api/catalog/commands", json={"type": "delete_everything"})
    assert response.status_code == 422


def test_languages(client):
    languages = client.get("/api/catalog/languages").json()
    assert "Spanish" in languages
    assert "All" not in languages


def test_catalog_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Things Fall Apart" in response.text


def test_load_failure_is_reported(broken_client):
    assert broken_client.get("/health").json()["loaded"] is False
    assert broken_client.get("/api/catalog/books").status_code == 503
    assert "Error loading book data" in broken_client.get("/").text


def test_malformed_data_source_serves_error_state():
    app = create_app(Config(data_source="http://[::1/x"))
    with TestClient(app) as client:
        assert client.get("/health").json()["loaded"] is False
        assert client.get("/api/catalog/books").status_code == 503
