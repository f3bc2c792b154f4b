"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

import main
from config import APP_CONFIG


@pytest.fixture
def client():
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture
def percent_rows(percent_table):
    return percent_table.to_dict("records")


class TestHealth:
    """Test service endpoints."""

    def test_health(self, client):
        """Test the health check."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.headers["X-Execution-Time"]

    def test_figure_types(self, client):
        """Test template discovery."""
        response = client.get("/figure-types")
        kinds = [entry["figure_kind"] for entry in response.json()["figure_types"]]

        assert response.status_code == 200
        assert "stacked_percent" in kinds


class TestRenderEndpoint:
    """Test POST /render."""

    def test_render(self, client, percent_rows):
        """Test rendering a type-2 table."""
        response = client.post("/render", json={"rows": percent_rows})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["figure_kind"] == "stacked_percent"
        assert body["figure"]["layout"]["separators"] == ",."

    def test_style_override(self, client, percent_rows):
        """Test English number formatting on request."""
        response = client.post(
            "/render",
            json={"rows": percent_rows, "style": {"decimal_mark": ".", "big_mark": ","}}
        )
        assert response.json()["description"]["separators"] == ".,"

    def test_unknown_style_field(self, client, percent_rows):
        """Test unknown style fields are rejected."""
        response = client.post("/render", json={"rows": percent_rows, "style": {"colour": "red"}})
        assert response.status_code == 400

    def test_unsupported_combination(self, client, percent_rows):
        """Test figure errors map to 400 with their type."""
        percent_rows[0]["figure_type_id"] = 1
        response = client.post("/render", json={"rows": percent_rows})

        assert response.status_code == 400
        assert response.json()["error_type"] == "UnsupportedCombination"

    def test_missing_tag_column(self, client):
        """Test tables without figure type column."""
        response = client.post("/render", json={"rows": [{"x": "a", "y": 1, "fill": "b"}]})

        assert response.status_code == 400
        assert response.json()["error_type"] == "ConfigurationError"

    def test_no_rows(self, client):
        """Test an empty row list is reported as empty input."""
        response = client.post("/render", json={"rows": []})

        assert response.status_code == 400
        assert response.json()["error_type"] == "EmptyInput"

    def test_too_many_rows(self, client, percent_rows, monkeypatch):
        """Test the row limit."""
        monkeypatch.setitem(APP_CONFIG, "max_rows", 2)
        response = client.post("/render", json={"rows": percent_rows})
        assert response.status_code == 413


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
