"""Tests for the COR lookup endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.config import settings
from api.main import app


PREFIX = f"{settings.api_prefix}/cor"


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


class TestCORAPI:
    """Test suite for COR endpoints."""

    def test_list_elements(self, client):
        response = client.get(f"{PREFIX}/elements")

        assert response.status_code == 200
        elements = response.json()
        assert len(elements) == 14
        assert set(elements[0]) == {"number", "name", "description", "weight"}

    def test_questions(self, client):
        response = client.get(f"{PREFIX}/elements/2/questions")

        assert response.status_code == 200
        assert [q["id"] for q in response.json()] == ["2.1", "2.2", "2.3"]

    def test_required_forms(self, client):
        response = client.get(f"{PREFIX}/elements/10/required-forms")

        assert response.status_code == 200
        assert response.json()["element_number"] == 10
        assert "near_miss_report" in response.json()["required_forms"]

    @pytest.mark.parametrize("path", ["questions", "required-forms"])
    def test_unknown_element(self, client, path):
        assert client.get(f"{PREFIX}/elements/42/{path}").status_code == 404

    def test_match(self, client):
        """Test matching a form against one element."""
        response = client.post(f"{PREFIX}/elements/8/match", json={
            "form_title": "Toolbox Talk",
            "form_description": "Weekly safety meeting and training sign-in",
        })

        assert response.status_code == 200
        result = response.json()
        assert result["matches"]
        assert result["confidence"] == 90

    def test_match_unknown_element(self, client):
        response = client.post(f"{PREFIX}/elements/42/match", json={"form_title": "Anything"})

        assert response.status_code == 200
        assert response.json() == {"matches": False, "confidence": 0, "reasons": ["Unknown element number"]}

    def test_categories(self, client):
        response = client.get(f"{PREFIX}/categories")

        assert response.status_code == 200
        assert {"value": "other", "label": "Other/Custom"} in response.json()
