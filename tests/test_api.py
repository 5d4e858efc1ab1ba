# tests/test_api.py
"""
HTTP surface tests

204 for an accepted input, 422 for a rejected one, 400 for configuration
problems and 404 for unknown rules.
"""
import pytest
from fastapi.testclient import TestClient

from main import app


@pytest.fixture
def client():
    return TestClient(app)


class TestRuleListing:
    def test_lists_all_rules(self, client):
        response = client.get("/api/validation/rules")
        assert response.status_code == 200
        names = [rule["name"] for rule in response.json()["rules"]]
        assert "validate-email" in names
        assert names == sorted(names)

    def test_rule_parameters(self, client):
        rules = {r["name"]: r for r in client.get("/api/validation/rules").json()["rules"]}
        assert rules["validate-length"]["parameters"] == ["value", "min_value", "max_value", "failure_type"]

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestRunRule:
    def test_accepted_input(self, client):
        response = client.post(
            "/api/validation/validate-integer",
            json={"value": "150", "min_value": 100, "max_value": 200},
        )
        assert response.status_code == 204
        assert response.headers["X-Correlation-ID"]

    def test_rejected_input(self, client):
        response = client.post(
            "/api/validation/validate-integer",
            json={"value": "99", "min_value": 100, "max_value": 200},
        )
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "E2000_VALIDATION_GENERIC"
        assert error["failure_type"] == "core.validation.failures.InvalidInputError"
        assert error["rule"] == "validate-integer"

    def test_chosen_failure_type(self, client):
        response = client.post(
            "/api/validation/validate-email",
            json={"address": "nope", "failure_type": "ValueError"},
        )
        assert response.status_code == 422
        assert response.json()["error"]["failure_type"] == "builtins.ValueError"

    def test_collection_input(self, client):
        response = client.post("/api/validation/validate-not-empty", json={"value": []})
        assert response.status_code == 422
        response = client.post("/api/validation/validate-length", json={"value": [1, 2], "max_value": 2})
        assert response.status_code == 204

    def test_null_min_length_is_omitted(self, client):
        response = client.post(
            "/api/validation/validate-length",
            json={"value": "hello", "min_value": None, "max_value": 10},
        )
        assert response.status_code == 204
        response = client.post(
            "/api/validation/validate-length",
            json={"value": "hello", "min_value": None, "max_value": None},
        )
        assert response.status_code == 422

    def test_correlation_id_is_echoed(self, client):
        response = client.post(
            "/api/validation/validate-domain",
            json={"domain": "mulesoft.com"},
            headers={"X-Correlation-ID": "corr-123"},
        )
        assert response.headers["X-Correlation-ID"] == "corr-123"


class TestErrors:
    def test_unknown_rule(self, client):
        response = client.post("/api/validation/validate-nothing", json={})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "E8020_UNKNOWN_RULE"

    def test_unexpected_argument(self, client):
        response = client.post("/api/validation/validate-email", json={"address": "a@b.com", "nope": 1})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E8010_INVALID_OPTIONS"

    def test_missing_argument(self, client):
        response = client.post("/api/validation/validate-email", json={})
        assert response.status_code == 400

    def test_configuration_error(self, client):
        response = client.post(
            "/api/validation/validate-using-regex",
            json={"value": "abc", "regexs": ["("]},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E8013_INVALID_REGEX"

    def test_unknown_failure_type(self, client):
        response = client.post(
            "/api/validation/validate-email",
            json={"address": "nope", "failure_type": "no.such.Failure"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "E8001_UNKNOWN_FAILURE_TYPE"

    def test_body_must_be_an_object(self, client):
        response = client.post("/api/validation/validate-email", json=["a@b.com"])
        assert response.status_code == 400
