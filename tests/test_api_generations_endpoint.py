import pytest
from fastapi.testclient import TestClient

from testgen.app import app
from testgen.config import load_provider_config
from testgen.errors import ConfigurationError
from testgen.providers.mock import MockProvider, UnconfiguredProvider

# import the orchestrator instance to monkeypatch its provider
from testgen import app as app_module
orchestrator = app_module.orchestrator  # the single instance created in testgen.app


class CannedProvider(MockProvider):
    def __init__(self, result=None, error=None):
        super().__init__(load_provider_config({"AI_PROVIDER": "mock"}))
        self.result = result
        self.error = error

    async def _complete(self, messages):
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def client():
    return TestClient(app)


def owner(name):
    return {"x-owner-id": name}


def test_create_success(monkeypatch, client):
    monkeypatch.setattr(orchestrator, "provider", CannedProvider(result="```js\nconst x=1;\n```"))
    r = client.post(
        "/api/generations",
        headers=owner("owner1"),
        json={"code": "function add(a,b){return a+b;}", "language": "JavaScript"},
    )
    assert r.status_code == 201
    j = r.json()
    assert j["status"] == "completed"
    assert j["generated_tests"] == "const x=1;"
    assert j["language"] == "javascript"
    assert j["owner_id"] == "owner1"


def test_create_with_default_mock_provider(client):
    r = client.post("/api/generations", json={"code": "x = 1", "language": "python"})
    assert r.status_code == 201
    assert r.json()["owner_id"] == "anonymous"


def test_blank_code_is_400(monkeypatch, client):
    monkeypatch.setattr(orchestrator, "provider", CannedProvider(result="t"))
    r = client.post("/api/generations", headers=owner("owner1"), json={"code": "   ", "language": "python"})
    assert r.status_code == 400
    j = r.json()
    assert j["error_code"] == "E_VALIDATION"
    assert j["message"] == "Code cannot be blank."
    assert client.get("/api/generations", headers=owner("owner1")).json() == []


def test_oversized_code_is_400(client):
    r = client.post("/api/generations", json={"code": "x" * 50_001, "language": "python"})
    assert r.status_code == 400


def test_language_over_64_chars_is_422(client):
    r = client.post("/api/generations", json={"code": "x = 1", "language": "p" * 65})
    assert r.status_code == 422


def test_missing_field_is_422(client):
    r = client.post("/api/generations", json={"code": "x = 1"})
    assert r.status_code == 422


def test_provider_failure_is_503_and_record_failed(monkeypatch, client):
    monkeypatch.setattr(orchestrator, "provider", CannedProvider(error=ConnectionError("unreachable")))
    r = client.post("/api/generations", headers=owner("owner1"), json={"code": "x=1", "language": "python"})
    assert r.status_code == 503
    assert r.json()["error_code"] == "E_UPSTREAM"

    rows = client.get("/api/generations", headers=owner("owner1")).json()
    assert len(rows) == 1
    assert rows[0]["status"] == "failed"
    assert rows[0]["generated_tests"] is None


def test_unconfigured_provider_is_503(monkeypatch, client):
    error = ConfigurationError("DEEPSEEK_API_KEY is required when AI_PROVIDER=deepseek.")
    monkeypatch.setattr(orchestrator, "provider", UnconfiguredProvider(error))
    r = client.post("/api/generations", json={"code": "x=1", "language": "python"})
    assert r.status_code == 503
    assert r.json()["error_code"] == "E_CONFIGURATION"


def test_list_and_get_are_owner_scoped(monkeypatch, client):
    monkeypatch.setattr(orchestrator, "provider", CannedProvider(result="t"))
    first = client.post("/api/generations", headers=owner("owner1"), json={"code": "a", "language": "go"}).json()
    client.post("/api/generations", headers=owner("owner2"), json={"code": "b", "language": "go"})
    second = client.post("/api/generations", headers=owner("owner1"), json={"code": "c", "language": "go"}).json()

    rows = client.get("/api/generations", headers=owner("owner1")).json()
    assert [row["id"] for row in rows] == [second["id"], first["id"]]

    r = client.get(f"/api/generations/{first['id']}", headers=owner("owner1"))
    assert r.status_code == 200
    assert r.json()["input_code"] == "a"

    foreign = client.get(f"/api/generations/{first['id']}", headers=owner("owner2"))
    missing = client.get("/api/generations/nonexistent-id", headers=owner("owner2"))
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()
    assert foreign.json()["error_code"] == "E_NOT_FOUND"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
