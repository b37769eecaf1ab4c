"""Tests for the HTTP API with dependencies overridden."""

from __future__ import annotations

import inspect
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from guardian.api.checks import run_project_checks
from guardian.config import GuardianConfig
from guardian.deps import get_config, get_evaluation_engine, get_ollama_client
from guardian.evaluator.engine import EvaluationEngine
from guardian.llm.hosts import OllamaHost, PingResult
from guardian.llm.ollama import OllamaError, OllamaModel
from guardian.main import app

CONFIG = GuardianConfig.from_toml(
    """\
[[ollama.hosts]]
name = "primary"
base_url = "http://primary:11434"

[[ollama.hosts]]
name = "backup"
base_url = "http://backup:11434"
fallback = true

[checks]
max_file_loc = 2
warn_file_loc = 1
"""
)


class FakeOllama:
    def __init__(self, up: set[str], models: dict[str, list[str]] | None = None) -> None:
        self._up = up
        self._models = models or {}

    async def probe(self, host: OllamaHost) -> PingResult:
        if host.name in self._up:
            return PingResult(host=host, reachable=True, latency_ms=3)
        return PingResult(host=host, reachable=False, error="refused")

    async def probe_all(self, hosts: list[OllamaHost]) -> list[PingResult]:
        return [await self.probe(h) for h in hosts]

    async def list_models(self, host: OllamaHost) -> list[OllamaModel]:
        if host.name not in self._up:
            raise OllamaError(f"Failed to connect to {host.name}: refused")
        return [OllamaModel(name=n) for n in self._models.get(host.name, [])]


@pytest.fixture
def client():
    fake = FakeOllama(up={"backup"}, models={"backup": ["llama3.2:3b"]})
    app.dependency_overrides[get_config] = lambda: CONFIG
    app.dependency_overrides[get_ollama_client] = lambda: fake
    app.dependency_overrides[get_evaluation_engine] = lambda: EvaluationEngine(
        fake, CONFIG.host_pool, CONFIG.checks
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestChecksApi:
    def test_list_checks(self, client: TestClient) -> None:
        resp = client.get("/api/checks")
        assert resp.status_code == 200
        assert resp.json()[0]["name"] == "rust-edition"

    def test_run_checks_uses_config_thresholds(self, client: TestClient, project: Path) -> None:
        resp = client.post("/api/checks", json={"path": str(project), "only": "loc-limits"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["errors"] == 1
        assert data["results"][0]["check_name"] == "loc-limits"

    def test_request_overrides(self, client: TestClient, project: Path) -> None:
        resp = client.post(
            "/api/checks",
            json={"path": str(project), "only": "loc-limits", "max_file_loc": 100, "warn_file_loc": 50},
        )
        assert resp.json()["summary"]["failed"] == 0

    def test_missing_path(self, client: TestClient, tmp_path: Path) -> None:
        resp = client.post("/api/checks", json={"path": str(tmp_path / "missing")})
        assert resp.status_code == 400

    def test_inconsistent_overrides_rejected(self, client: TestClient, project: Path) -> None:
        resp = client.post(
            "/api/checks",
            json={"path": str(project), "max_file_loc": 100, "warn_file_loc": 100},
        )
        assert resp.status_code == 422
        assert "warn_file_loc" in resp.json()["detail"]

    def test_scan_runs_in_threadpool(self) -> None:
        assert not inspect.iscoroutinefunction(run_project_checks)


class TestHostsApi:
    def test_ping(self, client: TestClient) -> None:
        data = client.get("/api/hosts/ping").json()
        assert [(h["name"], h["reachable"]) for h in data] == [("primary", False), ("backup", True)]
        assert data[1]["fallback"] is True

    def test_select(self, client: TestClient) -> None:
        resp = client.get("/api/hosts/select", params={"model": "llama3.2:3b"})
        assert resp.json() == {"name": "backup", "base_url": "http://backup:11434", "fallback": True}

    def test_select_missing_model(self, client: TestClient) -> None:
        resp = client.get("/api/hosts/select", params={"model": "nope"})
        assert resp.status_code == 404

    def test_models(self, client: TestClient) -> None:
        resp = client.get("/api/hosts/backup/models")
        assert resp.json() == {"host": "backup", "models": ["llama3.2:3b"]}

    def test_models_unknown_host(self, client: TestClient) -> None:
        assert client.get("/api/hosts/ghost/models").status_code == 404

    def test_models_unreachable_host(self, client: TestClient) -> None:
        assert client.get("/api/hosts/primary/models").status_code == 502


class TestEvaluateApi:
    def test_clean_project(self, client: TestClient, project: Path) -> None:
        resp = client.post("/api/evaluate", json={"path": str(project), "only": "rust-edition"})
        data = resp.json()
        assert resp.status_code == 200
        assert data["summary"]["failed"] == 0
        assert data["evaluation"] is None

    def test_missing_path(self, client: TestClient, tmp_path: Path) -> None:
        resp = client.post("/api/evaluate", json={"path": str(tmp_path / "missing")})
        assert resp.status_code == 400
