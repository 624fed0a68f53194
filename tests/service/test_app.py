"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient  # noqa: E402

from a11ylint.engine import ScanEngine  # noqa: E402
from a11ylint.service.app import create_app  # noqa: E402


@pytest.fixture
def client(registry) -> TestClient:
    engine = ScanEngine(registry=registry)
    return TestClient(create_app(lambda: engine))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_checks_endpoint_filters_by_tier(client: TestClient) -> None:
    response = client.get("/checks", params={"tier": "basic"})
    assert response.status_code == 200
    ids = {item["id"] for item in response.json()}
    assert "image-alt" in ids
    assert "prefers-reduced-motion" not in ids


def test_checks_endpoint_rejects_unknown_tier(client: TestClient) -> None:
    response = client.get("/checks", params={"tier": "extended"})
    assert response.status_code == 400


def test_scan_endpoint_returns_report(client: TestClient, source_builder) -> None:
    source_builder.write({"app/home.html": '<img src="hero.png">'})

    response = client.post("/scan", json={"path": str(source_builder.path()), "tier": "basic"})

    assert response.status_code == 200
    data = response.json()
    assert data["tier"] == "basic"
    assert data["units"][0]["unit_id"] == "app/home"
    assert data["units"][0]["issues"][0]["check_id"] == "image-alt"


def test_scan_endpoint_missing_path(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/scan", json={"path": str(tmp_path / "missing")})
    assert response.status_code == 404
