"""App-level tests: the health check, OpenAPI wiring, CORS and error shapes."""

from __future__ import annotations

import inspect
from typing import Any

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from redline import __version__
from redline.api.app import create_app


def test_health_reports_environment_and_version(monkeypatch: Any) -> None:
    from redline.core.settings import load_settings

    monkeypatch.setenv("REDLINE_ENV", "test")
    load_settings.cache_clear()

    with TestClient(create_app()) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "environment": "test", "version": __version__}


def test_startup_creates_plan_dir(plan_dir: Any) -> None:
    assert not plan_dir.exists()
    with TestClient(create_app()):
        assert plan_dir.is_dir()


def test_routes_are_mounted() -> None:
    paths = set(create_app().openapi()["paths"])

    assert {"/documents/parse", "/documents/export", "/documents/diff"} <= paths
    assert {"/markers/inject", "/share", "/share/decode"} <= paths
    assert "/plans/{slug}/versions" in paths


def test_cors_preflight_is_allowed() -> None:
    client = TestClient(create_app())
    resp = client.options(
        "/documents/parse",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )

    assert resp.status_code == 200
    assert "access-control-allow-origin" in resp.headers


def test_value_error_maps_to_400() -> None:
    client = TestClient(create_app())
    resp = client.post("/share/decode", json={"url": "https://x.test/#bm90LWRlZmxhdGU"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad Request"


def test_blocking_handlers_run_in_threadpool() -> None:
    routes = [r for r in create_app().routes if isinstance(r, APIRoute)]
    blocking = [r for r in routes if r.path.startswith("/plans") or r.path == "/documents/diff"]

    assert len(blocking) == 6
    for route in blocking:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path


def test_strip_has_its_own_response_model() -> None:
    strip = create_app().openapi()["paths"]["/markers/strip"]["post"]
    ok = strip["responses"]["200"]
    request = strip["requestBody"]

    schema_ref = ok["content"]["application/json"]["schema"]["$ref"]
    assert schema_ref.endswith("/MarkersStripResponse")
    assert request["content"]["application/json"]["schema"]["$ref"].endswith("/MarkdownRequest")
