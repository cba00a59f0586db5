# ============================================================================
# VERSIONS + HEALTH ROUTES TESTS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Tests - Own version discovery and Kubernetes probes
# PURPOSE: Verify /ocpi/versions, /ocpi/versions/{version}, /livez, /readyz
# CREATED: 18 OCT 2026
# ============================================================================
"""
Versions + Health Routes Tests

Run with:
    pytest tests/test_versions_routes.py -v
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.clock import FixedClock
from core.config import Config, OcpiConfig
from core.tokens import encode_authorization
from health import health_router, set_health_services
from main import create_app
from repositories import InMemoryPlatformRepository


NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# FIXTURES
# ============================================================================

def _make_test_app(base_path="/ocpi"):
    repo = InMemoryPlatformRepository()
    asyncio.run(repo.issue_token_a("A1"))
    asyncio.run(repo.save_server_token("https://partner.example.com/versions", "srv"))
    config = Config(ocpi=OcpiConfig(base_url="https://cpo.example.com", base_path=base_path))
    app = create_app(config=config, repo=repo, clock=FixedClock(NOW))
    return TestClient(app)


def _auth(token):
    return {"Authorization": encode_authorization(token)}


# ============================================================================
# VERSIONS
# ============================================================================

class TestVersions:
    """GET /ocpi/versions and /ocpi/versions/{version}."""

    def test_versions_with_token_a(self):
        client = _make_test_app()

        resp = client.get("/ocpi/versions", headers=_auth("A1"))

        assert resp.status_code == 200
        assert resp.json()["data"] == [
            {"version": "2.2.1", "url": "https://cpo.example.com/ocpi/versions/2.2.1"}
        ]

    def test_versions_with_server_token(self):
        client = _make_test_app()
        resp = client.get("/ocpi/versions", headers=_auth("srv"))
        assert resp.status_code == 200

    def test_versions_requires_token(self):
        client = _make_test_app()

        resp = client.get("/ocpi/versions")

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Token"

    def test_version_details(self):
        client = _make_test_app()

        resp = client.get("/ocpi/versions/2.2.1", headers=_auth("A1"))

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["version"] == "2.2.1"
        assert {(e["identifier"], e["role"]) for e in data["endpoints"]} == {
            ("credentials", "SENDER"),
            ("credentials", "RECEIVER"),
        }
        assert all(e["url"] == "https://cpo.example.com/ocpi/2.2.1/credentials" for e in data["endpoints"])

    def test_unsupported_version(self):
        client = _make_test_app()

        resp = client.get("/ocpi/versions/2.1.1", headers=_auth("A1"))

        assert resp.status_code == 404
        assert resp.json()["status_code"] == 2000

    def test_custom_base_path(self):
        client = _make_test_app(base_path="/emobility")

        resp = client.get("/emobility/versions/2.2.1", headers=_auth("A1"))

        assert resp.status_code == 200
        assert resp.json()["data"]["endpoints"][0]["url"] == (
            "https://cpo.example.com/emobility/2.2.1/credentials"
        )


# ============================================================================
# HEALTH
# ============================================================================

class TestHealth:
    """Kubernetes probes."""

    def test_livez(self):
        client = _make_test_app()
        resp = client.get("/livez")
        assert resp.status_code == 200
        assert resp.json()["status"] == "alive"

    def test_readyz(self):
        client = _make_test_app()
        resp = client.get("/readyz")
        assert resp.status_code == 200
        assert resp.json()["registry"] == "InMemoryPlatformRepository"

    def test_readyz_registry_down(self):
        repo = MagicMock()
        repo.ping = AsyncMock(return_value=False)
        app = FastAPI()
        app.include_router(health_router)
        set_health_services(repo)

        resp = TestClient(app).get("/readyz")

        assert resp.status_code == 503
        assert resp.json()["status"] == "not_ready"

    def test_readyz_not_initialized(self):
        app = FastAPI()
        app.include_router(health_router)
        set_health_services(None)

        resp = TestClient(app).get("/readyz")

        assert resp.status_code == 503

    def test_root(self):
        client = _make_test_app()
        resp = client.get("/")
        assert resp.json()["versions_url"] == "https://cpo.example.com/ocpi/versions"
