# ============================================================================
# CREDENTIALS ROUTES TESTS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Tests - Inbound credentials module, end to end
# PURPOSE: Verify POST / GET / PUT / DELETE /credentials against a fake partner
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials Routes Tests

Drives the full application (create_app with an in-memory registry) through
FastAPI TestClient. The partner platform is an httpx.MockTransport that
serves version discovery documents, so negotiation runs for real.

Run with:
    pytest tests/test_credentials_routes.py -v
"""

import asyncio
from datetime import datetime, timezone

import httpx
from fastapi.testclient import TestClient

from core.clock import FixedClock
from core.config import Config, OcpiConfig
from core.contracts import RegistrationState
from core.tokens import decode_authorization, encode_authorization
from main import create_app
from repositories import InMemoryPlatformRepository


NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
TIMESTAMP = "2026-10-18T12:00:00Z"

OWN_BASE_URL = "https://cpo.example.com"
OWN_VERSIONS_URL = "https://cpo.example.com/ocpi/versions"
CREDENTIALS_PATH = "/ocpi/2.2.1/credentials"

PARTNER_VERSIONS_URL = "https://partner.example.com/ocpi/versions"
PARTNER_DETAILS_URL = "https://partner.example.com/ocpi/2.2.1"
PARTNER_CREDENTIALS_URL = "https://partner.example.com/ocpi/2.2.1/credentials"


# ============================================================================
# FIXTURES
# ============================================================================

def _envelope(data, status_code=1000, message="Success"):
    return {
        "data": data,
        "status_code": status_code,
        "status_message": message,
        "timestamp": TIMESTAMP,
    }


class FakePartner:
    """Partner platform serving its discovery documents over MockTransport."""

    def __init__(self, versions=("2.2.1",)):
        self.versions = list(versions)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url == PARTNER_VERSIONS_URL:
            return httpx.Response(200, json=_envelope([
                {"version": v, "url": f"https://partner.example.com/ocpi/{v}"}
                for v in self.versions
            ]))
        if url == PARTNER_DETAILS_URL:
            return httpx.Response(200, json=_envelope({
                "version": "2.2.1",
                "endpoints": [
                    {"identifier": "credentials", "role": "SENDER", "url": PARTNER_CREDENTIALS_URL},
                    {"identifier": "credentials", "role": "RECEIVER", "url": PARTNER_CREDENTIALS_URL},
                ],
            }))
        return httpx.Response(404, json=_envelope(None, 2000, "Not found"))

    def tokens_seen(self):
        return [decode_authorization(r.headers["Authorization"]) for r in self.requests]


def _make_test_app(partner=None, repo=None):
    """Create the application wired to an in-memory registry and a fake partner."""
    repo = repo or InMemoryPlatformRepository()
    partner = partner or FakePartner()
    config = Config(ocpi=OcpiConfig(base_url=OWN_BASE_URL))
    app = create_app(
        config=config,
        repo=repo,
        clock=FixedClock(NOW),
        transport=httpx.MockTransport(partner.handler),
    )
    return TestClient(app), repo, partner


def _auth(token):
    return {"Authorization": encode_authorization(token)}


def _partner_credentials(token="partner-token-b", url=PARTNER_VERSIONS_URL):
    return {
        "token": token,
        "url": url,
        "roles": [
            {
                "role": "CPO",
                "party_id": "ABC",
                "country_code": "FR",
                "business_details": {"name": "Partner Charging"},
            }
        ],
    }


def _register(client, repo, token_a="A1"):
    """Complete a registration and return the issued server token."""
    asyncio.run(repo.issue_token_a(token_a))
    resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth(token_a))
    assert resp.status_code == 200
    return resp.json()["data"]["token"]


# ============================================================================
# POST (REGISTRATION)
# ============================================================================

class TestCredentialsPost:
    """Tests for POST /ocpi/2.2.1/credentials."""

    def test_registration_with_token_a(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))

        resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert resp.status_code == 200
        body = resp.json()
        assert body["status_code"] == 1000
        assert body["status_message"] == "Success"
        assert body["timestamp"] == TIMESTAMP

        data = body["data"]
        assert data["token"] != "A1"
        assert data["url"] == OWN_VERSIONS_URL
        assert data["roles"][0]["role"] == "CPO"
        assert data["roles"][0]["party_id"] == "EXA"

        platform = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))
        assert platform.server_token == data["token"]
        assert platform.client_token == "partner-token-b"
        assert platform.version == "2.2.1"
        assert len(platform.endpoints) == 2
        assert platform.roles[0].party_id == "ABC"
        assert platform.registration_state == RegistrationState.REGISTERED

        assert asyncio.run(repo.get_pending_registration("A1")) is None

    def test_negotiation_uses_partner_token(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))

        client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert [str(r.url) for r in partner.requests] == [PARTNER_VERSIONS_URL, PARTNER_DETAILS_URL]
        assert partner.tokens_seen() == ["partner-token-b", "partner-token-b"]

    def test_token_a_is_single_use(self):
        client, repo, partner = _make_test_app()
        _register(client, repo)

        resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Token"

    def test_server_token_on_post_is_already_registered(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)

        resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth(server_token))

        assert resp.status_code == 405
        body = resp.json()
        assert body["status_code"] == 2000
        assert body["data"] is None

    def test_version_mismatch_keeps_token_a(self):
        client, repo, partner = _make_test_app(partner=FakePartner(versions=("2.1.1",)))
        asyncio.run(repo.issue_token_a("A1"))

        resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert resp.status_code == 502
        assert resp.json()["status_code"] == 3002
        assert asyncio.run(repo.get_pending_registration("A1")) is not None
        assert asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL)) is None

    def test_token_a_bound_to_other_url(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1", platform_url="https://other.example.com/versions"))

        resp = client.post(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert resp.status_code == 400
        assert resp.json()["status_code"] == 2001
        assert partner.requests == []

    def test_malformed_json(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))

        resp = client.post(
            CREDENTIALS_PATH,
            content=b"{not json",
            headers={**_auth("A1"), "Content-Type": "application/json"},
        )

        assert resp.status_code == 400
        assert resp.json()["status_code"] == 2001

    def test_empty_roles(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))
        payload = _partner_credentials()
        payload["roles"] = []

        resp = client.post(CREDENTIALS_PATH, json=payload, headers=_auth("A1"))

        assert resp.status_code == 400
        body = resp.json()
        assert body["status_code"] == 2001
        assert "roles" in body["status_message"]
        assert asyncio.run(repo.get_pending_registration("A1")) is not None

    def test_authentication_runs_before_body_parsing(self):
        client, repo, partner = _make_test_app()

        resp = client.post(
            CREDENTIALS_PATH,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 401


# ============================================================================
# GET
# ============================================================================

class TestCredentialsGet:
    """Tests for GET /ocpi/2.2.1/credentials."""

    def test_get_returns_own_credentials(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)

        resp = client.get(CREDENTIALS_PATH, headers=_auth(server_token))

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["token"] == server_token
        assert data["url"] == OWN_VERSIONS_URL

    def test_get_is_idempotent(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)
        before = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))

        first = client.get(CREDENTIALS_PATH, headers=_auth(server_token))
        second = client.get(CREDENTIALS_PATH, headers=_auth(server_token))

        assert first.json() == second.json()
        after = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))
        assert after.model_dump() == before.model_dump()

    def test_unknown_token(self):
        client, repo, partner = _make_test_app()

        resp = client.get(CREDENTIALS_PATH, headers=_auth("bogus"))

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Token"
        body = resp.json()
        assert 2000 <= body["status_code"] < 3000
        assert body["data"] is None

    def test_missing_authorization(self):
        client, repo, partner = _make_test_app()

        resp = client.get(CREDENTIALS_PATH)

        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Token"

    def test_malformed_authorization(self):
        client, repo, partner = _make_test_app()

        resp = client.get(CREDENTIALS_PATH, headers={"Authorization": "Bearer abc"})

        assert resp.status_code == 401

    def test_token_a_cannot_read_credentials(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))

        resp = client.get(CREDENTIALS_PATH, headers=_auth("A1"))

        assert resp.status_code == 401


# ============================================================================
# PUT (ROTATION)
# ============================================================================

class TestCredentialsPut:
    """Tests for PUT /ocpi/2.2.1/credentials."""

    def test_put_rotates_server_token(self):
        client, repo, partner = _make_test_app()
        old_token = _register(client, repo)

        resp = client.put(
            CREDENTIALS_PATH,
            json=_partner_credentials(token="partner-token-b2"),
            headers=_auth(old_token),
        )

        assert resp.status_code == 200
        new_token = resp.json()["data"]["token"]
        assert new_token != old_token

        platform = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))
        assert platform.server_token == new_token
        assert platform.client_token == "partner-token-b2"

    def test_old_token_rejected_after_rotation(self):
        client, repo, partner = _make_test_app()
        old_token = _register(client, repo)
        resp = client.put(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth(old_token))
        new_token = resp.json()["data"]["token"]

        assert client.get(CREDENTIALS_PATH, headers=_auth(old_token)).status_code == 401

        current = client.get(CREDENTIALS_PATH, headers=_auth(new_token))
        assert current.status_code == 200
        assert current.json()["data"]["token"] == new_token

    def test_put_cannot_change_url(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)

        resp = client.put(
            CREDENTIALS_PATH,
            json=_partner_credentials(url="https://elsewhere.example.com/versions"),
            headers=_auth(server_token),
        )

        assert resp.status_code == 400
        assert resp.json()["status_code"] == 2001
        platform = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))
        assert platform.server_token == server_token

    def test_put_with_token_a_rejected(self):
        client, repo, partner = _make_test_app()
        asyncio.run(repo.issue_token_a("A1"))

        resp = client.put(CREDENTIALS_PATH, json=_partner_credentials(), headers=_auth("A1"))

        assert resp.status_code == 401


# ============================================================================
# DELETE (UNREGISTRATION)
# ============================================================================

class TestCredentialsDelete:
    """Tests for DELETE /ocpi/2.2.1/credentials."""

    def test_delete_then_get_is_unauthenticated(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)

        resp = client.delete(CREDENTIALS_PATH, headers=_auth(server_token))

        assert resp.status_code == 200
        body = resp.json()
        assert body["status_code"] == 1000
        assert body["data"] is None

        again = client.get(CREDENTIALS_PATH, headers=_auth(server_token))
        assert again.status_code == 401

    def test_delete_clears_tokens(self):
        client, repo, partner = _make_test_app()
        server_token = _register(client, repo)

        client.delete(CREDENTIALS_PATH, headers=_auth(server_token))

        platform = asyncio.run(repo.get_platform(PARTNER_VERSIONS_URL))
        assert platform.server_token is None
        assert platform.client_token is None
        assert platform.token_a is None
        assert platform.registration_state == RegistrationState.UNREGISTERED

    def test_registration_possible_after_unregister(self):
        client, repo, partner = _make_test_app()
        first = _register(client, repo, token_a="A1")
        client.delete(CREDENTIALS_PATH, headers=_auth(first))

        second = _register(client, repo, token_a="A2")

        assert second != first
        assert client.get(CREDENTIALS_PATH, headers=_auth(second)).status_code == 200
