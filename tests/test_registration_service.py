# ============================================================================
# REGISTRATION SERVICE TESTS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Tests - Sender side of the credentials handshake
# PURPOSE: Verify register / update / unregister against a mocked partner
# CREATED: 18 OCT 2026
# ============================================================================
"""
Registration Service Tests

Covers:
1. register(): token A flow, stored version/endpoints/roles/tokens
2. Duplicate registration refused without partner traffic
3. Partner rejection / malformed answer restores the previous server token
4. update(): PUT with the client token, server token rotated
5. unregister(): DELETE with the client token, every token dropped

Uses InMemoryPlatformRepository, the real CredentialsClient and an
httpx.MockTransport partner; asyncio.run for the async calls.

Run with:
    pytest tests/test_registration_service.py -v
"""

import asyncio
import json
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx

from core.clock import FixedClock
from core.config import OcpiConfig
from core.contracts import RegistrationState
from core.errors import (
    DuplicateRegistration,
    MalformedDiscoveryDocument,
    NoMatchingEndpoints,
    NotRegistered,
    RegistrationRejected,
)
from core.models.envelope import OcpiResponseBody
from core.tokens import decode_authorization
from infrastructure.partner_client import PartnerClient
from repositories import InMemoryPlatformRepository
from services import RegistrationService, VersionNegotiator


VERSIONS_URL = "https://partner.example.com/ocpi/versions"
DETAILS_URL = "https://partner.example.com/ocpi/2.2.1"
CREDENTIALS_URL = "https://partner.example.com/ocpi/2.2.1/credentials"

CONFIG = OcpiConfig(base_url="https://emsp.example.com", party_id="EMS", country_code="DE")
NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# FIXTURES
# ============================================================================

def _envelope(data, status_code=1000):
    return {
        "data": data,
        "status_code": status_code,
        "status_message": "Success" if status_code == 1000 else "Rejected",
        "timestamp": "2026-10-18T12:00:00Z",
    }


def _partner_credentials(token):
    return {
        "token": token,
        "url": VERSIONS_URL,
        "roles": [{"role": "CPO", "party_id": "ABC", "country_code": "FR"}],
    }


class FakePartner:
    """Partner platform with discovery documents and a credentials endpoint."""

    def __init__(self, with_credentials_endpoint=True):
        self.with_credentials_endpoint = with_credentials_endpoint
        self.next_token = "partner-token-c"
        self.credentials_response = None
        self.received = []
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url == VERSIONS_URL:
            return httpx.Response(200, json=_envelope([{"version": "2.2.1", "url": DETAILS_URL}]))
        if url == DETAILS_URL:
            endpoints = [{"identifier": "locations", "role": "SENDER", "url": f"{DETAILS_URL}/locations"}]
            if self.with_credentials_endpoint:
                endpoints.append({"identifier": "credentials", "role": "RECEIVER", "url": CREDENTIALS_URL})
            return httpx.Response(200, json=_envelope({"version": "2.2.1", "endpoints": endpoints}))
        if url == CREDENTIALS_URL:
            if request.content:
                self.received.append(json.loads(request.content))
            if self.credentials_response is not None:
                return self.credentials_response
            if request.method == "DELETE":
                return httpx.Response(200, json=_envelope(None))
            return httpx.Response(200, json=_envelope(_partner_credentials(self.next_token)))
        return httpx.Response(404)

    def calls(self):
        return [
            (r.method, str(r.url), decode_authorization(r.headers["Authorization"]))
            for r in self.requests
        ]


def _make_service(partner=None, repo=None):
    partner = partner or FakePartner()
    repo = repo or InMemoryPlatformRepository()
    client = PartnerClient(transport=httpx.MockTransport(partner.handler))
    negotiator = VersionNegotiator(client, supported_version="2.2.1")
    svc = RegistrationService(repo, negotiator, client, CONFIG)
    return svc, repo, partner


# ============================================================================
# REGISTER
# ============================================================================

class TestRegister:
    """RegistrationService.register()."""

    def test_register_happy_path(self):
        svc, repo, partner = _make_service()

        result = asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert result.token == "partner-token-c"
        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.version == "2.2.1"
        assert len(platform.endpoints) == 2
        assert platform.roles[0].party_id == "ABC"
        assert platform.client_token == "partner-token-c"
        assert platform.token_a is None
        assert platform.server_token is not None
        assert platform.registration_state == RegistrationState.REGISTERED

    def test_register_uses_token_a_for_every_call(self):
        svc, repo, partner = _make_service()

        asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert partner.calls() == [
            ("GET", VERSIONS_URL, "TA"),
            ("GET", DETAILS_URL, "TA"),
            ("POST", CREDENTIALS_URL, "TA"),
        ]

    def test_register_sends_active_server_token(self):
        svc, repo, partner = _make_service()

        asyncio.run(svc.register(VERSIONS_URL, "TA"))

        sent = partner.received[0]
        assert sent["url"] == "https://emsp.example.com/ocpi/versions"
        assert sent["roles"][0]["party_id"] == "EMS"
        assert sent["roles"][0]["country_code"] == "DE"

        platform = asyncio.run(repo.get_platform_by_server_token(sent["token"]))
        assert platform is not None
        assert platform.url == VERSIONS_URL

    def test_duplicate_registration_refused(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        calls_before = len(partner.requests)

        with pytest.raises(DuplicateRegistration) as exc_info:
            asyncio.run(svc.register(VERSIONS_URL, "TA2"))

        assert exc_info.value.http_status == 405
        assert len(partner.requests) == calls_before

    def test_partner_rejects_registration(self):
        partner = FakePartner()
        partner.credentials_response = httpx.Response(400, json=_envelope(None, status_code=2001))
        svc, repo, partner = _make_service(partner=partner)

        with pytest.raises(RegistrationRejected) as exc_info:
            asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert exc_info.value.status_code == 2001
        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.server_token is None
        assert platform.client_token is None
        assert platform.token_a == "TA"
        assert platform.registration_state == RegistrationState.PENDING

    def test_partner_http_error_without_envelope(self):
        partner = FakePartner()
        partner.credentials_response = httpx.Response(500, text="Internal Server Error")
        svc, repo, partner = _make_service(partner=partner)

        with pytest.raises(RegistrationRejected) as exc_info:
            asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert exc_info.value.status_code == 500
        assert asyncio.run(repo.get_platform(VERSIONS_URL)).server_token is None

    def test_partner_returns_malformed_credentials(self):
        partner = FakePartner()
        bad = _partner_credentials("partner-token-c")
        bad["roles"] = []
        partner.credentials_response = httpx.Response(200, json=_envelope(bad))
        svc, repo, partner = _make_service(partner=partner)

        with pytest.raises(MalformedDiscoveryDocument):
            asyncio.run(svc.register(VERSIONS_URL, "TA"))

        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.server_token is None
        assert platform.client_token is None

    def test_no_credentials_endpoint(self):
        svc, repo, partner = _make_service(partner=FakePartner(with_credentials_endpoint=False))

        with pytest.raises(NoMatchingEndpoints) as exc_info:
            asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert exc_info.value.ocpi_status == 3003
        assert asyncio.run(repo.get_platform(VERSIONS_URL)).server_token is None

    def test_register_with_injected_credentials_api(self):
        repo = InMemoryPlatformRepository()
        partner = FakePartner()
        client = PartnerClient(transport=httpx.MockTransport(partner.handler))
        api = MagicMock()
        api.post = AsyncMock(return_value=OcpiResponseBody.build(
            data=_partner_credentials("injected-token"),
            clock=FixedClock(NOW),
        ))
        svc = RegistrationService(
            repo,
            VersionNegotiator(client),
            client,
            CONFIG,
            credentials_api_factory=lambda url: api,
        )

        result = asyncio.run(svc.register(VERSIONS_URL, "TA"))

        assert result.token == "injected-token"
        token_arg, own = api.post.call_args.args
        assert token_arg == "TA"
        assert own.url == "https://emsp.example.com/ocpi/versions"


# ============================================================================
# UPDATE
# ============================================================================

class TestUpdate:
    """RegistrationService.update()."""

    def test_update_rotates_tokens(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        old_server_token = asyncio.run(repo.get_platform(VERSIONS_URL)).server_token
        partner.next_token = "partner-token-d"

        result = asyncio.run(svc.update(VERSIONS_URL))

        assert result.token == "partner-token-d"
        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.client_token == "partner-token-d"
        assert platform.server_token != old_server_token
        assert asyncio.run(repo.get_platform_by_server_token(old_server_token)) is None

    def test_update_authenticates_with_client_token(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        partner.requests.clear()

        asyncio.run(svc.update(VERSIONS_URL))

        assert partner.calls() == [
            ("GET", VERSIONS_URL, "partner-token-c"),
            ("GET", DETAILS_URL, "partner-token-c"),
            ("PUT", CREDENTIALS_URL, "partner-token-c"),
        ]

    def test_failed_update_restores_server_token(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        before = asyncio.run(repo.get_platform(VERSIONS_URL))
        partner.credentials_response = httpx.Response(200, json=_envelope(None, status_code=3001))

        with pytest.raises(RegistrationRejected):
            asyncio.run(svc.update(VERSIONS_URL))

        after = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert after.server_token == before.server_token
        assert after.client_token == before.client_token
        assert asyncio.run(repo.get_platform_by_server_token(before.server_token)) is not None

    def test_update_unknown_platform(self):
        svc, repo, partner = _make_service()

        with pytest.raises(NotRegistered) as exc_info:
            asyncio.run(svc.update(VERSIONS_URL))

        assert exc_info.value.http_status == 404
        assert partner.requests == []


# ============================================================================
# UNREGISTER
# ============================================================================

class TestUnregister:
    """RegistrationService.unregister()."""

    def test_unregister(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        server_token = asyncio.run(repo.get_platform(VERSIONS_URL)).server_token
        partner.requests.clear()

        asyncio.run(svc.unregister(VERSIONS_URL))

        assert partner.calls() == [("DELETE", CREDENTIALS_URL, "partner-token-c")]
        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.registration_state == RegistrationState.UNREGISTERED
        assert platform.server_token is None
        assert platform.client_token is None
        assert asyncio.run(repo.get_platform_by_server_token(server_token)) is None

    def test_unregister_rejected_keeps_registration(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        partner.credentials_response = httpx.Response(200, json=_envelope(None, status_code=2000))

        with pytest.raises(RegistrationRejected):
            asyncio.run(svc.unregister(VERSIONS_URL))

        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.registration_state == RegistrationState.REGISTERED

    def test_unregister_unknown_platform(self):
        svc, repo, partner = _make_service()

        with pytest.raises(NotRegistered):
            asyncio.run(svc.unregister(VERSIONS_URL))

    def test_register_again_after_unregister(self):
        svc, repo, partner = _make_service()
        asyncio.run(svc.register(VERSIONS_URL, "TA"))
        asyncio.run(svc.unregister(VERSIONS_URL))

        result = asyncio.run(svc.register(VERSIONS_URL, "TA2"))

        assert result.token == "partner-token-c"
        platform = asyncio.run(repo.get_platform(VERSIONS_URL))
        assert platform.registration_state == RegistrationState.REGISTERED
        assert platform.unregistered_at is None
