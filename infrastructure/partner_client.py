# ============================================================================
# PARTNER HTTP CLIENT
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Infrastructure - Async HTTP client for partner platforms
# PURPOSE: One authenticated round trip to a partner, envelope parsing
# CREATED: 18 OCT 2026
# ============================================================================
"""
Partner HTTP Client

Async httpx client for calls to partner platforms. Every request carries
``Authorization: Token <base64>``, a fresh X-Request-ID and the current
X-Correlation-ID.

Transport failures are mapped to protocol errors here:
    connect, timeout, network or protocol error -> UnreachablePartner
    other httpx errors (decoding, redirects)    -> TransportFailure
    non-JSON / non-envelope                     -> MalformedDiscoveryDocument (on envelope())

There is no retry: one call, one round trip.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from core.config import HttpClientDefaults
from core.errors import MalformedDiscoveryDocument, TransportFailure, UnreachablePartner
from core.logging import ComponentType, get_current_context, get_logger
from core.models.envelope import OcpiResponseBody
from core.tokens import encode_authorization, mask_token

logger = get_logger(__name__, ComponentType.PARTNER_CLIENT)

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"


@dataclass
class PartnerResponse:
    """Raw partner answer: HTTP status plus decoded JSON body (if any)."""

    url: str
    status_code: int
    body: Any = None
    text: str = ""

    def envelope(self) -> OcpiResponseBody:
        """Body as an OCPI envelope."""
        if not isinstance(self.body, dict):
            raise MalformedDiscoveryDocument(
                f"Response from {self.url} is not an OCPI envelope (HTTP {self.status_code})",
                platform_url=self.url,
            )
        try:
            return OcpiResponseBody.model_validate(self.body)
        except PydanticValidationError as e:
            raise MalformedDiscoveryDocument(
                f"Response from {self.url} is not an OCPI envelope: {e.error_count()} error(s)",
                platform_url=self.url,
            ) from e


class PartnerClient:
    """Async HTTP client for partner OCPI endpoints."""

    def __init__(
        self,
        defaults: Optional[HttpClientDefaults] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._defaults = defaults or HttpClientDefaults()
        self._transport = transport
        self._timeout = httpx.Timeout(
            connect=self._defaults.connect_timeout,
            read=self._defaults.read_timeout,
            write=self._defaults.write_timeout,
            pool=self._defaults.pool_timeout,
        )

    def _headers(self, token: str) -> Dict[str, str]:
        context = get_current_context()
        return {
            "Authorization": encode_authorization(token),
            REQUEST_ID_HEADER: str(uuid.uuid4()),
            CORRELATION_ID_HEADER: context.correlation_id or str(uuid.uuid4()),
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        url: str,
        token: str,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> PartnerResponse:
        """
        Make one request to a partner.

        Returns a PartnerResponse whatever the HTTP status; the caller
        decides what a non-success status means.
        """
        logger.debug(f"{method} {url} (token {mask_token(token)})")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                verify=self._defaults.verify_tls,
            ) as client:
                resp = await client.request(method, url, json=json_body, headers=self._headers(token))
        except httpx.TransportError as e:
            logger.error(f"Cannot reach partner at {url}: {e}")
            raise UnreachablePartner(f"Partner unreachable: {url}", platform_url=url) from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error calling {url}: {e}")
            raise TransportFailure(f"Transport error calling {url}: {e}", platform_url=url) from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.status_code >= 400:
            logger.warning(f"Partner answered {method} {url} with HTTP {resp.status_code}")

        return PartnerResponse(url=url, status_code=resp.status_code, body=body, text=resp.text)

    async def get(self, url: str, token: str) -> PartnerResponse:
        return await self.request("GET", url, token)

    async def post(self, url: str, token: str, json_body: Dict[str, Any]) -> PartnerResponse:
        return await self.request("POST", url, token, json_body=json_body)

    async def put(self, url: str, token: str, json_body: Dict[str, Any]) -> PartnerResponse:
        return await self.request("PUT", url, token, json_body=json_body)

    async def delete(self, url: str, token: str) -> PartnerResponse:
        return await self.request("DELETE", url, token)


__all__ = [
    "REQUEST_ID_HEADER",
    "CORRELATION_ID_HEADER",
    "PartnerResponse",
    "PartnerClient",
]
