# ============================================================================
# CREDENTIALS HTTP CLIENT
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Partner credentials endpoint over HTTP
# PURPOSE: CredentialsInterface implementation that calls a partner
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials HTTP Client

Talks to one partner credentials endpoint. Returns the partner's envelope
as-is; interpreting status codes is the caller's job. An HTTP error without
an envelope body is a rejection.
"""

from core.errors import MalformedDiscoveryDocument, RegistrationRejected
from core.models.credentials import Credentials
from core.models.envelope import OcpiResponseBody
from infrastructure.partner_client import PartnerClient, PartnerResponse
from services.credentials_interface import CredentialsInterface


class CredentialsClient(CredentialsInterface[str]):
    """HTTP client for a partner's credentials endpoint."""

    def __init__(self, endpoint_url: str, partner_client: PartnerClient):
        self.endpoint_url = endpoint_url
        self._client = partner_client

    def _envelope(self, response: PartnerResponse) -> OcpiResponseBody:
        try:
            return response.envelope()
        except MalformedDiscoveryDocument:
            if response.status_code >= 400:
                raise RegistrationRejected(
                    f"Partner credentials endpoint answered HTTP {response.status_code}",
                    platform_url=self.endpoint_url,
                    status_code=response.status_code,
                )
            raise

    async def get(self, token: str) -> OcpiResponseBody:
        return self._envelope(await self._client.get(self.endpoint_url, token))

    async def post(self, token: str, credentials: Credentials) -> OcpiResponseBody:
        return self._envelope(
            await self._client.post(self.endpoint_url, token, credentials.to_wire())
        )

    async def put(self, token: str, credentials: Credentials) -> OcpiResponseBody:
        return self._envelope(
            await self._client.put(self.endpoint_url, token, credentials.to_wire())
        )

    async def delete(self, token: str) -> OcpiResponseBody:
        return self._envelope(await self._client.delete(self.endpoint_url, token))


__all__ = ["CredentialsClient"]
