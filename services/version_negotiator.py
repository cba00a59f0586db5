# ============================================================================
# VERSION NEGOTIATOR
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Partner version discovery
# PURPOSE: Select the common protocol version and fetch its endpoints
# CREATED: 18 OCT 2026
# ============================================================================
"""
Version Negotiator

Two round trips against a partner:
    1. GET versions URL        -> list of {version, url}
    2. GET the matching url    -> version details (endpoints)

This deployment speaks exactly one version, so selection is an exact match.
Nothing is persisted here; callers save the result in the registry.
"""

from typing import List, Tuple

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from core.errors import MalformedDiscoveryDocument, VersionMismatch
from core.logging import ComponentType, get_logger
from core.models.versions import Endpoint, Version, VersionDetails
from infrastructure.partner_client import PartnerClient

logger = get_logger(__name__, ComponentType.SERVICE)

_VERSION_LIST = TypeAdapter(List[Version])
_ENDPOINT_LIST = TypeAdapter(List[Endpoint])


class VersionNegotiator:
    """Resolves the version and endpoints to use with a partner."""

    def __init__(self, partner_client: PartnerClient, supported_version: str = "2.2.1"):
        self._client = partner_client
        self.supported_version = supported_version

    async def _fetch_data(self, url: str, token: str):
        response = await self._client.get(url, token)
        envelope = response.envelope()
        if not envelope.is_success:
            raise MalformedDiscoveryDocument(
                f"Partner answered {url} with status {envelope.status_code}: {envelope.status_message}",
                platform_url=url,
            )
        return envelope.data

    async def fetch_versions(self, versions_url: str, token: str) -> List[Version]:
        """Partner's supported versions."""
        data = await self._fetch_data(versions_url, token)
        try:
            return _VERSION_LIST.validate_python(data)
        except PydanticValidationError as e:
            raise MalformedDiscoveryDocument(
                f"Versions list at {versions_url} is malformed: {e.error_count()} error(s)",
                platform_url=versions_url,
            ) from e

    async def fetch_endpoints(self, details_url: str, token: str) -> List[Endpoint]:
        """
        Endpoints of one version.

        Accepts a VersionDetails object or a bare endpoint list.
        """
        data = await self._fetch_data(details_url, token)
        try:
            if isinstance(data, dict):
                return VersionDetails.model_validate(data).endpoints
            return _ENDPOINT_LIST.validate_python(data)
        except PydanticValidationError as e:
            raise MalformedDiscoveryDocument(
                f"Version details at {details_url} are malformed: {e.error_count()} error(s)",
                platform_url=details_url,
            ) from e

    async def negotiate(self, versions_url: str, token: str) -> Tuple[Version, List[Endpoint]]:
        """
        Select the common version and fetch its endpoints.

        Raises:
            VersionMismatch: partner does not offer the supported version
            UnreachablePartner: transport failure
            MalformedDiscoveryDocument: unusable response
        """
        versions = await self.fetch_versions(versions_url, token)

        match = next((v for v in versions if v.version == self.supported_version), None)
        if match is None:
            offered = [v.version for v in versions]
            logger.warning(
                f"No common version with {versions_url}: "
                f"need {self.supported_version}, partner offers {offered}"
            )
            raise VersionMismatch(
                f"Partner does not support version {self.supported_version} (offers {offered})",
                platform_url=versions_url,
            )

        endpoints = await self.fetch_endpoints(match.url, token)
        logger.info(
            f"Negotiated version {match.version} with {versions_url} "
            f"({len(endpoints)} endpoints)"
        )
        return match, endpoints


__all__ = ["VersionNegotiator"]
