# ============================================================================
# REGISTRATION SERVICE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Sender side of the credentials module
# PURPOSE: Register with, rotate tokens at, and unregister from a partner
# CREATED: 18 OCT 2026
# ============================================================================
"""
Registration Service

Drives the credentials handshake when this system is the initiating party.

register(versions_url, token_a):
    1. refuse if the partner already holds an active server token
    2. store token A on the platform record
    3. negotiate with token A, store version and endpoints
    4. generate a new server token and activate it
       (the partner calls our /versions with it while handling the POST)
    5. POST our credentials to the partner, authenticated with token A
    6. store partner roles and its token as client token, drop token A

update(versions_url) is the same with PUT and the stored client token.
If the partner call fails after step 4, the previous server token is put
back so the existing relationship keeps working.

unregister(versions_url) sends DELETE with the client token, then
invalidates every token locally.
"""

from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from core.config import OcpiConfig
from core.contracts import InterfaceRole, ModuleID
from core.errors import (
    DuplicateRegistration,
    MalformedDiscoveryDocument,
    NoMatchingEndpoints,
    NotRegistered,
    RegistrationRejected,
)
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.credentials import Credentials
from core.models.envelope import OcpiResponseBody
from core.models.platform import Platform
from core.models.versions import Endpoint, find_endpoint
from core.tokens import generate_token, mask_token
from infrastructure.partner_client import PartnerClient
from repositories.platform_repo import PlatformRepository
from services.credentials_client import CredentialsClient
from services.credentials_interface import CredentialsInterface
from services.credentials_service import build_own_credentials
from services.version_negotiator import VersionNegotiator

logger = get_logger(__name__, ComponentType.SERVICE)

CredentialsApiFactory = Callable[[str], CredentialsInterface]


class RegistrationService:
    """Sender-side credentials exchange."""

    def __init__(
        self,
        repo: PlatformRepository,
        negotiator: VersionNegotiator,
        partner_client: PartnerClient,
        config: OcpiConfig,
        credentials_api_factory: Optional[CredentialsApiFactory] = None,
    ):
        self.repo = repo
        self.negotiator = negotiator
        self.config = config
        self._credentials_api_factory = credentials_api_factory or (
            lambda url: CredentialsClient(url, partner_client)
        )

    # ----------------------------------------------------------------
    # Public operations
    # ----------------------------------------------------------------

    async def register(self, versions_url: str, token_a: str) -> Credentials:
        """
        Register with a partner using the token A it gave us.

        Raises:
            DuplicateRegistration: an active relationship already exists
            RegistrationRejected: partner answered with a non-success status
            VersionMismatch, NoMatchingEndpoints, UnreachablePartner,
            MalformedDiscoveryDocument: negotiation failures
        """
        with log_context(platform_url=versions_url, operation="registration.register"):
            existing = await self.repo.get_platform(versions_url)
            if existing is not None and existing.is_registered:
                raise DuplicateRegistration(versions_url)

            await self.repo.save_token_a(versions_url, token_a)
            log_checkpoint("registration_started", {"side": "sender"})

            partner = await self._exchange(versions_url, token_a, update=False)
            await self.repo.invalidate_token_a(versions_url)

            log_checkpoint("registration_completed", {"side": "sender", "roles": len(partner.roles)})
            return partner

    async def update(self, versions_url: str) -> Credentials:
        """
        Rotate tokens with an already registered partner.

        Raises:
            NotRegistered: no active relationship with the partner
        """
        with log_context(platform_url=versions_url, operation="registration.update"):
            platform = await self._registered_platform(versions_url)

            partner = await self._exchange(versions_url, platform.client_token, update=True)

            log_checkpoint("tokens_rotated", {"side": "sender"})
            return partner

    async def unregister(self, versions_url: str) -> None:
        """
        End the relationship with a partner.

        Raises:
            NotRegistered: no active relationship with the partner
            RegistrationRejected: partner answered with a non-success status
        """
        with log_context(platform_url=versions_url, operation="registration.unregister"):
            platform = await self._registered_platform(versions_url)
            endpoint = self._credentials_endpoint(versions_url, platform.endpoints or [])

            envelope = await self._credentials_api_factory(endpoint.url).delete(platform.client_token)
            self._raise_if_rejected(versions_url, envelope, "unregistration")

            await self.repo.unregister_platform(versions_url)
            log_checkpoint("platform_unregistered", {"side": "sender"})

    # ----------------------------------------------------------------
    # Internals
    # ----------------------------------------------------------------

    async def _registered_platform(self, versions_url: str) -> Platform:
        platform = await self.repo.get_platform(versions_url)
        if platform is None or not platform.is_registered or not platform.client_token:
            raise NotRegistered(versions_url)
        return platform

    def _credentials_endpoint(self, versions_url: str, endpoints) -> Endpoint:
        # We call the partner as SENDER, so we want its counterpart endpoint
        endpoint = find_endpoint(endpoints, ModuleID.CREDENTIALS, InterfaceRole.SENDER.counterpart())
        if endpoint is None:
            raise NoMatchingEndpoints(
                "Partner does not expose a credentials endpoint",
                platform_url=versions_url,
            )
        return endpoint

    def _raise_if_rejected(self, versions_url: str, envelope: OcpiResponseBody, action: str) -> None:
        if not envelope.is_success:
            logger.warning(
                f"Partner rejected {action}: {envelope.status_code} {envelope.status_message}"
            )
            raise RegistrationRejected(
                f"Partner rejected {action} with status {envelope.status_code}: "
                f"{envelope.status_message or 'no message'}",
                platform_url=versions_url,
                status_code=envelope.status_code,
            )

    async def _exchange(self, versions_url: str, auth_token: str, update: bool) -> Credentials:
        """Negotiate, activate a new server token, send our credentials."""
        version, endpoints = await self.negotiator.negotiate(versions_url, auth_token)
        await self.repo.save_version(versions_url, version.version)
        platform = await self.repo.save_endpoints(versions_url, endpoints)

        endpoint = self._credentials_endpoint(versions_url, endpoints)

        previous_server_token = platform.server_token
        server_token = generate_token()
        await self.repo.save_server_token(versions_url, server_token)
        logger.debug(f"Activated server token {mask_token(server_token)} before credentials call")

        own = build_own_credentials(self.config, server_token)
        api = self._credentials_api_factory(endpoint.url)
        action = "credentials update" if update else "registration"

        try:
            if update:
                envelope = await api.put(auth_token, own)
            else:
                envelope = await api.post(auth_token, own)
            self._raise_if_rejected(versions_url, envelope, action)

            try:
                partner = Credentials.model_validate(envelope.data)
            except PydanticValidationError as e:
                raise MalformedDiscoveryDocument(
                    f"Partner returned malformed credentials: {e.error_count()} error(s)",
                    platform_url=versions_url,
                ) from e
        except Exception:
            await self.repo.save_server_token(versions_url, previous_server_token)
            logger.info(f"Restored previous server token after failed {action}")
            raise

        await self.repo.save_roles(versions_url, partner.roles)
        await self.repo.save_client_token(versions_url, partner.token)
        return partner


__all__ = ["RegistrationService"]
