# ============================================================================
# CREDENTIALS SERVER SERVICE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Receiver side of the credentials module
# PURPOSE: Handle inbound GET / POST / PUT / DELETE /credentials
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials Server Service

Business rules for a partner registering with us:

    POST    token A -> negotiate with the partner, consume token A,
            issue a server token, store the partner's token as client token
    PUT     server token -> same, without token A (rotation)
    GET     server token -> our credentials for that relationship
    DELETE  server token -> invalidate every token of the platform

Registration state per platform:
    UNKNOWN -> PENDING -> REGISTERED -> REGISTERED (PUT) -> UNREGISTERED

Token A is consumed atomically together with the registration write, after
negotiation succeeds. A failed negotiation leaves it usable for a retry. Of
two concurrent POSTs with the same token A, or with two tokens A for the
same URL, only one completes.
"""

from core.clock import Clock, SystemClock
from core.config import OcpiConfig
from core.contracts import RegistrationOutcome
from core.errors import AlreadyRegistered, InvalidToken, ValidationFailure
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models.credentials import BusinessDetails, CredentialRole, Credentials
from core.models.envelope import OcpiResponseBody
from core.tokens import generate_token, mask_token
from repositories.platform_repo import PlatformRepository
from services.credentials_interface import CredentialsInterface
from services.token_authenticator import AuthenticatedCaller
from services.version_negotiator import VersionNegotiator

logger = get_logger(__name__, ComponentType.SERVICE)


def build_own_credentials(config: OcpiConfig, token: str) -> Credentials:
    """Our Credentials object carrying the given token."""
    return Credentials(
        token=token,
        url=config.own_versions_url,
        roles=[
            CredentialRole(
                role=config.role,
                party_id=config.party_id,
                country_code=config.country_code,
                business_details=BusinessDetails(
                    name=config.business_name,
                    website=config.business_website,
                ),
            )
        ],
    )


class CredentialsServerService(CredentialsInterface[AuthenticatedCaller]):
    """
    Receiver-side credentials operations.

    Every operation takes the AuthenticatedCaller the route dependency
    already resolved, so the token is looked up once per request.
    """

    def __init__(
        self,
        repo: PlatformRepository,
        negotiator: VersionNegotiator,
        config: OcpiConfig,
        clock: Clock = None,
    ):
        self.repo = repo
        self.negotiator = negotiator
        self.config = config
        self.clock = clock or SystemClock()

    # ----------------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------------

    @staticmethod
    def _require_operational(caller: AuthenticatedCaller) -> AuthenticatedCaller:
        if not caller.is_operational:
            raise InvalidToken()
        return caller

    def _success(self, data=None) -> OcpiResponseBody:
        return OcpiResponseBody.build(data=data, clock=self.clock)

    # ----------------------------------------------------------------
    # Operations
    # ----------------------------------------------------------------

    async def get(self, caller: AuthenticatedCaller) -> OcpiResponseBody:
        """Our credentials for the caller's relationship. No mutation."""
        self._require_operational(caller)
        return self._success(build_own_credentials(self.config, caller.token).to_wire())

    async def post(self, caller: AuthenticatedCaller, credentials: Credentials) -> OcpiResponseBody:
        """
        Complete a registration started with token A.

        Raises:
            AlreadyRegistered: operational token, or the URL already has a server token
            ValidationFailure: token A is bound to another versions URL
            InvalidToken: token A unknown or consumed concurrently
        """
        if caller.is_operational:
            raise AlreadyRegistered(caller.platform_url)

        pending = caller.pending
        if pending is not None and pending.platform_url and pending.platform_url != credentials.url:
            raise ValidationFailure(
                f"Token A was issued for '{pending.platform_url}', not '{credentials.url}'"
            )

        with log_context(platform_url=credentials.url, operation="credentials.post"):
            # complete_registration() repeats this check atomically
            existing = await self.repo.get_platform(credentials.url)
            if existing is not None and existing.is_registered:
                raise AlreadyRegistered(credentials.url)

            version, endpoints = await self.negotiator.negotiate(credentials.url, credentials.token)

            server_token = generate_token()
            outcome, _ = await self.repo.complete_registration(
                caller.token,
                credentials.url,
                version=version.version,
                endpoints=endpoints,
                roles=credentials.roles,
                client_token=credentials.token,
                server_token=server_token,
            )

            if outcome == RegistrationOutcome.TOKEN_A_USED:
                logger.warning(f"Token A {mask_token(caller.token)} consumed by a concurrent registration")
                raise InvalidToken("Token A has already been used")
            if outcome == RegistrationOutcome.ALREADY_REGISTERED:
                logger.warning(f"Platform {credentials.url} registered concurrently with another token A")
                raise AlreadyRegistered(credentials.url)

            log_checkpoint(
                "registration_completed",
                {"side": "receiver", "version": version.version, "endpoints": len(endpoints)},
            )
            logger.info(f"Platform {credentials.url} registered (server token {mask_token(server_token)})")

        return self._success(build_own_credentials(self.config, server_token).to_wire())

    async def put(self, caller: AuthenticatedCaller, credentials: Credentials) -> OcpiResponseBody:
        """
        Rotate tokens and refresh endpoints of an existing registration.

        The old server token stops resolving once the new one is stored.
        """
        self._require_operational(caller)
        if credentials.url != caller.platform_url:
            raise ValidationFailure(
                f"Versions URL cannot change on update "
                f"(registered '{caller.platform_url}', got '{credentials.url}')"
            )

        with log_context(platform_url=caller.platform_url, operation="credentials.put"):
            version, endpoints = await self.negotiator.negotiate(credentials.url, credentials.token)

            server_token = generate_token()
            await self.repo.save_registration(
                caller.platform_url,
                version=version.version,
                endpoints=endpoints,
                roles=credentials.roles,
                client_token=credentials.token,
                server_token=server_token,
            )

            log_checkpoint("tokens_rotated", {"side": "receiver", "version": version.version})

        return self._success(build_own_credentials(self.config, server_token).to_wire())

    async def delete(self, caller: AuthenticatedCaller) -> OcpiResponseBody:
        """Invalidate every token of the caller's platform."""
        self._require_operational(caller)

        with log_context(platform_url=caller.platform_url, operation="credentials.delete"):
            await self.repo.unregister_platform(caller.platform_url)
            log_checkpoint("platform_unregistered", {"side": "receiver"})

        return self._success(None)


__all__ = ["build_own_credentials", "CredentialsServerService"]
