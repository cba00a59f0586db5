# ============================================================================
# TOKEN AUTHENTICATOR
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Inbound token resolution
# PURPOSE: Authorization header -> platform identity and token role
# CREATED: 18 OCT 2026
# ============================================================================
"""
Token Authenticator

Resolves the token of an inbound call against the registry:

    server token of a platform    -> OPERATIONAL (module traffic)
    unconsumed token A            -> REGISTRATION (credentials POST, versions)
    anything else                 -> InvalidToken

Runs before any handler body (see api/dependencies.py).
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from core.contracts import TokenRole
from core.errors import InvalidToken, MalformedAuthorization, MissingAuthorization
from core.logging import ComponentType, get_logger
from core.models.platform import PendingRegistration, Platform
from core.tokens import decode_authorization, mask_token
from repositories.platform_repo import PlatformRepository

logger = get_logger(__name__, ComponentType.AUTH)


@dataclass
class AuthenticatedCaller:
    """Identity behind an inbound token."""

    token: str
    role: TokenRole
    platform_url: Optional[str] = None
    platform: Optional[Platform] = None
    pending: Optional[PendingRegistration] = None

    @property
    def is_operational(self) -> bool:
        return self.role == TokenRole.OPERATIONAL


class TokenAuthenticator:
    """Authenticates inbound calls against the platform registry."""

    def __init__(self, repo: PlatformRepository):
        self.repo = repo

    async def resolve(self, token: str) -> AuthenticatedCaller:
        """Resolve a raw token. Server tokens win over tokens A."""
        platform = await self.repo.get_platform_by_server_token(token)
        if platform is not None:
            return AuthenticatedCaller(
                token=token,
                role=TokenRole.OPERATIONAL,
                platform_url=platform.url,
                platform=platform,
            )

        pending = await self.repo.get_pending_registration(token)
        if pending is not None:
            return AuthenticatedCaller(
                token=token,
                role=TokenRole.REGISTRATION,
                platform_url=pending.platform_url,
                pending=pending,
            )

        logger.info(f"Rejected unknown token {mask_token(token)}")
        raise InvalidToken()

    async def authenticate(
        self,
        authorization: Optional[str],
        allowed_roles: Optional[Iterable[TokenRole]] = None,
    ) -> AuthenticatedCaller:
        """
        Authenticate an Authorization header value.

        Args:
            authorization: Raw header value, None when absent
            allowed_roles: Token roles accepted by the endpoint (default: any)

        Raises:
            MissingAuthorization, MalformedAuthorization, InvalidToken
        """
        if authorization is None or not authorization.strip():
            raise MissingAuthorization()

        token = decode_authorization(authorization)
        if token is None:
            raise MalformedAuthorization("Authorization header must be 'Token <base64 token>'")

        caller = await self.resolve(token)

        if allowed_roles is not None and caller.role not in set(allowed_roles):
            logger.info(
                f"Token {mask_token(token)} has role {caller.role.value}, "
                f"not accepted here"
            )
            raise InvalidToken()

        return caller


__all__ = ["AuthenticatedCaller", "TokenAuthenticator"]
