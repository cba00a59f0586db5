# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Business logic layer
# PURPOSE: Credentials exchange, authentication and version negotiation
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the credentials handshake.
Services coordinate between the registry and partner HTTP calls.

Usage:
    from services import TokenAuthenticator, CredentialsServerService

    authenticator = TokenAuthenticator(repo)
    caller = await authenticator.authenticate(request.headers.get("Authorization"))
"""

from .credentials_interface import CredentialsInterface
from .token_authenticator import AuthenticatedCaller, TokenAuthenticator
from .version_negotiator import VersionNegotiator
from .versions_service import VersionsService
from .credentials_service import CredentialsServerService, build_own_credentials
from .credentials_client import CredentialsClient
from .registration_service import RegistrationService

__all__ = [
    "CredentialsInterface",
    "AuthenticatedCaller",
    "TokenAuthenticator",
    "VersionNegotiator",
    "VersionsService",
    "CredentialsServerService",
    "build_own_credentials",
    "CredentialsClient",
    "RegistrationService",
]
