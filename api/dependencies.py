# ============================================================================
# API DEPENDENCIES
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - FastAPI dependencies shared by all routers
# PURPOSE: Token authentication, admin key check, pagination parameters
# CREATED: 18 OCT 2026
# ============================================================================
"""
API Dependencies

Authentication runs as a FastAPI dependency, so it completes before any
handler body executes. A failure raises an OcpiError that the envelope
layer renders as 401 with WWW-Authenticate: Token.

    require_token              token A or server token
    require_operational_token  server token only
    require_admin_key          X-API-Key against OCPI_ADMIN_API_KEY
    pagination_params          offset / limit with the configured clamp
"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Query

from core.config import PaginationDefaults
from core.contracts import TokenRole
from services.token_authenticator import AuthenticatedCaller, TokenAuthenticator

logger = logging.getLogger(__name__)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_authenticator: Optional[TokenAuthenticator] = None
_admin_api_key: Optional[str] = None
_pagination: PaginationDefaults = PaginationDefaults()


def set_auth_services(
    authenticator: TokenAuthenticator,
    admin_api_key: Optional[str] = None,
    pagination: Optional[PaginationDefaults] = None,
):
    """Called by main.py at startup to inject the authenticator and settings."""
    global _authenticator, _admin_api_key, _pagination
    _authenticator = authenticator
    _admin_api_key = admin_api_key
    _pagination = pagination or PaginationDefaults()


def _get_authenticator() -> TokenAuthenticator:
    """Get the authenticator, raising 503 if not initialized."""
    if _authenticator is None:
        raise HTTPException(503, "Authenticator not initialized")
    return _authenticator


# ============================================================================
# TOKEN AUTHENTICATION
# ============================================================================

async def require_token(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedCaller:
    """Any valid token: pending token A or active server token."""
    return await _get_authenticator().authenticate(authorization)


async def require_operational_token(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedCaller:
    """Active server token only."""
    return await _get_authenticator().authenticate(
        authorization, allowed_roles=[TokenRole.OPERATIONAL]
    )


# ============================================================================
# ADMIN
# ============================================================================

async def require_admin_key(x_api_key: Optional[str] = Header(default=None)) -> None:
    """Check X-API-Key when an admin key is configured."""
    if _admin_api_key is None:
        return
    if x_api_key is None or not hmac.compare_digest(x_api_key, _admin_api_key):
        logger.warning("Rejected admin call with missing or wrong API key")
        raise HTTPException(401, "Invalid or missing API key")


# ============================================================================
# PAGINATION
# ============================================================================

@dataclass
class PageParams:
    offset: int
    limit: int


async def pagination_params(
    offset: int = Query(default=0, ge=0),
    limit: Optional[int] = Query(default=None, ge=0),
) -> PageParams:
    """Offset and effective limit (requested limit clamped to the maximum)."""
    return PageParams(offset=offset, limit=_pagination.clamp(limit))


__all__ = [
    "set_auth_services",
    "require_token",
    "require_operational_token",
    "require_admin_key",
    "PageParams",
    "pagination_params",
]
