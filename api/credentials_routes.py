# ============================================================================
# CREDENTIALS ROUTES
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - OCPI credentials module endpoints
# PURPOSE: Inbound registration, rotation and unregistration
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials Routes

Mounted under {OCPI_BASE_PATH}/{version}, e.g. /ocpi/2.2.1/credentials.

Endpoints:
- GET    /credentials  - Our credentials for the caller (server token)
- POST   /credentials  - Complete registration (token A)
- PUT    /credentials  - Rotate tokens / refresh endpoints (server token)
- DELETE /credentials  - Unregister (server token)

The token dependency runs before the body is read, so an unauthenticated
call never reaches body parsing.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError

from core.errors import TransportDecodeFailure, ValidationFailure
from core.models.credentials import Credentials
from services.token_authenticator import AuthenticatedCaller
from .dependencies import require_operational_token, require_token
from .responses import OcpiResponder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["credentials"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_credentials_service = None
_responder = None


def set_credentials_services(credentials_service, responder: OcpiResponder):
    """Called by main.py at startup to inject the credentials service."""
    global _credentials_service, _responder
    _credentials_service = credentials_service
    _responder = responder


def _get_credentials_service():
    """Get the credentials service, raising 503 if not initialized."""
    if _credentials_service is None:
        raise HTTPException(503, "Credentials service not initialized")
    return _credentials_service


# ============================================================================
# BODY PARSING
# ============================================================================

async def _read_credentials(request: Request) -> Credentials:
    """Parse the request body as Credentials."""
    try:
        payload = await request.json()
    except ValueError:
        raise TransportDecodeFailure()

    try:
        return Credentials.model_validate(payload)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        )
        raise ValidationFailure(f"Invalid credentials: {problems}")


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/credentials")
async def get_credentials(
    request: Request,
    caller: AuthenticatedCaller = Depends(require_operational_token),
):
    """Our credentials for the calling partner. No state change."""
    svc = _get_credentials_service()
    return _responder.respond(request, await svc.get(caller))


@router.post("/credentials")
async def post_credentials(
    request: Request,
    caller: AuthenticatedCaller = Depends(require_token),
):
    """
    Complete a registration.

    Token A -> negotiate with the partner, issue a server token.
    A server token here means the partner is already registered (405).
    """
    svc = _get_credentials_service()
    credentials = await _read_credentials(request)
    return _responder.respond(request, await svc.post(caller, credentials))


@router.put("/credentials")
async def put_credentials(
    request: Request,
    caller: AuthenticatedCaller = Depends(require_operational_token),
):
    """Rotate tokens and refresh endpoints of an existing registration."""
    svc = _get_credentials_service()
    credentials = await _read_credentials(request)
    return _responder.respond(request, await svc.put(caller, credentials))


@router.delete("/credentials")
async def delete_credentials(
    request: Request,
    caller: AuthenticatedCaller = Depends(require_operational_token),
):
    """Unregister: every token of the platform stops resolving."""
    svc = _get_credentials_service()
    return _responder.respond(request, await svc.delete(caller))
