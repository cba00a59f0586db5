# ============================================================================
# VERSIONS ROUTES
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - OCPI version discovery endpoints
# PURPOSE: Let partners negotiate with us
# CREATED: 18 OCT 2026
# ============================================================================
"""
Versions Routes

Mounted under {OCPI_BASE_PATH}, e.g. /ocpi/versions.

Endpoints:
- GET /versions            - Supported versions
- GET /versions/{version}  - Endpoints of one version

Both accept a pending token A (partners negotiate before POSTing
credentials) or an active server token.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from services.token_authenticator import AuthenticatedCaller
from .dependencies import require_token
from .responses import OcpiResponder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["versions"])


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_versions_service = None
_responder = None


def set_versions_services(versions_service, responder: OcpiResponder):
    """Called by main.py at startup to inject the versions service."""
    global _versions_service, _responder
    _versions_service = versions_service
    _responder = responder


def _get_versions_service():
    """Get the versions service, raising 503 if not initialized."""
    if _versions_service is None:
        raise HTTPException(503, "Versions service not initialized")
    return _versions_service


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/versions")
async def list_versions(
    request: Request,
    caller: AuthenticatedCaller = Depends(require_token),
):
    """Versions this platform supports."""
    svc = _get_versions_service()
    versions = [v.model_dump(mode="json") for v in svc.list_versions()]
    return _responder.success(request, versions)


@router.get("/versions/{version}")
async def version_details(
    version: str,
    request: Request,
    caller: AuthenticatedCaller = Depends(require_token),
):
    """Module endpoints of one version."""
    svc = _get_versions_service()
    details = svc.version_details(version)
    return _responder.success(request, details.model_dump(mode="json"))
