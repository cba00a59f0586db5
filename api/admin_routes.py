# ============================================================================
# ADMIN ROUTES
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Operator endpoints for partner onboarding
# PURPOSE: Issue tokens A, drive outbound registration, inspect the registry
# CREATED: 18 OCT 2026
# ============================================================================
"""
Admin Routes

Operator-facing endpoints. Protected by X-API-Key when OCPI_ADMIN_API_KEY
is set. Responses use the OCPI envelope; tokens are always masked except
a freshly issued token A, which has to be handed to the partner.

Endpoints:
- POST /admin/platforms/token-a     - Issue a token A (partner -> PENDING)
- POST /admin/platforms/register    - Register with a partner
- POST /admin/platforms/update      - Rotate tokens with a partner
- POST /admin/platforms/unregister  - Unregister from a partner
- GET  /admin/platforms             - Paginated registry listing
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from core.errors import NotRegistered
from core.logging import log_checkpoint, log_context
from core.models.envelope import SearchResult
from core.tokens import generate_token
from .dependencies import PageParams, pagination_params, require_admin_key
from .responses import OcpiResponder
from .schemas import (
    IssueTokenARequest,
    PartnerCredentialsSummary,
    PlatformSummary,
    PlatformUrlRequest,
    RegisterPlatformRequest,
    TokenAResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/platforms",
    tags=["admin"],
    dependencies=[Depends(require_admin_key)],
)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

_repo = None
_registration_service = None
_responder = None
_own_versions_url = None


def set_admin_services(repo, registration_service, responder: OcpiResponder, own_versions_url: str):
    """Called by main.py at startup to inject registry and registration service."""
    global _repo, _registration_service, _responder, _own_versions_url
    _repo = repo
    _registration_service = registration_service
    _responder = responder
    _own_versions_url = own_versions_url


def _get_repo():
    """Get the registry, raising 503 if not initialized."""
    if _repo is None:
        raise HTTPException(503, "Platform registry not initialized")
    return _repo


def _get_registration_service():
    """Get the registration service, raising 503 if not initialized."""
    if _registration_service is None:
        raise HTTPException(503, "Registration service not initialized")
    return _registration_service


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/token-a")
async def issue_token_a(request: Request, body: IssueTokenARequest):
    """Issue a single-use registration token for a partner."""
    repo = _get_repo()
    pending = await repo.issue_token_a(generate_token(), platform_url=body.platform_url)

    with log_context(platform_url=body.platform_url):
        log_checkpoint("token_a_issued", {"bound": body.platform_url is not None})

    response = TokenAResponse.from_pending(pending, _own_versions_url)
    return _responder.success(request, response.model_dump(mode="json"))


@router.post("/register")
async def register_platform(request: Request, body: RegisterPlatformRequest):
    """Register with a partner using the token A it issued to us."""
    svc = _get_registration_service()
    partner = await svc.register(body.versions_url, body.token_a)
    return _responder.success(
        request, PartnerCredentialsSummary.from_credentials(partner).model_dump(mode="json")
    )


@router.post("/update")
async def update_platform(request: Request, body: PlatformUrlRequest):
    """Rotate tokens with a registered partner."""
    svc = _get_registration_service()
    partner = await svc.update(body.versions_url)
    return _responder.success(
        request, PartnerCredentialsSummary.from_credentials(partner).model_dump(mode="json")
    )


@router.post("/unregister")
async def unregister_platform(request: Request, body: PlatformUrlRequest):
    """Unregister from a partner; returns the platform record afterwards."""
    svc = _get_registration_service()
    await svc.unregister(body.versions_url)

    platform = await _get_repo().get_platform(body.versions_url)
    if platform is None:
        raise NotRegistered(body.versions_url)
    return _responder.success(request, PlatformSummary.from_platform(platform).model_dump(mode="json"))


@router.get("")
async def list_platforms(request: Request, page: PageParams = Depends(pagination_params)):
    """Paginated listing of the registry, tokens masked."""
    repo = _get_repo()
    result = await repo.list_platforms(offset=page.offset, limit=page.limit)
    summaries = SearchResult(
        items=[PlatformSummary.from_platform(p).model_dump(mode="json") for p in result.items],
        total_count=result.total_count,
        limit=result.limit,
        offset=result.offset,
    )
    return _responder.success(request, summaries)
