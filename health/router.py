# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Kubernetes probes
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    GET /livez   - Liveness probe (is the process alive?)
                   Always 200 while the process is running.

    GET /readyz  - Readiness probe (can we serve partners?)
                   200 when the platform registry answers, 503 otherwise.

These sit outside the OCPI surface and return plain JSON, not envelopes.
"""

import logging

from fastapi.responses import JSONResponse
from fastapi import APIRouter

from __version__ import __version__, BUILD_DATE

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["Health"])

_repo = None


def set_health_services(repo):
    """Called by main.py at startup to inject the registry to probe."""
    global _repo
    _repo = repo


# ============================================================================
# LIVENESS PROBE
# ============================================================================

@health_router.get("/livez")
async def liveness_probe():
    """
    Kubernetes liveness probe.

    No external checks - just confirms the process is responsive.
    """
    return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}


# ============================================================================
# READINESS PROBE
# ============================================================================

@health_router.get("/readyz")
async def readiness_probe():
    """
    Kubernetes readiness probe.

    Ready once the registry is wired and answers a ping.
    """
    if _repo is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "registry not initialized"},
        )

    if not await _repo.ping():
        logger.warning("Readiness check failed: registry ping failed")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "registry unavailable"},
        )

    return {"status": "ready", "registry": type(_repo).__name__}


__all__ = ["health_router", "set_health_services"]
