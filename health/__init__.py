# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Infrastructure - Health probes
# PURPOSE: Kubernetes liveness and readiness probes
# CREATED: 18 OCT 2026
# ============================================================================
"""
Health Check Module

- /livez: Process alive (instant, for Kubernetes liveness probe)
- /readyz: Platform registry reachable

Usage:
    from health import health_router, set_health_services

    set_health_services(repo)
    app.include_router(health_router)
"""

from health.router import health_router, set_health_services

__all__ = [
    "health_router",
    "set_health_services",
]
