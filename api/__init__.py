# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - HTTP surface
# PURPOSE: OCPI routers, admin router and the response envelope layer
# CREATED: 18 OCT 2026
# ============================================================================
"""
API Module

Routers:
- credentials_routes: OCPI credentials module
- versions_routes: OCPI version discovery
- admin_routes: operator onboarding endpoints

The envelope layer (responses.py) renders every result and error.
"""

from .credentials_routes import router as credentials_router, set_credentials_services
from .versions_routes import router as versions_router, set_versions_services
from .admin_routes import router as admin_router, set_admin_services
from .dependencies import set_auth_services
from .responses import OcpiResponder, install_exception_handlers, install_request_context

__all__ = [
    "credentials_router",
    "set_credentials_services",
    "versions_router",
    "set_versions_services",
    "admin_router",
    "set_admin_services",
    "set_auth_services",
    "OcpiResponder",
    "install_exception_handlers",
    "install_request_context",
]
