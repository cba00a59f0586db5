# ============================================================================
# OCPI EXCHANGE - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - FastAPI application entry point
# PURPOSE: Wire registry, services and routers into one application
# CREATED: 18 OCT 2026
# ============================================================================
"""
OCPI Exchange Main Application

FastAPI application that:
1. Serves the OCPI versions and credentials modules to partners
2. Offers admin endpoints to onboard partners (token A, register, rotate)
3. Renders every response through the OCPI envelope layer

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from __version__ import __version__, BUILD_DATE, EPOCH, OCPI_PROTOCOL_VERSION
from fastapi.middleware.cors import CORSMiddleware

from core.clock import Clock
from core.config import Config, RegistryBackend, get_config
from infrastructure.partner_client import PartnerClient
from repositories import PlatformRepository, close_pool, create_platform_repository
from services import (
    CredentialsServerService,
    RegistrationService,
    TokenAuthenticator,
    VersionNegotiator,
    VersionsService,
)
from api import (
    OcpiResponder,
    admin_router,
    credentials_router,
    install_exception_handlers,
    install_request_context,
    set_admin_services,
    set_auth_services,
    set_credentials_services,
    set_versions_services,
    versions_router,
)
from health import health_router, set_health_services

# Configure logging using our structured logging system
from core.logging import configure_logging, get_logger

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__)


def wire_services(
    config: Config,
    repo: PlatformRepository,
    responder: OcpiResponder,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Build services around a registry and inject them into the routers."""
    partner_client = PartnerClient(config.http, transport=transport)
    negotiator = VersionNegotiator(partner_client, supported_version=config.ocpi.version)
    authenticator = TokenAuthenticator(repo)

    credentials_service = CredentialsServerService(
        repo, negotiator, config.ocpi, clock=responder.clock
    )
    registration_service = RegistrationService(repo, negotiator, partner_client, config.ocpi)

    set_auth_services(authenticator, admin_api_key=config.ocpi.admin_api_key, pagination=config.pagination)
    set_credentials_services(credentials_service, responder)
    set_versions_services(VersionsService(config.ocpi), responder)
    set_admin_services(repo, registration_service, responder, config.ocpi.own_versions_url)
    set_health_services(repo)

    logger.info(
        f"Services wired (registry={type(repo).__name__}, "
        f"versions_url={config.ocpi.own_versions_url})"
    )


def create_app(
    config: Optional[Config] = None,
    repo: Optional[PlatformRepository] = None,
    clock: Optional[Clock] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the application.

    When repo is given the services are wired immediately (tests, embedding);
    otherwise the registry is created on startup from configuration.
    """
    config = config or get_config()
    responder = OcpiResponder(clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Initializes the registry on startup, closes the pool on shutdown.
        """
        logger.info(
            f"Starting OCPI Exchange v{__version__} "
            f"(OCPI {config.ocpi.version}, Epoch {EPOCH}, Build {BUILD_DATE})"
        )

        if repo is None:
            registry = await create_platform_repository(config.ocpi)
            wire_services(config, registry, responder, transport)

        yield

        logger.info("Shutting down OCPI Exchange...")
        if repo is None and config.ocpi.registry_backend == RegistryBackend.POSTGRES:
            await close_pool()
        logger.info("OCPI Exchange stopped")

    app = FastAPI(
        title="OCPI Exchange",
        description=f"OCPI {OCPI_PROTOCOL_VERSION} credentials registration and authentication",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_request_context(app)
    install_exception_handlers(app, responder)

    # Include health check routes (no prefix - /livez, /readyz)
    app.include_router(health_router)

    # OCPI surface
    app.include_router(versions_router, prefix=config.ocpi.base_path)
    app.include_router(credentials_router, prefix=config.ocpi.module_path)

    # Operator surface
    app.include_router(admin_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "OCPI Exchange",
            "version": __version__,
            "ocpi_version": config.ocpi.version,
            "epoch": EPOCH,
            "build_date": BUILD_DATE,
            "versions_url": config.ocpi.own_versions_url,
            "docs": "/docs",
        }

    if repo is not None:
        wire_services(config, repo, responder, transport)

    return app


app = create_app()


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
