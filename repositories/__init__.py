# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Registry access layer
# PURPOSE: Partner platform registry implementations
# CREATED: 18 OCT 2026
# ============================================================================
"""
Repositories Module

Provides the partner platform registry. The in-memory registry is the
default; the PostgreSQL registry uses psycopg3 async with connection pooling.

Usage:
    from repositories import create_platform_repository

    repo = await create_platform_repository(config.ocpi)
    platform = await repo.get_platform(url)
"""

from typing import Optional

from core.config import OcpiConfig, RegistryBackend
from .database import get_pool, init_pool, close_pool
from .platform_repo import PlatformRepository, InMemoryPlatformRepository
from .postgres_platform_repo import PostgresPlatformRepository


async def create_platform_repository(config: Optional[OcpiConfig] = None) -> PlatformRepository:
    """
    Create the registry selected by configuration.

    For postgres the global pool is opened and the schema ensured.
    """
    config = config or OcpiConfig.from_env()

    if config.registry_backend == RegistryBackend.POSTGRES:
        pool = await get_pool()
        repo = PostgresPlatformRepository(pool)
        await repo.ensure_schema()
        return repo

    return InMemoryPlatformRepository()


__all__ = [
    "get_pool",
    "init_pool",
    "close_pool",
    "PlatformRepository",
    "InMemoryPlatformRepository",
    "PostgresPlatformRepository",
    "create_platform_repository",
]
