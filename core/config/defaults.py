# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Default configuration values
# PURPOSE: Own platform identity, pagination limits, partner client timeouts
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for the exchange service. Every value can be overridden
via environment variables.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum

from core.contracts import Role


class RegistryBackend(str, Enum):
    """Where the platform registry lives."""
    MEMORY = "memory"
    POSTGRES = "postgres"


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class OcpiConfig:
    """
    Identity of this platform and where it is mounted.

    versions_url is what partners receive in our Credentials payload and is
    what they negotiate against.
    """
    version: str = "2.2.1"
    base_url: str = "http://localhost:8000"
    base_path: str = "/ocpi"
    versions_url: Optional[str] = None

    # Own credentials role
    country_code: str = "NL"
    party_id: str = "EXA"
    role: Role = Role.CPO
    business_name: str = "Example Operator"
    business_website: Optional[str] = None

    # Operations
    admin_api_key: Optional[str] = None
    registry_backend: RegistryBackend = RegistryBackend.MEMORY

    @property
    def own_versions_url(self) -> str:
        """Versions URL advertised to partners."""
        if self.versions_url:
            return self.versions_url
        return f"{self.base_url.rstrip('/')}{self.base_path}/versions"

    @property
    def module_path(self) -> str:
        """Prefix of the module endpoints for the configured version."""
        return f"{self.base_path}/{self.version}"

    def module_url(self, module: str) -> str:
        """Absolute URL of one of our module endpoints."""
        return f"{self.base_url.rstrip('/')}{self.module_path}/{module}"

    @classmethod
    def from_env(cls) -> "OcpiConfig":
        """Create from environment variables."""
        return cls(
            version=os.getenv("OCPI_VERSION", "2.2.1"),
            base_url=os.getenv("OCPI_BASE_URL", "http://localhost:8000"),
            base_path=os.getenv("OCPI_BASE_PATH", "/ocpi"),
            versions_url=os.getenv("OCPI_VERSIONS_URL") or None,
            country_code=os.getenv("OCPI_COUNTRY_CODE", "NL"),
            party_id=os.getenv("OCPI_PARTY_ID", "EXA"),
            role=Role(os.getenv("OCPI_ROLE", Role.CPO.value).upper()),
            business_name=os.getenv("OCPI_BUSINESS_NAME", "Example Operator"),
            business_website=os.getenv("OCPI_BUSINESS_WEBSITE") or None,
            admin_api_key=os.getenv("OCPI_ADMIN_API_KEY") or None,
            registry_backend=RegistryBackend(
                os.getenv("OCPI_REGISTRY_BACKEND", RegistryBackend.MEMORY.value).lower()
            ),
        )


@dataclass(frozen=True)
class PaginationDefaults:
    """
    Defaults for paginated GET endpoints.

    A requested limit above max_limit is clamped, never rejected.
    """
    default_limit: int = 50
    max_limit: int = 100

    def clamp(self, limit: Optional[int]) -> int:
        """Effective page size for a requested limit."""
        if limit is None:
            return self.default_limit
        return max(0, min(limit, self.max_limit))

    @classmethod
    def from_env(cls) -> "PaginationDefaults":
        """Create from environment variables."""
        return cls(
            default_limit=int(os.getenv("OCPI_PAGE_DEFAULT_LIMIT", 50)),
            max_limit=int(os.getenv("OCPI_PAGE_MAX_LIMIT", 100)),
        )


@dataclass(frozen=True)
class HttpClientDefaults:
    """
    Timeouts for calls to partner platforms (seconds).

    One round trip per call; there are no retries.
    """
    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    write_timeout: float = 30.0
    pool_timeout: float = 5.0
    verify_tls: bool = True

    @classmethod
    def from_env(cls) -> "HttpClientDefaults":
        """Create from environment variables."""
        return cls(
            connect_timeout=float(os.getenv("OCPI_HTTP_CONNECT_TIMEOUT", 5.0)),
            read_timeout=float(os.getenv("OCPI_HTTP_READ_TIMEOUT", 30.0)),
            write_timeout=float(os.getenv("OCPI_HTTP_WRITE_TIMEOUT", 30.0)),
            pool_timeout=float(os.getenv("OCPI_HTTP_POOL_TIMEOUT", 5.0)),
            verify_tls=_env_bool("OCPI_HTTP_VERIFY_TLS", True),
        )


# ============================================================================
# GLOBAL CONFIG INSTANCE
# ============================================================================

@dataclass
class Config:
    """Container for all configuration sections."""
    ocpi: OcpiConfig = field(default_factory=OcpiConfig)
    pagination: PaginationDefaults = field(default_factory=PaginationDefaults)
    http: HttpClientDefaults = field(default_factory=HttpClientDefaults)
    log_level: str = "INFO"
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Create all sections from environment variables."""
        return cls(
            ocpi=OcpiConfig.from_env(),
            pagination=PaginationDefaults.from_env(),
            http=HttpClientDefaults.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("LOG_FORMAT", "").lower() == "json",
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """Get global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset config (for testing)."""
    global _config
    _config = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RegistryBackend",
    "OcpiConfig",
    "PaginationDefaults",
    "HttpClientDefaults",
    "Config",
    "get_config",
    "reset_config",
]
