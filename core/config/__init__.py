# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the exchange service.
"""

from core.config.defaults import (
    RegistryBackend,
    OcpiConfig,
    PaginationDefaults,
    HttpClientDefaults,
    Config,
    get_config,
    reset_config,
)

__all__ = [
    "RegistryBackend",
    "OcpiConfig",
    "PaginationDefaults",
    "HttpClientDefaults",
    "Config",
    "get_config",
    "reset_config",
]
