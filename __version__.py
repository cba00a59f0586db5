# ============================================================================
# VERSION - OCPI EXCHANGE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# ============================================================================
"""
Version information for the OCPI exchange service.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch.build
# Criteria for 0.2 - registration completes against a live partner
__version__ = "0.1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-18"

# Protocol
OCPI_PROTOCOL_VERSION = "2.2.1"
EPOCH = 1
CODENAME = "Credentials Exchange"
