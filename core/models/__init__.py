# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# CREATED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

All Pydantic models for the OCPI exchange service.
"""

from core.models.credentials import (
    ImageCategory,
    Image,
    BusinessDetails,
    CredentialRole,
    Credentials,
    BusinessDetailsPartial,
    CredentialRolePartial,
    CredentialsPartial,
)
from core.models.versions import Version, Endpoint, VersionDetails, find_endpoint
from core.models.platform import Platform, PendingRegistration
from core.models.envelope import SearchResult, paginate, OcpiResponseBody

__all__ = [
    # Credentials
    "ImageCategory",
    "Image",
    "BusinessDetails",
    "CredentialRole",
    "Credentials",
    "BusinessDetailsPartial",
    "CredentialRolePartial",
    "CredentialsPartial",
    # Versions
    "Version",
    "Endpoint",
    "VersionDetails",
    "find_endpoint",
    # Platform
    "Platform",
    "PendingRegistration",
    # Envelope
    "SearchResult",
    "paginate",
    "OcpiResponseBody",
]
