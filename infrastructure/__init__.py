# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Infrastructure - Repository base and partner HTTP access
# PURPOSE: Shared repository patterns and outbound calls to partners
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the OCPI exchange service.

Provides:
- BaseRepository / RepositoryError: error and logging patterns for registries
- PartnerClient: authenticated async HTTP calls to partner platforms

Usage:
    from infrastructure import PartnerClient

    client = PartnerClient()
    response = await client.get(versions_url, token)
    envelope = response.envelope()
"""

from infrastructure.base_repository import BaseRepository, RepositoryError
from infrastructure.partner_client import PartnerClient, PartnerResponse

__all__ = [
    # Repository patterns
    'BaseRepository',
    'RepositoryError',
    # Partner HTTP
    'PartnerClient',
    'PartnerResponse',
]
