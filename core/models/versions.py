# ============================================================================
# VERSION DISCOVERY MODELS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain model - Version list and version details documents
# PURPOSE: Version, VersionDetails, Endpoint and endpoint lookup
# CREATED: 18 OCT 2026
# ============================================================================
"""
Version Discovery Models

A platform publishes its supported protocol versions at its versions URL.
Each version links to a details document listing module endpoints.
"""

from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from core.contracts import InterfaceRole, ModuleID


class Version(BaseModel):
    """Entry of a versions list."""

    version: str = Field(..., min_length=1, max_length=10)
    url: str = Field(..., min_length=1, max_length=255)


class Endpoint(BaseModel):
    """
    Module endpoint advertised by a platform.

    identifier is kept as a plain string so modules outside ModuleID
    (custom or newer modules) survive a round trip.
    """

    identifier: str = Field(..., min_length=1)
    role: InterfaceRole
    url: str = Field(..., min_length=1, max_length=255)


class VersionDetails(BaseModel):
    """Endpoints of one protocol version."""

    version: str = Field(..., min_length=1, max_length=10)
    endpoints: List[Endpoint] = Field(default_factory=list)


def find_endpoint(
    endpoints: Iterable[Endpoint],
    module: Union[ModuleID, str],
    role: Optional[InterfaceRole] = None,
) -> Optional[Endpoint]:
    """
    Find the endpoint for a module.

    When role is given, an endpoint with that role wins; otherwise the first
    endpoint for the module is returned.
    """
    identifier = module.value if isinstance(module, ModuleID) else module
    candidates = [e for e in endpoints if e.identifier == identifier]
    if not candidates:
        return None
    if role is not None:
        for endpoint in candidates:
            if endpoint.role == role:
                return endpoint
    return candidates[0]


__all__ = ["Version", "Endpoint", "VersionDetails", "find_endpoint"]
