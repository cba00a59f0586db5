# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core - Request/Response schemas
# PURPOSE: Pydantic models for the admin API
# CREATED: 18 OCT 2026
# ============================================================================
"""
API Schemas

Request and response models for the admin API. The OCPI endpoints use the
domain models in core/models directly.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from core.contracts import RegistrationState
from core.models.credentials import CredentialRole, Credentials
from core.models.platform import PendingRegistration, Platform
from core.tokens import mask_token


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class IssueTokenARequest(BaseModel):
    """Request to issue a registration token for a partner."""
    platform_url: Optional[str] = Field(
        None,
        max_length=255,
        description="Bind the token to this partner versions URL",
    )


class RegisterPlatformRequest(BaseModel):
    """Request to register with a partner using its token A."""
    versions_url: str = Field(..., min_length=1, max_length=255, description="Partner versions URL")
    token_a: str = Field(..., min_length=1, max_length=64, description="Token A received from the partner")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "versions_url": "https://partner.example.com/ocpi/versions",
                    "token_a": "9e8f1b7c-partner-issued",
                }
            ]
        }
    }


class PlatformUrlRequest(BaseModel):
    """Request naming a partner by its versions URL."""
    versions_url: str = Field(..., min_length=1, max_length=255)


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class TokenAResponse(BaseModel):
    """Issued token A, to hand to the partner out of band."""
    token_a: str
    platform_url: Optional[str] = None
    versions_url: str = Field(..., description="Our versions URL, to hand over with the token")
    issued_at: datetime

    @classmethod
    def from_pending(cls, pending: PendingRegistration, versions_url: str) -> "TokenAResponse":
        return cls(
            token_a=pending.token_a,
            platform_url=pending.platform_url,
            versions_url=versions_url,
            issued_at=pending.issued_at,
        )


class PlatformSummary(BaseModel):
    """Platform record with tokens masked."""
    url: str
    registration_state: RegistrationState
    active: bool = False
    version: Optional[str] = None
    roles: List[CredentialRole] = Field(default_factory=list)
    endpoint_count: int = 0
    token_a: str
    client_token: str
    server_token: str
    created_at: datetime
    updated_at: datetime
    unregistered_at: Optional[datetime] = None

    @classmethod
    def from_platform(cls, platform: Platform) -> "PlatformSummary":
        return cls(
            url=platform.url,
            registration_state=platform.registration_state,
            active=platform.registration_state.accepts_tokens(),
            version=platform.version,
            roles=platform.roles,
            endpoint_count=len(platform.endpoints or []),
            token_a=mask_token(platform.token_a),
            client_token=mask_token(platform.client_token),
            server_token=mask_token(platform.server_token),
            created_at=platform.created_at,
            updated_at=platform.updated_at,
            unregistered_at=platform.unregistered_at,
        )


class PartnerCredentialsSummary(BaseModel):
    """Partner credentials as returned by a handshake, token masked."""
    url: str
    token: str
    roles: List[CredentialRole]

    @classmethod
    def from_credentials(cls, credentials: Credentials) -> "PartnerCredentialsSummary":
        return cls(
            url=credentials.url,
            token=mask_token(credentials.token),
            roles=credentials.roles,
        )


__all__ = [
    "IssueTokenARequest",
    "RegisterPlatformRequest",
    "PlatformUrlRequest",
    "TokenAResponse",
    "PlatformSummary",
    "PartnerCredentialsSummary",
]
