# ============================================================================
# PLATFORM MODEL
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain model - Partner platform registry
# PURPOSE: Track partner platforms, their endpoints and the tokens in play
# CREATED: 18 OCT 2026
# ============================================================================
"""
Platform Model

One record per partner platform, keyed by the partner's version discovery
URL. The record is created on first contact and mutated step by step as
registration progresses (version, endpoints, roles, tokens).

Token naming (always from this system's point of view):
    token_a       Registration token we received from the partner and hold
                  while our own registration toward it is in flight.
    client_token  Token we present when calling the partner.
    server_token  Token the partner presents when calling us.

Tokens A issued by us to a partner live in PendingRegistration until the
partner consumes them with a credentials POST.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from core.contracts import RegistrationState
from core.models.credentials import CredentialRole
from core.models.versions import Endpoint


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Platform(BaseModel):
    """
    Partner platform registry entry.

    Maps to: ocpi.platforms
    """

    # Identity
    url: str = Field(..., min_length=1, max_length=255, description="Partner versions URL")

    # Negotiated
    version: Optional[str] = Field(default=None, max_length=10)
    endpoints: Optional[List[Endpoint]] = None
    roles: List[CredentialRole] = Field(default_factory=list)

    # Tokens
    token_a: Optional[str] = Field(default=None, max_length=64)
    client_token: Optional[str] = Field(default=None, max_length=64)
    server_token: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    unregistered_at: Optional[datetime] = None

    model_config = {"frozen": False}

    @property
    def registration_state(self) -> RegistrationState:
        """Derived lifecycle state."""
        if self.server_token or self.client_token:
            return RegistrationState.REGISTERED
        if self.token_a:
            return RegistrationState.PENDING
        if self.unregistered_at is not None:
            return RegistrationState.UNREGISTERED
        return RegistrationState.UNKNOWN

    @property
    def is_registered(self) -> bool:
        """Holds an active server token."""
        return bool(self.server_token)


class PendingRegistration(BaseModel):
    """
    Token A issued by this system, not yet consumed.

    platform_url, when set, binds the token to one partner versions URL.

    Maps to: ocpi.pending_registrations
    """

    token_a: str = Field(..., min_length=1, max_length=64)
    platform_url: Optional[str] = Field(default=None, max_length=255)
    issued_at: datetime = Field(default_factory=_utcnow)


__all__ = ["Platform", "PendingRegistration"]
