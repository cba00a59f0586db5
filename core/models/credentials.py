# ============================================================================
# CREDENTIALS MODELS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain model - Credentials payload exchanged during registration
# PURPOSE: Credentials, CredentialRole, BusinessDetails, Image and partials
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials Models

The Credentials object is the body of every credentials call. It tells the
other party which token to present, where our version discovery lives, and
which roles we play.

Example:
    {
        "token": "ebf3b399-779f-4497-9b9d-ac6ad3cc44d2",
        "url": "https://example.com/ocpi/versions",
        "roles": [{
            "role": "CPO",
            "party_id": "EXA",
            "country_code": "NL",
            "business_details": {"name": "Example Operator"}
        }]
    }

Partial variants (all fields optional) exist for PATCH-style merges.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.contracts import Role


class ImageCategory(str, Enum):
    """What an image depicts."""
    CHARGER = "CHARGER"
    ENTRANCE = "ENTRANCE"
    LOCATION = "LOCATION"
    NETWORK = "NETWORK"
    OPERATOR = "OPERATOR"
    OTHER = "OTHER"
    OWNER = "OWNER"


class Image(BaseModel):
    """Reference to an image, e.g. a company logo."""

    url: str = Field(..., max_length=255)
    thumbnail: Optional[str] = Field(default=None, max_length=255)
    category: ImageCategory
    type: str = Field(..., max_length=4, description="Image type like gif, jpeg, png, svg")
    width: Optional[int] = Field(default=None, ge=0, le=99999)
    height: Optional[int] = Field(default=None, ge=0, le=99999)


class BusinessDetails(BaseModel):
    """Name and branding of the party behind a role."""

    name: str = Field(..., min_length=1, max_length=100)
    website: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[Image] = None

    def to_partial(self) -> "BusinessDetailsPartial":
        return BusinessDetailsPartial(**self.model_dump())


class CredentialRole(BaseModel):
    """One (role, country_code, party_id) a platform operates under."""

    role: Role
    business_details: Optional[BusinessDetails] = None
    party_id: str = Field(..., min_length=3, max_length=3)
    country_code: str = Field(..., min_length=2, max_length=2)

    def to_partial(self) -> "CredentialRolePartial":
        return CredentialRolePartial(
            role=self.role,
            business_details=self.business_details.to_partial() if self.business_details else None,
            party_id=self.party_id,
            country_code=self.country_code,
        )


class Credentials(BaseModel):
    """
    Credentials object exchanged over the credentials module.

    token is the credential the receiving party must present when calling
    the party that sent this object.
    """

    token: str = Field(..., min_length=1, max_length=64)
    url: str = Field(..., min_length=1, max_length=255, description="Versions endpoint URL")
    roles: List[CredentialRole] = Field(..., min_length=1)

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict, optional fields omitted when unset."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_partial(self) -> "CredentialsPartial":
        return CredentialsPartial(
            token=self.token,
            url=self.url,
            roles=[role.to_partial() for role in self.roles],
        )


# ============================================================================
# PARTIAL TYPES
# ============================================================================

class BusinessDetailsPartial(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = Field(default=None, max_length=255)
    logo: Optional[Image] = None


class CredentialRolePartial(BaseModel):
    role: Optional[Role] = None
    business_details: Optional[BusinessDetailsPartial] = None
    party_id: Optional[str] = Field(default=None, min_length=3, max_length=3)
    country_code: Optional[str] = Field(default=None, min_length=2, max_length=2)


class CredentialsPartial(BaseModel):
    token: Optional[str] = Field(default=None, max_length=64)
    url: Optional[str] = Field(default=None, max_length=255)
    roles: Optional[List[CredentialRolePartial]] = None


__all__ = [
    "ImageCategory",
    "Image",
    "BusinessDetails",
    "CredentialRole",
    "Credentials",
    "BusinessDetailsPartial",
    "CredentialRolePartial",
    "CredentialsPartial",
]
