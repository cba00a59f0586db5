# ============================================================================
# OCPI ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Foundation - Exceptions carrying OCPI and HTTP status
# PURPOSE: One exception hierarchy, rendered to envelopes at the HTTP boundary
# CREATED: 18 OCT 2026
# ============================================================================
"""
OCPI Errors

Every domain failure raised by services, the authenticator or the partner
client is an OcpiError. The envelope layer (api/responses.py) turns it into
a well-formed response using ``ocpi_status`` and ``http_status``; nothing
else needs to know about HTTP.

Families:
    Unauthenticated     -> 401 (+ WWW-Authenticate: Token)
    ValidationFailure   -> 400
    NotFound            -> 404
    Conflict            -> 405
    UpstreamFailure     -> 502
"""

from typing import Optional

from core.contracts import OcpiStatus


class OcpiError(Exception):
    """Base exception for protocol-level failures."""

    ocpi_status: OcpiStatus = OcpiStatus.SERVER_ERROR
    http_status: int = 500

    def __init__(self, message: Optional[str] = None, platform_url: Optional[str] = None):
        self.message = message or self.ocpi_status.message
        self.platform_url = platform_url
        super().__init__(self.message)


# ============================================================================
# AUTHENTICATION
# ============================================================================

class Unauthenticated(OcpiError):
    """Missing, malformed, unknown or already consumed token."""
    ocpi_status = OcpiStatus.CLIENT_ERROR
    http_status = 401


class MissingAuthorization(Unauthenticated):
    """No Authorization header on the request."""

    def __init__(self, message: str = "Authorization header is missing"):
        super().__init__(message)


class MalformedAuthorization(Unauthenticated):
    """Authorization header is not ``Token <base64>``."""


class InvalidToken(Unauthenticated):
    """Token does not resolve to a pending registration or an active platform."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


# ============================================================================
# CLIENT ERRORS
# ============================================================================

class ValidationFailure(OcpiError):
    """Malformed payload, missing required field, empty roles."""
    ocpi_status = OcpiStatus.CLIENT_INVALID_PARAMETERS
    http_status = 400


class TransportDecodeFailure(ValidationFailure):
    """Request body is not valid JSON."""

    def __init__(self, message: str = "Request body is not valid JSON"):
        super().__init__(message)


class NotFound(OcpiError):
    """Read of a nonexistent resource."""
    ocpi_status = OcpiStatus.CLIENT_ERROR
    http_status = 404


class NotRegistered(NotFound):
    """No active registration exists with the partner."""

    def __init__(self, platform_url: str):
        super().__init__(f"Platform '{platform_url}' is not registered", platform_url=platform_url)


class Conflict(OcpiError):
    """Operation collides with an existing registration."""
    ocpi_status = OcpiStatus.CLIENT_ERROR
    http_status = 405


class AlreadyRegistered(Conflict):
    """Receiver side: the partner already holds an active server token."""

    def __init__(self, platform_url: Optional[str] = None):
        target = f"Platform '{platform_url}'" if platform_url else "Platform"
        super().__init__(
            f"{target} is already registered, use PUT to update credentials",
            platform_url=platform_url,
        )


class DuplicateRegistration(Conflict):
    """Sender side: refusing to overwrite an active relationship."""

    def __init__(self, platform_url: str):
        super().__init__(
            f"Platform '{platform_url}' already has an active registration, use update instead",
            platform_url=platform_url,
        )


# ============================================================================
# UPSTREAM (PARTNER) ERRORS
# ============================================================================

class UpstreamFailure(OcpiError):
    """The partner platform could not be used."""
    ocpi_status = OcpiStatus.SERVER_UNUSABLE_API
    http_status = 502


class TransportFailure(UpstreamFailure):
    """Network-level failure while calling the partner."""


class UnreachablePartner(TransportFailure):
    """Connection refused, DNS failure or timeout."""


class MalformedDiscoveryDocument(UpstreamFailure):
    """Partner response could not be parsed into the expected shape."""


class RegistrationRejected(UpstreamFailure):
    """Partner answered a credentials call with a non-success status."""

    def __init__(self, message: str, platform_url: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, platform_url=platform_url)


class VersionMismatch(UpstreamFailure):
    """No mutually supported protocol version."""
    ocpi_status = OcpiStatus.SERVER_UNSUPPORTED_VERSION


class NoMatchingEndpoints(UpstreamFailure):
    """Partner does not expose an endpoint we need."""
    ocpi_status = OcpiStatus.SERVER_NO_MATCHING_ENDPOINTS


__all__ = [
    "OcpiError",
    "Unauthenticated",
    "MissingAuthorization",
    "MalformedAuthorization",
    "InvalidToken",
    "ValidationFailure",
    "TransportDecodeFailure",
    "NotFound",
    "NotRegistered",
    "Conflict",
    "AlreadyRegistered",
    "DuplicateRegistration",
    "UpstreamFailure",
    "TransportFailure",
    "UnreachablePartner",
    "MalformedDiscoveryDocument",
    "RegistrationRejected",
    "VersionMismatch",
    "NoMatchingEndpoints",
]
