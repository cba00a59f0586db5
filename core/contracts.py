# ============================================================================
# OCPI CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Foundation - Protocol enums shared by every layer
# PURPOSE: Status codes, roles, module identifiers, registration states
# CREATED: 18 OCT 2026
# EXPORTS: OcpiStatus, Role, InterfaceRole, ModuleID, TokenRole, RegistrationState
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the OCPI exchange service.

These values cross every boundary:
- Wire (JSON envelopes and credentials payloads)
- SQL (registry columns)
- Python (internal processing)
"""

from enum import Enum


# ============================================================================
# STATUS CODES
# ============================================================================

class OcpiStatus(int, Enum):
    """
    OCPI envelope status codes.

    Four digits to avoid confusion with HTTP codes:
        1xxx -> success
        2xxx -> client errors
        3xxx -> server errors
    """
    SUCCESS = 1000
    CLIENT_ERROR = 2000
    CLIENT_INVALID_PARAMETERS = 2001
    CLIENT_NOT_ENOUGH_INFORMATION = 2002
    CLIENT_UNKNOWN_LOCATION = 2003
    CLIENT_UNKNOWN_TOKEN = 2004
    SERVER_ERROR = 3000
    SERVER_UNUSABLE_API = 3001
    SERVER_UNSUPPORTED_VERSION = 3002
    SERVER_NO_MATCHING_ENDPOINTS = 3003

    @property
    def message(self) -> str:
        """Fixed human message for this status code."""
        return _STATUS_MESSAGES[self]

    def is_success(self) -> bool:
        return 1000 <= self.value < 2000

    def is_client_error(self) -> bool:
        return 2000 <= self.value < 3000

    def is_server_error(self) -> bool:
        return 3000 <= self.value < 4000


_STATUS_MESSAGES = {
    OcpiStatus.SUCCESS: "Success",
    OcpiStatus.CLIENT_ERROR: "Generic client error",
    OcpiStatus.CLIENT_INVALID_PARAMETERS: "Invalid or missing parameters",
    OcpiStatus.CLIENT_NOT_ENOUGH_INFORMATION: "Not enough information",
    OcpiStatus.CLIENT_UNKNOWN_LOCATION: "Unknown location",
    OcpiStatus.CLIENT_UNKNOWN_TOKEN: "Unknown token",
    OcpiStatus.SERVER_ERROR: "Generic server error",
    OcpiStatus.SERVER_UNUSABLE_API: "Unable to use the client's API",
    OcpiStatus.SERVER_UNSUPPORTED_VERSION: "Unsupported version",
    OcpiStatus.SERVER_NO_MATCHING_ENDPOINTS: "No matching endpoints or expected endpoints missing between parties",
}


# ============================================================================
# ROLES
# ============================================================================

class Role(str, Enum):
    """Party role advertised in a credentials payload."""
    CPO = "CPO"      # Charge Point Operator
    EMSP = "EMSP"    # e-Mobility Service Provider
    HUB = "HUB"
    NAP = "NAP"      # National Access Point
    NSP = "NSP"      # Navigation Service Provider
    OTHER = "OTHER"
    SCSP = "SCSP"    # Smart Charging Service Provider


class InterfaceRole(str, Enum):
    """
    Role of a module endpoint.

    A partner endpoint advertised as RECEIVER is called by us as SENDER.
    """
    SENDER = "SENDER"
    RECEIVER = "RECEIVER"

    def counterpart(self) -> "InterfaceRole":
        """The role the other party plays for the same module."""
        if self is InterfaceRole.SENDER:
            return InterfaceRole.RECEIVER
        return InterfaceRole.SENDER


class ModuleID(str, Enum):
    """Module identifiers used in version detail documents."""
    CDRS = "cdrs"
    CHARGING_PROFILES = "chargingprofiles"
    COMMANDS = "commands"
    CREDENTIALS = "credentials"
    HUB_CLIENT_INFO = "hubclientinfo"
    LOCATIONS = "locations"
    SESSIONS = "sessions"
    TARIFFS = "tariffs"
    TOKENS = "tokens"


# ============================================================================
# AUTHENTICATION & REGISTRATION STATES
# ============================================================================

class TokenRole(str, Enum):
    """What an inbound token is good for."""
    REGISTRATION = "registration"    # Pending token A, credentials POST only
    OPERATIONAL = "operational"      # Active server token


class RegistrationState(str, Enum):
    """
    Registration lifecycle for a partner platform (receiver perspective).

    State transitions:
        UNKNOWN -> PENDING -> REGISTERED -> REGISTERED (rotation)
                                         -> UNREGISTERED
    UNKNOWN and UNREGISTERED both reject every token.
    """
    UNKNOWN = "unknown"
    PENDING = "pending"
    REGISTERED = "registered"
    UNREGISTERED = "unregistered"

    def accepts_tokens(self) -> bool:
        return self in (RegistrationState.PENDING, RegistrationState.REGISTERED)


class RegistrationOutcome(str, Enum):
    """Result of completing an inbound registration in the registry."""
    COMPLETED = "completed"
    TOKEN_A_USED = "token_a_used"            # Token A missing or consumed concurrently
    ALREADY_REGISTERED = "already_registered"  # URL holds an active server token


__all__ = [
    "OcpiStatus",
    "Role",
    "InterfaceRole",
    "ModuleID",
    "TokenRole",
    "RegistrationState",
    "RegistrationOutcome",
]
