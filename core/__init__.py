# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Core module initialization
# PURPOSE: Export protocol contracts, errors and models
# CREATED: 18 OCT 2026
# ============================================================================

from core.contracts import (
    OcpiStatus,
    Role,
    InterfaceRole,
    ModuleID,
    TokenRole,
    RegistrationState,
    RegistrationOutcome,
)
from core.errors import OcpiError
from core.models import (
    Credentials,
    CredentialRole,
    Endpoint,
    Version,
    VersionDetails,
    Platform,
    PendingRegistration,
    SearchResult,
    OcpiResponseBody,
)

__all__ = [
    # Enums
    "OcpiStatus",
    "Role",
    "InterfaceRole",
    "ModuleID",
    "TokenRole",
    "RegistrationState",
    "RegistrationOutcome",
    # Errors
    "OcpiError",
    # Models
    "Credentials",
    "CredentialRole",
    "Endpoint",
    "Version",
    "VersionDetails",
    "Platform",
    "PendingRegistration",
    "SearchResult",
    "OcpiResponseBody",
]
