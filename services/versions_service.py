# ============================================================================
# VERSIONS SERVICE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service - Our own version discovery documents
# PURPOSE: Versions list and version details served to partners
# CREATED: 18 OCT 2026
# ============================================================================
"""
Versions Service

What a partner sees when it negotiates with us: one supported version and
the credentials module endpoint.
"""

from typing import List

from core.config import OcpiConfig
from core.contracts import InterfaceRole, ModuleID
from core.errors import NotFound
from core.models.versions import Endpoint, Version, VersionDetails


class VersionsService:
    """Builds our version discovery documents from configuration."""

    def __init__(self, config: OcpiConfig):
        self.config = config

    def list_versions(self) -> List[Version]:
        return [
            Version(
                version=self.config.version,
                url=f"{self.config.own_versions_url.rstrip('/')}/{self.config.version}",
            )
        ]

    def version_details(self, version: str) -> VersionDetails:
        """Endpoints of a version. NotFound for any version we do not speak."""
        if version != self.config.version:
            raise NotFound(f"Unsupported version '{version}'")

        credentials_url = self.config.module_url(ModuleID.CREDENTIALS.value)
        return VersionDetails(
            version=self.config.version,
            endpoints=[
                Endpoint(identifier=ModuleID.CREDENTIALS.value, role=InterfaceRole.SENDER, url=credentials_url),
                Endpoint(identifier=ModuleID.CREDENTIALS.value, role=InterfaceRole.RECEIVER, url=credentials_url),
            ],
        )


__all__ = ["VersionsService"]
