# ============================================================================
# CREDENTIALS INTERFACE
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Service contract - Shared by the receiver service and HTTP client
# PURPOSE: One shape for the four credentials operations
# CREATED: 18 OCT 2026
# ============================================================================
"""
Credentials Interface

The credentials module has the same four operations on both sides of the
wire. CredentialsServerService implements them for inbound calls;
CredentialsClient implements them by calling a partner over HTTP.

auth identifies the call and is typed per side:
    CredentialsServerService   AuthenticatedCaller (already resolved by the route)
    CredentialsClient          str, the token we send to the partner
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from core.models.credentials import Credentials
from core.models.envelope import OcpiResponseBody

AuthT = TypeVar("AuthT")


class CredentialsInterface(ABC, Generic[AuthT]):
    """GET / POST / PUT / DELETE of the credentials module."""

    @abstractmethod
    async def get(self, auth: AuthT) -> OcpiResponseBody:
        """Credentials of the called party for the caller's relationship."""

    @abstractmethod
    async def post(self, auth: AuthT, credentials: Credentials) -> OcpiResponseBody:
        """Complete a registration started with token A."""

    @abstractmethod
    async def put(self, auth: AuthT, credentials: Credentials) -> OcpiResponseBody:
        """Rotate tokens and refresh endpoints of a registration."""

    @abstractmethod
    async def delete(self, auth: AuthT) -> OcpiResponseBody:
        """End the registration."""


__all__ = ["CredentialsInterface"]
