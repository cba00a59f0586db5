# ============================================================================
# PLATFORM REPOSITORY
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain - Partner platform registry contract + in-memory registry
# PURPOSE: Persist per-partner version, endpoints, roles and tokens
# CREATED: 18 OCT 2026
# ============================================================================
"""
Platform Repository

PlatformRepository is the registry contract the credentials services depend
on. Records are keyed by the partner's versions URL.

Two implementations:
    InMemoryPlatformRepository   - lock-guarded dicts, default backend
    PostgresPlatformRepository   - repositories/postgres_platform_repo.py

complete_registration() is the one operation with a concurrency guarantee.
It consumes token A and writes the registration as one step, and only when
the URL holds no active server token. Of two concurrent calls with the same
token A, or with two tokens A for the same URL, exactly one completes.
"""

import threading
from abc import abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from core.contracts import RegistrationOutcome
from core.models.credentials import CredentialRole
from core.models.envelope import SearchResult
from core.models.platform import PendingRegistration, Platform
from core.models.versions import Endpoint
from core.tokens import mask_token
from infrastructure.base_repository import BaseRepository


class PlatformRepository(BaseRepository):
    """Registry contract for partner platforms and pending tokens A."""

    # ----------------------------------------------------------------
    # Platform reads
    # ----------------------------------------------------------------

    @abstractmethod
    async def get_platform(self, platform_url: str) -> Optional[Platform]:
        """Platform by versions URL."""

    @abstractmethod
    async def get_platform_by_server_token(self, server_token: str) -> Optional[Platform]:
        """Platform whose active server token equals the given token."""

    @abstractmethod
    async def list_platforms(self, offset: int = 0, limit: int = 50) -> SearchResult[Platform]:
        """Page of platforms ordered by creation time."""

    # ----------------------------------------------------------------
    # Pending registrations (tokens A issued by us)
    # ----------------------------------------------------------------

    @abstractmethod
    async def issue_token_a(
        self, token_a: str, platform_url: Optional[str] = None
    ) -> PendingRegistration:
        """Record a token A handed to a partner out of band."""

    @abstractmethod
    async def get_pending_registration(self, token_a: str) -> Optional[PendingRegistration]:
        """Pending registration for a token A, None once consumed."""

    @abstractmethod
    async def complete_registration(
        self,
        token_a: str,
        platform_url: str,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Tuple[RegistrationOutcome, Optional[Platform]]:
        """
        Consume token A and store an inbound registration atomically.

        Nothing changes unless the outcome is COMPLETED:
            TOKEN_A_USED         token A is not pending (never issued or consumed)
            ALREADY_REGISTERED   platform_url holds an active server token;
                                 token A stays pending
        """

    # ----------------------------------------------------------------
    # Incremental platform writes
    # ----------------------------------------------------------------

    @abstractmethod
    async def save_token_a(self, platform_url: str, token_a: str) -> Platform:
        """Store the token A received from a partner (creates the record)."""

    @abstractmethod
    async def save_version(self, platform_url: str, version: str) -> Platform:
        """Store the negotiated version."""

    @abstractmethod
    async def save_endpoints(self, platform_url: str, endpoints: List[Endpoint]) -> Platform:
        """Store the partner's endpoints."""

    @abstractmethod
    async def save_roles(self, platform_url: str, roles: List[CredentialRole]) -> Platform:
        """Store the partner's roles."""

    @abstractmethod
    async def save_client_token(self, platform_url: str, client_token: Optional[str]) -> Platform:
        """Store the token we present to the partner."""

    @abstractmethod
    async def save_server_token(self, platform_url: str, server_token: Optional[str]) -> Platform:
        """Store the token the partner presents to us. None deactivates it."""

    @abstractmethod
    async def save_registration(
        self,
        platform_url: str,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Platform:
        """Persist a rotation of an existing registration in one step."""

    @abstractmethod
    async def invalidate_token_a(self, platform_url: str) -> Optional[Platform]:
        """Forget the token A held for a partner."""

    @abstractmethod
    async def unregister_platform(self, platform_url: str) -> Optional[Platform]:
        """Invalidate every token of a partner, keeping the record."""

    async def ping(self) -> bool:
        """Readiness check."""
        return True


# ============================================================================
# IN-MEMORY REGISTRY
# ============================================================================

class InMemoryPlatformRepository(PlatformRepository):
    """
    Registry held in process memory.

    All state sits behind one lock; every public method takes it once, so
    each call is atomic relative to every other call.
    """

    def __init__(self):
        super().__init__()
        self._lock = threading.Lock()
        self._platforms: Dict[str, Platform] = {}
        self._server_tokens: Dict[str, str] = {}
        self._pending: Dict[str, PendingRegistration] = {}

    # ----------------------------------------------------------------
    # Internal helpers (lock must be held)
    # ----------------------------------------------------------------

    def _get_or_create(self, platform_url: str) -> Platform:
        platform = self._platforms.get(platform_url)
        if platform is None:
            platform = Platform(url=platform_url)
            self._platforms[platform_url] = platform
        return platform

    def _touch(self, platform: Platform) -> Platform:
        platform.updated_at = datetime.now(timezone.utc)
        return platform.model_copy(deep=True)

    def _set_server_token(self, platform: Platform, server_token: Optional[str]) -> None:
        if platform.server_token:
            self._server_tokens.pop(platform.server_token, None)
        platform.server_token = server_token
        if server_token:
            self._server_tokens[server_token] = platform.url
            platform.unregistered_at = None

    def _apply_registration(
        self,
        platform: Platform,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Platform:
        platform.version = version
        platform.endpoints = [e.model_copy() for e in endpoints]
        platform.roles = [r.model_copy(deep=True) for r in roles]
        platform.client_token = client_token
        self._set_server_token(platform, server_token)
        return self._touch(platform)

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    async def get_platform(self, platform_url: str) -> Optional[Platform]:
        with self._lock:
            platform = self._platforms.get(platform_url)
            return platform.model_copy(deep=True) if platform else None

    async def get_platform_by_server_token(self, server_token: str) -> Optional[Platform]:
        with self._lock:
            url = self._server_tokens.get(server_token)
            if url is None:
                return None
            return self._platforms[url].model_copy(deep=True)

    async def list_platforms(self, offset: int = 0, limit: int = 50) -> SearchResult[Platform]:
        with self._lock:
            ordered = sorted(self._platforms.values(), key=lambda p: p.created_at)
            page = [p.model_copy(deep=True) for p in ordered[offset:offset + limit]]
            return SearchResult(items=page, total_count=len(ordered), limit=limit, offset=offset)

    # ----------------------------------------------------------------
    # Pending registrations
    # ----------------------------------------------------------------

    async def issue_token_a(
        self, token_a: str, platform_url: Optional[str] = None
    ) -> PendingRegistration:
        pending = PendingRegistration(token_a=token_a, platform_url=platform_url)
        with self._lock:
            self._pending[token_a] = pending
        self._log_operation(True, "Issued token A", mask_token(token_a), {"platform_url": platform_url})
        return pending.model_copy()

    async def get_pending_registration(self, token_a: str) -> Optional[PendingRegistration]:
        with self._lock:
            pending = self._pending.get(token_a)
            return pending.model_copy() if pending else None

    async def complete_registration(
        self,
        token_a: str,
        platform_url: str,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Tuple[RegistrationOutcome, Optional[Platform]]:
        with self._lock:
            if token_a not in self._pending:
                return RegistrationOutcome.TOKEN_A_USED, None

            existing = self._platforms.get(platform_url)
            if existing is not None and existing.is_registered:
                return RegistrationOutcome.ALREADY_REGISTERED, None

            del self._pending[token_a]
            platform = self._apply_registration(
                self._get_or_create(platform_url), version, endpoints, roles, client_token, server_token
            )
        self._log_operation(True, "Completed registration", platform_url, {"token_a": mask_token(token_a)})
        return RegistrationOutcome.COMPLETED, platform

    # ----------------------------------------------------------------
    # Writes
    # ----------------------------------------------------------------

    async def save_token_a(self, platform_url: str, token_a: str) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            platform.token_a = token_a
            return self._touch(platform)

    async def save_version(self, platform_url: str, version: str) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            platform.version = version
            return self._touch(platform)

    async def save_endpoints(self, platform_url: str, endpoints: List[Endpoint]) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            platform.endpoints = [e.model_copy() for e in endpoints]
            return self._touch(platform)

    async def save_roles(self, platform_url: str, roles: List[CredentialRole]) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            platform.roles = [r.model_copy(deep=True) for r in roles]
            return self._touch(platform)

    async def save_client_token(self, platform_url: str, client_token: Optional[str]) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            platform.client_token = client_token
            return self._touch(platform)

    async def save_server_token(self, platform_url: str, server_token: Optional[str]) -> Platform:
        with self._lock:
            platform = self._get_or_create(platform_url)
            self._set_server_token(platform, server_token)
            return self._touch(platform)

    async def save_registration(
        self,
        platform_url: str,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Platform:
        with self._lock:
            return self._apply_registration(
                self._get_or_create(platform_url), version, endpoints, roles, client_token, server_token
            )

    async def invalidate_token_a(self, platform_url: str) -> Optional[Platform]:
        with self._lock:
            platform = self._platforms.get(platform_url)
            if platform is None:
                return None
            platform.token_a = None
            return self._touch(platform)

    async def unregister_platform(self, platform_url: str) -> Optional[Platform]:
        with self._lock:
            platform = self._platforms.get(platform_url)
            if platform is None:
                return None
            self._set_server_token(platform, None)
            platform.token_a = None
            platform.client_token = None
            platform.unregistered_at = datetime.now(timezone.utc)
            result = self._touch(platform)
        self._log_operation(True, "Unregistered platform", platform_url)
        return result


__all__ = ["PlatformRepository", "InMemoryPlatformRepository"]
