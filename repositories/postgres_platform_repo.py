# ============================================================================
# POSTGRES PLATFORM REPOSITORY
# ============================================================================
# EPOCH: 1 - CREDENTIALS EXCHANGE
# STATUS: Domain - PostgreSQL-backed partner registry
# PURPOSE: Durable registry for multi-instance deployments
# CREATED: 18 OCT 2026
# ============================================================================
"""
Postgres Platform Repository

PlatformRepository on top of psycopg3 async + psycopg_pool.
All SQL uses psycopg sql.SQL composition for injection safety.

Every write is a single statement, so each call is atomic on its own,
except complete_registration(): one transaction deletes the pending token A
row (DELETE ... RETURNING) and upserts the platform only where it holds no
server token. When two transactions race for the same token A, only one
gets the row back. When they race for the same URL, the loser's conditional
upsert returns no row and its transaction is rolled back, which puts its
token A back.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.contracts import RegistrationOutcome
from core.models.credentials import CredentialRole
from core.models.envelope import SearchResult
from core.models.platform import PendingRegistration, Platform
from core.models.versions import Endpoint
from core.tokens import mask_token
from .database import SCHEMA_IDENTIFIER, TABLE_PENDING_REGISTRATIONS, TABLE_PLATFORMS
from .platform_repo import PlatformRepository

logger = logging.getLogger(__name__)


_DDL = [
    sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(SCHEMA_IDENTIFIER),
    sql.SQL("""
        CREATE TABLE IF NOT EXISTS {} (
            url TEXT PRIMARY KEY,
            version TEXT,
            endpoints JSONB,
            roles JSONB NOT NULL DEFAULT '[]'::jsonb,
            token_a TEXT,
            client_token TEXT,
            server_token TEXT UNIQUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            unregistered_at TIMESTAMPTZ
        )
    """).format(TABLE_PLATFORMS),
    sql.SQL("""
        CREATE TABLE IF NOT EXISTS {} (
            token_a TEXT PRIMARY KEY,
            platform_url TEXT,
            issued_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """).format(TABLE_PENDING_REGISTRATIONS),
]


class PostgresPlatformRepository(PlatformRepository):
    """Repository for Platform entities stored in PostgreSQL."""

    def __init__(self, pool: AsyncConnectionPool):
        super().__init__()
        self.pool = pool

    async def ensure_schema(self) -> None:
        """Create schema and tables if missing."""
        async with self.pool.connection() as conn:
            for statement in _DDL:
                await conn.execute(statement)
        logger.info("Registry schema ensured")

    async def ping(self) -> bool:
        try:
            async with self.pool.connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except Exception as e:
            logger.warning(f"Registry ping failed: {e}")
            return False

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    async def get_platform(self, platform_url: str) -> Optional[Platform]:
        with self._error_context("get platform", platform_url):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT * FROM {} WHERE url = %s").format(TABLE_PLATFORMS),
                    (platform_url,),
                )
                row = await result.fetchone()
                return self._row_to_model(row) if row else None

    async def get_platform_by_server_token(self, server_token: str) -> Optional[Platform]:
        with self._error_context("get platform by server token"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT * FROM {} WHERE server_token = %s").format(TABLE_PLATFORMS),
                    (server_token,),
                )
                row = await result.fetchone()
                return self._row_to_model(row) if row else None

    async def list_platforms(self, offset: int = 0, limit: int = 50) -> SearchResult[Platform]:
        with self._error_context("list platforms"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                count_result = await conn.execute(
                    sql.SQL("SELECT count(*) AS total FROM {}").format(TABLE_PLATFORMS),
                )
                count_row = await count_result.fetchone()
                result = await conn.execute(
                    sql.SQL(
                        "SELECT * FROM {} ORDER BY created_at, url OFFSET %s LIMIT %s"
                    ).format(TABLE_PLATFORMS),
                    (offset, limit),
                )
                rows = await result.fetchall()
                return SearchResult(
                    items=[self._row_to_model(row) for row in rows],
                    total_count=count_row["total"] if count_row else 0,
                    limit=limit,
                    offset=offset,
                )

    # ----------------------------------------------------------------
    # Pending registrations
    # ----------------------------------------------------------------

    async def issue_token_a(
        self, token_a: str, platform_url: Optional[str] = None
    ) -> PendingRegistration:
        pending = PendingRegistration(token_a=token_a, platform_url=platform_url)
        with self._error_context("issue token A", platform_url):
            async with self.pool.connection() as conn:
                await conn.execute(
                    sql.SQL("""
                        INSERT INTO {} (token_a, platform_url, issued_at)
                        VALUES (%(token_a)s, %(platform_url)s, %(issued_at)s)
                        ON CONFLICT (token_a) DO UPDATE
                        SET platform_url = EXCLUDED.platform_url, issued_at = EXCLUDED.issued_at
                    """).format(TABLE_PENDING_REGISTRATIONS),
                    pending.model_dump(),
                )
        self._log_operation(True, "Issued token A", mask_token(token_a), {"platform_url": platform_url})
        return pending

    async def get_pending_registration(self, token_a: str) -> Optional[PendingRegistration]:
        with self._error_context("get pending registration"):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("SELECT * FROM {} WHERE token_a = %s").format(TABLE_PENDING_REGISTRATIONS),
                    (token_a,),
                )
                row = await result.fetchone()
                return PendingRegistration(**row) if row else None

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
        values = self._registration_values(version, endpoints, roles, client_token, server_token)
        upsert = self._upsert_query(list(values.keys()), only_unregistered=True)

        with self._error_context("complete registration", platform_url):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                deleted = await conn.execute(
                    sql.SQL(
                        "DELETE FROM {} WHERE token_a = %s RETURNING token_a"
                    ).format(TABLE_PENDING_REGISTRATIONS),
                    (token_a,),
                )
                if await deleted.fetchone() is None:
                    return RegistrationOutcome.TOKEN_A_USED, None

                result = await conn.execute(upsert, {"url": platform_url, **values})
                row = await result.fetchone()
                if row is None:
                    await conn.rollback()
                    return RegistrationOutcome.ALREADY_REGISTERED, None

        self._log_operation(True, "Completed registration", platform_url, {"token_a": mask_token(token_a)})
        return RegistrationOutcome.COMPLETED, self._row_to_model(row)

    # ----------------------------------------------------------------
    # Writes
    # ----------------------------------------------------------------

    def _upsert_query(self, columns: List[str], only_unregistered: bool = False) -> sql.Composed:
        """
        INSERT the record or UPDATE the given columns, returning the row.

        only_unregistered skips the UPDATE (no row returned) when the
        existing record holds a server token.
        """
        return sql.SQL("""
            INSERT INTO {table} AS p (url, {columns})
            VALUES (%(url)s, {placeholders})
            ON CONFLICT (url) DO UPDATE SET {assignments}, updated_at = now()
            {condition}
            RETURNING *
        """).format(
            table=TABLE_PLATFORMS,
            columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            placeholders=sql.SQL(", ").join(sql.Placeholder(c) for c in columns),
            assignments=sql.SQL(", ").join(
                sql.SQL("{} = EXCLUDED.{}").format(sql.Identifier(c), sql.Identifier(c))
                for c in columns
            ),
            condition=sql.SQL("WHERE p.server_token IS NULL" if only_unregistered else ""),
        )

    async def _upsert(self, platform_url: str, values: Dict[str, Any]) -> Platform:
        query = self._upsert_query(list(values.keys()))
        with self._error_context("save platform", platform_url):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(query, {"url": platform_url, **values})
                row = await result.fetchone()
                return self._row_to_model(row)

    async def _update(self, platform_url: str, assignments: sql.Composable, params: Dict[str, Any]) -> Optional[Platform]:
        query = sql.SQL(
            "UPDATE {} SET {}, updated_at = now() WHERE url = %(url)s RETURNING *"
        ).format(TABLE_PLATFORMS, assignments)
        with self._error_context("update platform", platform_url):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(query, {"url": platform_url, **params})
                row = await result.fetchone()
                return self._row_to_model(row) if row else None

    async def save_token_a(self, platform_url: str, token_a: str) -> Platform:
        return await self._upsert(platform_url, {"token_a": token_a})

    async def save_version(self, platform_url: str, version: str) -> Platform:
        return await self._upsert(platform_url, {"version": version})

    async def save_endpoints(self, platform_url: str, endpoints: List[Endpoint]) -> Platform:
        return await self._upsert(
            platform_url, {"endpoints": Json([e.model_dump(mode="json") for e in endpoints])}
        )

    async def save_roles(self, platform_url: str, roles: List[CredentialRole]) -> Platform:
        return await self._upsert(
            platform_url, {"roles": Json([r.model_dump(mode="json") for r in roles])}
        )

    async def save_client_token(self, platform_url: str, client_token: Optional[str]) -> Platform:
        return await self._upsert(platform_url, {"client_token": client_token})

    async def save_server_token(self, platform_url: str, server_token: Optional[str]) -> Platform:
        values: Dict[str, Any] = {"server_token": server_token}
        if server_token:
            values["unregistered_at"] = None
        return await self._upsert(platform_url, values)

    async def save_registration(
        self,
        platform_url: str,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Platform:
        return await self._upsert(
            platform_url,
            self._registration_values(version, endpoints, roles, client_token, server_token),
        )

    async def invalidate_token_a(self, platform_url: str) -> Optional[Platform]:
        return await self._update(platform_url, sql.SQL("token_a = NULL"), {})

    async def unregister_platform(self, platform_url: str) -> Optional[Platform]:
        platform = await self._update(
            platform_url,
            sql.SQL(
                "token_a = NULL, client_token = NULL, server_token = NULL, unregistered_at = now()"
            ),
            {},
        )
        if platform is not None:
            self._log_operation(True, "Unregistered platform", platform_url)
        return platform

    def _registration_values(
        self,
        version: str,
        endpoints: List[Endpoint],
        roles: List[CredentialRole],
        client_token: str,
        server_token: str,
    ) -> Dict[str, Any]:
        return {
            "version": version,
            "endpoints": Json([e.model_dump(mode="json") for e in endpoints]),
            "roles": Json([r.model_dump(mode="json") for r in roles]),
            "client_token": client_token,
            "server_token": server_token,
            "unregistered_at": None,
        }

    def _row_to_model(self, row: Dict[str, Any]) -> Platform:
        """Convert a database row to a Platform instance."""
        endpoints = row.get("endpoints")
        return Platform(
            url=row["url"],
            version=row.get("version"),
            endpoints=[Endpoint(**e) for e in endpoints] if endpoints is not None else None,
            roles=[CredentialRole(**r) for r in row.get("roles") or []],
            token_a=row.get("token_a"),
            client_token=row.get("client_token"),
            server_token=row.get("server_token"),
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
            unregistered_at=row.get("unregistered_at"),
        )


__all__ = ["PostgresPlatformRepository"]
