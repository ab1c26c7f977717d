"""PostgreSQL implementation of TenantRepository."""

import json
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import asyncpg

from tenantry.adapters.db.app_db import AppDatabase
from tenantry.core.auth.types import MemberInfo, Membership, Tenant, TenantRole, User
from tenantry.core.exceptions import AlreadyMember


class PostgresTenantRepository:
    """PostgreSQL implementation of the tenant repository.

    Operations touching a user's current-tenant flag first lock that user's
    row, so concurrent switches and creations for the same user run one
    after the other. The partial unique index on
    tenant_memberships (user_id) WHERE is_current backs this up.
    """

    def __init__(self, db: AppDatabase) -> None:
        """Initialize with database connection.

        Args:
            db: Application database instance.
        """
        self._db = db

    def _row_to_user(self, row: dict[str, Any]) -> User:
        """Convert database row to User model."""
        return User(
            id=row["id"],
            email=row["email"],
            name=row.get("name"),
            is_active=row.get("is_active", True),
            created_at=row["created_at"],
        )

    def _row_to_tenant(self, row: dict[str, Any]) -> Tenant:
        """Convert database row to Tenant model."""
        settings = row.get("settings") or {}
        if isinstance(settings, str):
            settings = json.loads(settings)
        return Tenant(
            id=row["id"],
            name=row["name"],
            description=row.get("description"),
            plan=row.get("plan", "free"),
            status=row.get("status", "active"),
            owner_id=row["owner_id"],
            settings=settings,
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )

    def _row_to_membership(self, row: dict[str, Any]) -> Membership:
        """Convert database row to Membership model."""
        return Membership(
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            role=TenantRole(row["role"]),
            is_current=row.get("is_current", False),
            invited_by=row.get("invited_by"),
            created_at=row["created_at"],
        )

    @staticmethod
    async def _lock_user(conn: asyncpg.Connection, user_id: UUID) -> None:
        await conn.execute("SELECT id FROM users WHERE id = $1 FOR UPDATE", user_id)

    # User operations
    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        row = await self._db.fetch_one(
            "SELECT * FROM users WHERE id = $1",
            user_id,
        )
        return self._row_to_user(row) if row else None

    async def find_user_by_email(self, email: str) -> User | None:
        """Get user by email address, ignoring case."""
        row = await self._db.fetch_one(
            "SELECT * FROM users WHERE lower(email) = lower($1)",
            email,
        )
        return self._row_to_user(row) if row else None

    # Tenant operations
    async def get_tenant(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        row = await self._db.fetch_one(
            "SELECT * FROM tenants WHERE id = $1",
            tenant_id,
        )
        return self._row_to_tenant(row) if row else None

    async def create_tenant_with_owner(
        self,
        owner_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Tenant:
        """Create the tenant and its current owner membership in one transaction."""
        async with self._db.transaction() as conn:
            await self._lock_user(conn, owner_id)
            row = await conn.fetchrow(
                """
                INSERT INTO tenants (name, description, owner_id, settings)
                VALUES ($1, $2, $3, $4)
                RETURNING *
                """,
                name,
                description,
                owner_id,
                json.dumps({}),
            )
            assert row is not None, "INSERT RETURNING should always return a row"
            await conn.execute(
                """
                UPDATE tenant_memberships SET is_current = false
                WHERE user_id = $1 AND is_current
                """,
                owner_id,
            )
            await conn.execute(
                """
                INSERT INTO tenant_memberships (tenant_id, user_id, role, is_current)
                VALUES ($1, $2, $3, true)
                """,
                row["id"],
                owner_id,
                TenantRole.OWNER.value,
            )
        return self._row_to_tenant(dict(row))

    async def update_tenant(
        self,
        tenant_id: UUID,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Tenant | None:
        """Update tenant fields."""
        updates = []
        params: list[Any] = []
        param_idx = 1

        if name is not None:
            updates.append(f"name = ${param_idx}")
            params.append(name)
            param_idx += 1

        if description is not None:
            updates.append(f"description = ${param_idx}")
            params.append(description)
            param_idx += 1

        if settings is not None:
            updates.append(f"settings = ${param_idx}")
            params.append(json.dumps(settings))
            param_idx += 1

        if not updates:
            return await self.get_tenant(tenant_id)

        updates.append(f"updated_at = ${param_idx}")
        params.append(datetime.now(UTC))
        param_idx += 1

        params.append(tenant_id)
        query = f"""
            UPDATE tenants SET {", ".join(updates)}
            WHERE id = ${param_idx}
            RETURNING *
        """
        row = await self._db.fetch_one(query, *params)
        return self._row_to_tenant(row) if row else None

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        """Delete a tenant; memberships and catalog rows cascade."""
        async with self._db.transaction() as conn:
            result: str = await conn.execute(
                "DELETE FROM tenants WHERE id = $1",
                tenant_id,
            )
        return result == "DELETE 1"

    async def list_user_tenants(self, user_id: UUID) -> list[tuple[Tenant, Membership]]:
        """Get all tenants a user belongs to, oldest membership first."""
        rows = await self._db.fetch_all(
            """
            SELECT t.*,
                   m.tenant_id, m.user_id, m.role, m.is_current,
                   m.invited_by, m.created_at AS membership_created_at
            FROM tenants t
            JOIN tenant_memberships m ON m.tenant_id = t.id
            WHERE m.user_id = $1
            ORDER BY m.created_at
            """,
            user_id,
        )
        return [
            (
                self._row_to_tenant(row),
                self._row_to_membership({**row, "created_at": row["membership_created_at"]}),
            )
            for row in rows
        ]

    # Membership operations
    async def get_membership(self, tenant_id: UUID, user_id: UUID) -> Membership | None:
        """Get user's membership in a tenant."""
        row = await self._db.fetch_one(
            "SELECT * FROM tenant_memberships WHERE tenant_id = $1 AND user_id = $2",
            tenant_id,
            user_id,
        )
        return self._row_to_membership(row) if row else None

    async def get_current_membership(self, user_id: UUID) -> Membership | None:
        """Get the user's current membership."""
        row = await self._db.fetch_one(
            "SELECT * FROM tenant_memberships WHERE user_id = $1 AND is_current",
            user_id,
        )
        return self._row_to_membership(row) if row else None

    async def set_current_tenant(self, user_id: UUID, tenant_id: UUID) -> bool:
        """Move the user's current flag to tenant_id in one transaction.

        The old flag is cleared before the new one is set so the partial
        unique index never sees two current rows.
        """
        async with self._db.transaction() as conn:
            await self._lock_user(conn, user_id)
            exists = await conn.fetchval(
                """
                SELECT 1 FROM tenant_memberships
                WHERE tenant_id = $1 AND user_id = $2
                """,
                tenant_id,
                user_id,
            )
            if not exists:
                return False
            await conn.execute(
                """
                UPDATE tenant_memberships SET is_current = false
                WHERE user_id = $1 AND is_current AND tenant_id <> $2
                """,
                user_id,
                tenant_id,
            )
            await conn.execute(
                """
                UPDATE tenant_memberships SET is_current = true
                WHERE user_id = $1 AND tenant_id = $2
                """,
                user_id,
                tenant_id,
            )
        return True

    async def add_member(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role: TenantRole,
        invited_by: UUID | None = None,
    ) -> Membership:
        """Add a non-current membership."""
        try:
            row = await self._db.execute_returning(
                """
                INSERT INTO tenant_memberships (tenant_id, user_id, role, invited_by)
                VALUES ($1, $2, $3, $4)
                RETURNING *
                """,
                tenant_id,
                user_id,
                role.value,
                invited_by,
            )
        except asyncpg.UniqueViolationError as e:
            raise AlreadyMember("User is already a member of this workspace") from e
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_membership(row)

    async def update_member_role(
        self, tenant_id: UUID, user_id: UUID, role: TenantRole
    ) -> Membership | None:
        """Change a member's role."""
        row = await self._db.execute_returning(
            """
            UPDATE tenant_memberships SET role = $3
            WHERE tenant_id = $1 AND user_id = $2
            RETURNING *
            """,
            tenant_id,
            user_id,
            role.value,
        )
        return self._row_to_membership(row) if row else None

    async def remove_member(self, tenant_id: UUID, user_id: UUID) -> bool:
        """Delete a membership."""
        result = await self._db.execute(
            "DELETE FROM tenant_memberships WHERE tenant_id = $1 AND user_id = $2",
            tenant_id,
            user_id,
        )
        return result == "DELETE 1"

    async def list_members(self, tenant_id: UUID) -> list[MemberInfo]:
        """List tenant members with account details, oldest first."""
        rows = await self._db.fetch_all(
            """
            SELECT m.user_id, u.email, u.name, m.role, m.invited_by, m.created_at
            FROM tenant_memberships m
            JOIN users u ON u.id = m.user_id
            WHERE m.tenant_id = $1
            ORDER BY m.created_at
            """,
            tenant_id,
        )
        return [
            MemberInfo(
                user_id=row["user_id"],
                email=row["email"],
                name=row.get("name"),
                role=TenantRole(row["role"]),
                invited_by=row.get("invited_by"),
                created_at=row["created_at"],
            )
            for row in rows
        ]
