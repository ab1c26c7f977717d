"""PostgreSQL implementation of CatalogRepository."""

from typing import Any
from uuid import UUID

import asyncpg

from tenantry.adapters.db.app_db import AppDatabase
from tenantry.core.catalog.diff import ReconciliationPlan
from tenantry.core.catalog.types import (
    CatalogEntry,
    DefaultModelBinding,
    ModelCategory,
    ModelSource,
    ProviderCredential,
)
from tenantry.core.exceptions import ModelAlreadyExists

# Re-enables only rows that reconciliation itself disabled.
_UPSERT_AUTO_MODEL = """
    INSERT INTO tenant_models
        (tenant_id, vendor, model_id, display_name, category, source, enabled, retired)
    VALUES ($1, $2, $3, $4, $5, 'auto', true, false)
    ON CONFLICT (tenant_id, vendor, model_id) DO UPDATE SET
        display_name = EXCLUDED.display_name,
        category = EXCLUDED.category,
        enabled = CASE WHEN tenant_models.retired THEN true ELSE tenant_models.enabled END,
        retired = false,
        updated_at = NOW()
    WHERE tenant_models.source = 'auto'
"""


class PostgresCatalogRepository:
    """PostgreSQL implementation of the catalog repository.

    Reconciliation writes are upserts keyed by (tenant_id, vendor, model_id)
    and guarded by source = 'auto', so replaying or interleaving the same
    plan leaves the table unchanged and never touches custom rows.
    """

    def __init__(self, db: AppDatabase) -> None:
        """Initialize with database connection.

        Args:
            db: Application database instance.
        """
        self._db = db

    def _row_to_credential(self, row: dict[str, Any]) -> ProviderCredential:
        """Convert database row to ProviderCredential model."""
        return ProviderCredential(
            tenant_id=row["tenant_id"],
            vendor=row["vendor"],
            encrypted_config=row["encrypted_config"],
            is_valid=row.get("is_valid", True),
            last_validated_at=row.get("last_validated_at"),
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )

    def _row_to_entry(self, row: dict[str, Any]) -> CatalogEntry:
        """Convert database row to CatalogEntry model."""
        return CatalogEntry(
            id=row["id"],
            tenant_id=row["tenant_id"],
            vendor=row["vendor"],
            model_id=row["model_id"],
            display_name=row["display_name"],
            category=ModelCategory(row["category"]),
            source=ModelSource(row["source"]),
            enabled=row.get("enabled", True),
            retired=row.get("retired", False),
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )

    def _row_to_binding(self, row: dict[str, Any]) -> DefaultModelBinding:
        """Convert database row to DefaultModelBinding model."""
        return DefaultModelBinding(
            tenant_id=row["tenant_id"],
            category=ModelCategory(row["category"]),
            vendor=row["vendor"],
            model_id=row["model_id"],
            updated_at=row.get("updated_at"),
        )

    @staticmethod
    async def _drop_bindings(
        conn: asyncpg.Connection, tenant_id: UUID, vendor: str, model_ids: list[str]
    ) -> None:
        await conn.execute(
            """
            DELETE FROM tenant_model_settings
            WHERE tenant_id = $1 AND vendor = $2 AND model_id = ANY($3::text[])
            """,
            tenant_id,
            vendor,
            model_ids,
        )

    # Credential operations
    async def list_credentials(
        self, tenant_id: UUID, valid_only: bool = False
    ) -> list[ProviderCredential]:
        """List a tenant's credentials ordered by vendor."""
        query = "SELECT * FROM provider_credentials WHERE tenant_id = $1"
        if valid_only:
            query += " AND is_valid"
        rows = await self._db.fetch_all(query + " ORDER BY vendor", tenant_id)
        return [self._row_to_credential(row) for row in rows]

    async def get_credential(self, tenant_id: UUID, vendor: str) -> ProviderCredential | None:
        """Get the credential for one vendor."""
        row = await self._db.fetch_one(
            "SELECT * FROM provider_credentials WHERE tenant_id = $1 AND vendor = $2",
            tenant_id,
            vendor,
        )
        return self._row_to_credential(row) if row else None

    async def upsert_credential(
        self, tenant_id: UUID, vendor: str, encrypted_config: str
    ) -> ProviderCredential:
        """Insert or replace a credential, marking it valid as of now."""
        row = await self._db.execute_returning(
            """
            INSERT INTO provider_credentials
                (tenant_id, vendor, encrypted_config, is_valid, last_validated_at)
            VALUES ($1, $2, $3, true, NOW())
            ON CONFLICT (tenant_id, vendor) DO UPDATE SET
                encrypted_config = EXCLUDED.encrypted_config,
                is_valid = true,
                last_validated_at = NOW(),
                updated_at = NOW()
            RETURNING *
            """,
            tenant_id,
            vendor,
            encrypted_config,
        )
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_credential(row)

    async def delete_credential(self, tenant_id: UUID, vendor: str) -> bool:
        """Delete a credential, the vendor's catalog rows and bindings."""
        async with self._db.transaction() as conn:
            result: str = await conn.execute(
                "DELETE FROM provider_credentials WHERE tenant_id = $1 AND vendor = $2",
                tenant_id,
                vendor,
            )
            if result != "DELETE 1":
                return False
            await conn.execute(
                "DELETE FROM tenant_models WHERE tenant_id = $1 AND vendor = $2",
                tenant_id,
                vendor,
            )
            await conn.execute(
                "DELETE FROM tenant_model_settings WHERE tenant_id = $1 AND vendor = $2",
                tenant_id,
                vendor,
            )
        return True

    # Catalog operations
    async def list_entries(
        self,
        tenant_id: UUID,
        vendor: str | None = None,
        enabled_only: bool = False,
        category: ModelCategory | None = None,
    ) -> list[CatalogEntry]:
        """List entries ordered by vendor then display name."""
        conditions = ["tenant_id = $1"]
        params: list[Any] = [tenant_id]

        if vendor is not None:
            params.append(vendor)
            conditions.append(f"vendor = ${len(params)}")

        if enabled_only:
            conditions.append("enabled")

        if category is not None:
            params.append(category.value)
            conditions.append(f"category = ${len(params)}")

        rows = await self._db.fetch_all(
            f"""
            SELECT * FROM tenant_models
            WHERE {" AND ".join(conditions)}
            ORDER BY vendor, display_name
            """,
            *params,
        )
        return [self._row_to_entry(row) for row in rows]

    async def get_entry(self, tenant_id: UUID, entry_id: UUID) -> CatalogEntry | None:
        """Get an entry by ID within a tenant."""
        row = await self._db.fetch_one(
            "SELECT * FROM tenant_models WHERE tenant_id = $1 AND id = $2",
            tenant_id,
            entry_id,
        )
        return self._row_to_entry(row) if row else None

    async def find_entry(self, tenant_id: UUID, vendor: str, model_id: str) -> CatalogEntry | None:
        """Get an entry by (vendor, model_id) within a tenant."""
        row = await self._db.fetch_one(
            """
            SELECT * FROM tenant_models
            WHERE tenant_id = $1 AND vendor = $2 AND model_id = $3
            """,
            tenant_id,
            vendor,
            model_id,
        )
        return self._row_to_entry(row) if row else None

    async def insert_custom_entry(
        self,
        tenant_id: UUID,
        vendor: str,
        model_id: str,
        display_name: str,
        category: ModelCategory,
    ) -> CatalogEntry:
        """Insert a custom, enabled entry."""
        try:
            row = await self._db.execute_returning(
                """
                INSERT INTO tenant_models
                    (tenant_id, vendor, model_id, display_name, category, source, enabled)
                VALUES ($1, $2, $3, $4, $5, 'custom', true)
                RETURNING *
                """,
                tenant_id,
                vendor,
                model_id,
                display_name,
                category.value,
            )
        except asyncpg.UniqueViolationError as e:
            raise ModelAlreadyExists(f"Model '{model_id}' already exists for {vendor}") from e
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_entry(row)

    async def update_entry(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        enabled: bool | None = None,
        display_name: str | None = None,
        category: ModelCategory | None = None,
    ) -> CatalogEntry | None:
        """Update an entry; disabling it drops bindings in the same transaction."""
        updates = []
        params: list[Any] = [tenant_id, entry_id]

        if enabled is not None:
            params.append(enabled)
            updates.append(f"enabled = ${len(params)}")
            if enabled:
                updates.append("retired = false")

        if display_name is not None:
            params.append(display_name)
            updates.append(f"display_name = ${len(params)}")

        if category is not None:
            params.append(category.value)
            updates.append(f"category = ${len(params)}")

        if not updates:
            return await self.get_entry(tenant_id, entry_id)

        updates.append("updated_at = NOW()")
        async with self._db.transaction() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE tenant_models SET {", ".join(updates)}
                WHERE tenant_id = $1 AND id = $2
                RETURNING *
                """,
                *params,
            )
            if row is None:
                return None
            if enabled is False:
                await self._drop_bindings(conn, tenant_id, row["vendor"], [row["model_id"]])
        return self._row_to_entry(dict(row))

    async def delete_entry(self, tenant_id: UUID, entry_id: UUID) -> bool:
        """Delete an entry and bindings pointing at it."""
        async with self._db.transaction() as conn:
            row = await conn.fetchrow(
                """
                DELETE FROM tenant_models WHERE tenant_id = $1 AND id = $2
                RETURNING vendor, model_id
                """,
                tenant_id,
                entry_id,
            )
            if row is None:
                return False
            await self._drop_bindings(conn, tenant_id, row["vendor"], [row["model_id"]])
        return True

    async def apply_plan(self, tenant_id: UUID, plan: ReconciliationPlan) -> None:
        """Apply one vendor's plan in a single transaction."""
        upserts = [
            (tenant_id, plan.vendor, m.id, m.display_name, m.category.value)
            for m in plan.inserts
        ] + [
            (tenant_id, plan.vendor, u.model_id, u.display_name, u.category)
            for u in plan.updates
        ]
        retired_ids = [r.entry_id for r in plan.retirements]

        async with self._db.transaction() as conn:
            if upserts:
                await conn.executemany(_UPSERT_AUTO_MODEL, upserts)

            if retired_ids:
                rows = await conn.fetch(
                    """
                    UPDATE tenant_models
                    SET enabled = false, retired = true, updated_at = NOW()
                    WHERE tenant_id = $1 AND vendor = $2
                      AND id = ANY($3::uuid[]) AND source = 'auto'
                    RETURNING model_id
                    """,
                    tenant_id,
                    plan.vendor,
                    retired_ids,
                )
                await self._drop_bindings(
                    conn, tenant_id, plan.vendor, [row["model_id"] for row in rows]
                )

    # Binding operations
    async def list_bindings(self, tenant_id: UUID) -> list[DefaultModelBinding]:
        """List bindings ordered by category."""
        rows = await self._db.fetch_all(
            "SELECT * FROM tenant_model_settings WHERE tenant_id = $1 ORDER BY category",
            tenant_id,
        )
        return [self._row_to_binding(row) for row in rows]

    async def get_binding(
        self, tenant_id: UUID, category: ModelCategory
    ) -> DefaultModelBinding | None:
        """Get the binding for one category."""
        row = await self._db.fetch_one(
            """
            SELECT * FROM tenant_model_settings
            WHERE tenant_id = $1 AND category = $2
            """,
            tenant_id,
            category.value,
        )
        return self._row_to_binding(row) if row else None

    async def upsert_binding(
        self,
        tenant_id: UUID,
        category: ModelCategory,
        vendor: str,
        model_id: str,
    ) -> DefaultModelBinding:
        """Insert or replace the binding for a category."""
        row = await self._db.execute_returning(
            """
            INSERT INTO tenant_model_settings (tenant_id, category, vendor, model_id)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (tenant_id, category) DO UPDATE SET
                vendor = EXCLUDED.vendor,
                model_id = EXCLUDED.model_id,
                updated_at = NOW()
            RETURNING *
            """,
            tenant_id,
            category.value,
            vendor,
            model_id,
        )
        assert row is not None, "INSERT RETURNING should always return a row"
        return self._row_to_binding(row)
