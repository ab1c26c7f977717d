"""Catalog repository protocol for database operations."""

from typing import Protocol, runtime_checkable
from uuid import UUID

from tenantry.core.catalog.diff import ReconciliationPlan
from tenantry.core.catalog.types import (
    CatalogEntry,
    DefaultModelBinding,
    ModelCategory,
    ProviderCredential,
)


@runtime_checkable
class CatalogRepository(Protocol):
    """Protocol for credentials, catalog entries and default-model bindings.

    Methods documented as atomic must run in a single transaction.
    """

    # Credential operations
    async def list_credentials(
        self, tenant_id: UUID, valid_only: bool = False
    ) -> list[ProviderCredential]:
        """List a tenant's stored vendor credentials."""
        ...

    async def get_credential(self, tenant_id: UUID, vendor: str) -> ProviderCredential | None:
        """Get the stored credential for one vendor."""
        ...

    async def upsert_credential(
        self, tenant_id: UUID, vendor: str, encrypted_config: str
    ) -> ProviderCredential:
        """Store a validated credential, stamping it valid now."""
        ...

    async def delete_credential(self, tenant_id: UUID, vendor: str) -> bool:
        """Atomically delete a credential with the vendor's entries and bindings."""
        ...

    # Catalog operations
    async def list_entries(
        self,
        tenant_id: UUID,
        vendor: str | None = None,
        enabled_only: bool = False,
        category: ModelCategory | None = None,
    ) -> list[CatalogEntry]:
        """List catalog entries ordered by vendor then display name."""
        ...

    async def get_entry(self, tenant_id: UUID, entry_id: UUID) -> CatalogEntry | None:
        """Get one catalog entry within a tenant."""
        ...

    async def find_entry(self, tenant_id: UUID, vendor: str, model_id: str) -> CatalogEntry | None:
        """Get an entry by its natural key."""
        ...

    async def insert_custom_entry(
        self,
        tenant_id: UUID,
        vendor: str,
        model_id: str,
        display_name: str,
        category: ModelCategory,
    ) -> CatalogEntry:
        """Insert a custom, enabled entry."""
        ...

    async def update_entry(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        enabled: bool | None = None,
        display_name: str | None = None,
        category: ModelCategory | None = None,
    ) -> CatalogEntry | None:
        """Atomically update an entry; disabling it also drops bindings to it."""
        ...

    async def delete_entry(self, tenant_id: UUID, entry_id: UUID) -> bool:
        """Atomically delete an entry and bindings pointing at it."""
        ...

    async def apply_plan(self, tenant_id: UUID, plan: ReconciliationPlan) -> None:
        """Atomically apply one vendor's reconciliation plan.

        Inserts and updates are upserts by (tenant, vendor, model_id) that never
        overwrite custom rows; retirements also drop bindings to retired rows.
        """
        ...

    # Binding operations
    async def list_bindings(self, tenant_id: UUID) -> list[DefaultModelBinding]:
        """List a tenant's default-model bindings."""
        ...

    async def get_binding(
        self, tenant_id: UUID, category: ModelCategory
    ) -> DefaultModelBinding | None:
        """Get the binding for one category."""
        ...

    async def upsert_binding(
        self,
        tenant_id: UUID,
        category: ModelCategory,
        vendor: str,
        model_id: str,
    ) -> DefaultModelBinding:
        """Insert or replace the binding for a category."""
        ...
