"""Per-tenant default model bindings."""

from __future__ import annotations

from uuid import UUID

import structlog

from tenantry.core.catalog.repository import CatalogRepository
from tenantry.core.catalog.types import DefaultModelBinding, ModelCategory

logger = structlog.get_logger()


class ModelSettingsStore:
    """Maps each model category to the tenant's chosen (vendor, model).

    Bindings are not checked against the catalog here; callers pick targets
    from the available-models listing. Disabling or deleting the target entry
    removes the binding in the catalog repository.
    """

    def __init__(self, repo: CatalogRepository) -> None:
        self._repo = repo

    async def update_model_setting(
        self,
        tenant_id: UUID,
        category: ModelCategory | str,
        vendor: str,
        model_id: str,
    ) -> DefaultModelBinding:
        """Upsert the binding for a category.

        Raises:
            InvalidCategory: If category is not one of the closed set.
        """
        parsed = ModelCategory.parse(category)
        binding = await self._repo.upsert_binding(tenant_id, parsed, vendor, model_id)
        logger.info(
            "default_model_set",
            tenant_id=str(tenant_id),
            category=parsed.value,
            vendor=vendor,
            model_id=model_id,
        )
        return binding

    async def get_model_settings(self, tenant_id: UUID) -> list[DefaultModelBinding]:
        return await self._repo.list_bindings(tenant_id)

    async def get_default_model(
        self, tenant_id: UUID, category: ModelCategory | str
    ) -> DefaultModelBinding | None:
        """Binding for one category, or None when the tenant has not chosen."""
        return await self._repo.get_binding(tenant_id, ModelCategory.parse(category))
