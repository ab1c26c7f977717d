"""Catalog reconciliation and tenant model management."""

from __future__ import annotations

import asyncio
from uuid import UUID

import structlog

from tenantry.core.catalog.credentials import decode_config
from tenantry.core.catalog.diff import ReconciliationPlan, plan_reconciliation
from tenantry.core.catalog.interfaces import Cipher, VendorResolver
from tenantry.core.catalog.repository import CatalogRepository
from tenantry.core.catalog.types import (
    CatalogEntry,
    ModelCategory,
    ModelDescriptor,
    ModelSource,
    ProviderCredential,
)
from tenantry.core.exceptions import (
    CannotDeleteAutoModel,
    CannotModifyAutoModel,
    DecryptionError,
    InvalidModelInput,
    ModelAlreadyExists,
    ModelNotFound,
    VendorError,
    VendorNotSupported,
)

logger = structlog.get_logger()

DEFAULT_VENDOR_TIMEOUT_SECONDS = 15.0


class CatalogReconciler:
    """Keeps a tenant's catalog in step with what its vendors offer.

    Each configured vendor is fetched in parallel under its own timeout. A
    vendor that fails is skipped for the pass and its rows are left as they
    are. Every vendor's changes are written as one idempotent batch, so
    passes for the same tenant may safely interleave.
    """

    def __init__(
        self,
        repo: CatalogRepository,
        cipher: Cipher,
        vendors: VendorResolver,
        vendor_timeout: float = DEFAULT_VENDOR_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the reconciler.

        Args:
            repo: Catalog repository.
            cipher: Decrypts stored vendor configuration.
            vendors: Registered vendor adapters.
            vendor_timeout: Upper bound in seconds for one vendor's listing.
        """
        self._repo = repo
        self._cipher = cipher
        self._vendors = vendors
        self._vendor_timeout = vendor_timeout

    async def reconcile(self, tenant_id: UUID) -> list[ReconciliationPlan]:
        """Run one reconciliation pass for a tenant.

        Returns:
            The plans computed for every vendor that responded.
        """
        credentials = await self._repo.list_credentials(tenant_id, valid_only=True)
        if not credentials:
            return []

        results = await asyncio.gather(
            *(self._reconcile_vendor(tenant_id, credential) for credential in credentials),
            return_exceptions=True,
        )

        plans: list[ReconciliationPlan] = []
        failures: list[BaseException] = []
        for credential, result in zip(credentials, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    "catalog_batch_failed",
                    tenant_id=str(tenant_id),
                    vendor=credential.vendor,
                    error=str(result),
                )
                failures.append(result)
            elif result is not None:
                plans.append(result)

        if failures:
            raise failures[0]
        return plans

    async def _reconcile_vendor(
        self, tenant_id: UUID, credential: ProviderCredential
    ) -> ReconciliationPlan | None:
        log = logger.bind(tenant_id=str(tenant_id), vendor=credential.vendor)

        adapter = self._vendors.get(credential.vendor)
        if adapter is None:
            log.warning("catalog_vendor_unsupported")
            return None

        try:
            config = decode_config(self._cipher, credential.encrypted_config)
        except DecryptionError as e:
            log.error("catalog_credential_decrypt_failed", error=str(e))
            return None

        existing = await self._repo.list_entries(tenant_id, vendor=credential.vendor)

        allow_retire = True
        try:
            fetched: list[ModelDescriptor] = await asyncio.wait_for(
                adapter.fetch_models(config), timeout=self._vendor_timeout
            )
        except (VendorError, TimeoutError) as e:
            log.warning("catalog_vendor_fetch_failed", error=str(e) or type(e).__name__)
            if any(entry.source == ModelSource.AUTO for entry in existing):
                return None
            # Nothing discovered yet: seed from the curated list, retire nothing.
            fetched = adapter.recommended_models()
            allow_retire = False
        except Exception:
            log.error("catalog_vendor_fetch_crashed", exc_info=True)
            return None

        plan = plan_reconciliation(
            credential.vendor,
            fetched,
            existing,
            allow_retire=allow_retire,
        )
        if plan.is_empty:
            log.debug("catalog_unchanged")
            return plan

        await self._repo.apply_plan(tenant_id, plan)
        log.info(
            "catalog_reconciled",
            inserted=len(plan.inserts),
            updated=len(plan.updates),
            retired=len(plan.retirements),
        )
        return plan

    async def get_available_models(
        self,
        tenant_id: UUID,
        category: ModelCategory | str | None = None,
        refresh: bool = True,
    ) -> list[CatalogEntry]:
        """Enabled models, optionally for one category.

        Args:
            tenant_id: Tenant to list.
            category: Optional category filter.
            refresh: Reconcile first. Pass False for a side-effect-free read.

        Returns:
            Entries ordered by vendor then display name.
        """
        parsed = ModelCategory.parse(category) if category is not None else None
        if refresh:
            await self.reconcile(tenant_id)
        return await self._repo.list_entries(tenant_id, enabled_only=True, category=parsed)

    async def get_catalog(self, tenant_id: UUID) -> list[CatalogEntry]:
        """Every catalog entry, including disabled and retired ones."""
        await self.reconcile(tenant_id)
        return await self._repo.list_entries(tenant_id)

    async def create_custom_model(
        self,
        tenant_id: UUID,
        vendor: str,
        model_id: str,
        category: ModelCategory | str,
        display_name: str | None = None,
    ) -> CatalogEntry:
        """Declare a model the vendor listing does not report.

        Raises:
            VendorNotSupported: If vendor has no adapter.
            InvalidCategory: If category is not one of the closed set.
            ModelAlreadyExists: If (tenant, vendor, model_id) is taken.
        """
        if self._vendors.get(vendor) is None:
            raise VendorNotSupported(f"Vendor '{vendor}' is not supported")
        parsed = ModelCategory.parse(category)

        model_id = model_id.strip()
        if not model_id:
            raise InvalidModelInput("Model id cannot be empty")

        if await self._repo.find_entry(tenant_id, vendor, model_id) is not None:
            raise ModelAlreadyExists(f"Model '{model_id}' already exists for {vendor}")

        entry = await self._repo.insert_custom_entry(
            tenant_id=tenant_id,
            vendor=vendor,
            model_id=model_id,
            display_name=(display_name or "").strip() or model_id,
            category=parsed,
        )
        logger.info(
            "custom_model_created",
            tenant_id=str(tenant_id),
            vendor=vendor,
            model_id=model_id,
        )
        return entry

    async def update_tenant_model(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        enabled: bool | None = None,
        display_name: str | None = None,
        category: ModelCategory | str | None = None,
    ) -> CatalogEntry:
        """Update an entry's flags or, for custom entries, its metadata.

        Disabling an entry also removes any default-model binding to it.

        Raises:
            ModelNotFound: If the entry does not exist in the tenant.
            CannotModifyAutoModel: If display_name or category is given for
                an auto entry.
            InvalidCategory: If category is not one of the closed set.
        """
        entry = await self._get_entry(tenant_id, entry_id)
        parsed = ModelCategory.parse(category) if category is not None else None

        if entry.source == ModelSource.AUTO and (display_name is not None or parsed is not None):
            raise CannotModifyAutoModel(
                "Display name and category of discovered models follow the vendor"
            )

        updated = await self._repo.update_entry(
            tenant_id,
            entry_id,
            enabled=enabled,
            display_name=display_name.strip() or entry.model_id if display_name else None,
            category=parsed,
        )
        if updated is None:
            raise ModelNotFound(f"Model {entry_id} not found")

        logger.info(
            "tenant_model_updated",
            tenant_id=str(tenant_id),
            entry_id=str(entry_id),
            enabled=updated.enabled,
        )
        return updated

    async def delete_tenant_model(self, tenant_id: UUID, entry_id: UUID) -> None:
        """Delete a custom entry and any binding to it.

        Raises:
            ModelNotFound: If the entry does not exist in the tenant.
            CannotDeleteAutoModel: If the entry was discovered automatically.
        """
        entry = await self._get_entry(tenant_id, entry_id)
        if entry.source != ModelSource.CUSTOM:
            raise CannotDeleteAutoModel("Discovered models can be disabled but not deleted")

        if not await self._repo.delete_entry(tenant_id, entry_id):
            raise ModelNotFound(f"Model {entry_id} not found")

        logger.info(
            "custom_model_deleted",
            tenant_id=str(tenant_id),
            vendor=entry.vendor,
            model_id=entry.model_id,
        )

    def list_supported_vendors(self) -> list[str]:
        """Vendor names a credential may be saved for."""
        return sorted(self._vendors.supported_vendors())

    async def _get_entry(self, tenant_id: UUID, entry_id: UUID) -> CatalogEntry:
        entry = await self._repo.get_entry(tenant_id, entry_id)
        if entry is None:
            raise ModelNotFound(f"Model {entry_id} not found")
        return entry
