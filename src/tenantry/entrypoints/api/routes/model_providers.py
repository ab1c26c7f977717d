"""Model provider API routes: credentials, catalog and default models.

All routes act within the caller's current tenant unless the request names
one with the X-Tenant-ID header.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field

from tenantry.core.catalog.credentials import CredentialStore
from tenantry.core.catalog.reconciler import CatalogReconciler
from tenantry.core.catalog.settings import ModelSettingsStore
from tenantry.core.catalog.types import (
    CatalogEntry,
    CredentialSummary,
    DefaultModelBinding,
    ModelCategory,
    ModelSource,
)
from tenantry.entrypoints.api.deps import (
    get_credential_store,
    get_model_settings,
    get_reconciler,
)
from tenantry.entrypoints.api.middleware.jwt_auth import CurrentUser
from tenantry.entrypoints.api.middleware.tenant_context import RequireAdmin, RequireNormal

router = APIRouter(prefix="/model-providers", tags=["model-providers"])

# Annotated types for dependency injection
CredentialStoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
ReconcilerDep = Annotated[CatalogReconciler, Depends(get_reconciler)]
ModelSettingsDep = Annotated[ModelSettingsStore, Depends(get_model_settings)]


class VendorListResponse(BaseModel):
    """Supported vendors."""

    vendors: list[str]


class CredentialListResponse(BaseModel):
    """Configured vendors. Secrets are never returned."""

    providers: list[CredentialSummary]


class CredentialSave(BaseModel):
    """Save credential request."""

    vendor: str
    config: dict[str, Any] = Field(default_factory=dict)


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool


class ModelEntryResponse(BaseModel):
    """Catalog entry response."""

    id: UUID
    vendor: str
    model_id: str
    display_name: str
    category: ModelCategory
    source: ModelSource
    enabled: bool
    retired: bool
    created_at: datetime
    updated_at: datetime | None = None


class ModelListResponse(BaseModel):
    """Response for listing catalog entries."""

    models: list[ModelEntryResponse]
    total: int


class CustomModelCreate(BaseModel):
    """Custom model creation request."""

    vendor: str
    model_id: str
    category: str
    display_name: str | None = None


class ModelEntryUpdate(BaseModel):
    """Catalog entry update request."""

    enabled: bool | None = None
    display_name: str | None = None
    category: str | None = None


class ModelSettingUpdate(BaseModel):
    """Default model request."""

    category: str
    vendor: str
    model_id: str


class ModelSettingsResponse(BaseModel):
    """A tenant's default model bindings."""

    settings: list[DefaultModelBinding]


def _entry_response(entry: CatalogEntry) -> ModelEntryResponse:
    return ModelEntryResponse(
        id=entry.id,
        vendor=entry.vendor,
        model_id=entry.model_id,
        display_name=entry.display_name,
        category=entry.category,
        source=entry.source,
        enabled=entry.enabled,
        retired=entry.retired,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def _entry_list(entries: list[CatalogEntry]) -> ModelListResponse:
    return ModelListResponse(models=[_entry_response(e) for e in entries], total=len(entries))


@router.get("/vendors", response_model=VendorListResponse)
async def list_vendors(user_id: CurrentUser, reconciler: ReconcilerDep) -> VendorListResponse:
    """List vendors a credential can be saved for."""
    return VendorListResponse(vendors=reconciler.list_supported_vendors())


@router.get("/", response_model=CredentialListResponse)
async def list_credentials(
    ctx: RequireNormal,
    credentials: CredentialStoreDep,
) -> CredentialListResponse:
    """List configured vendors with their validity."""
    providers = await credentials.list_credentials_summary(ctx.tenant_id)
    return CredentialListResponse(providers=providers)


@router.post("/", response_model=SuccessResponse)
async def save_credential(
    body: CredentialSave,
    ctx: RequireAdmin,
    credentials: CredentialStoreDep,
) -> SuccessResponse:
    """Validate and store a vendor credential, then refresh the catalog.

    Requires admin role.
    """
    result = await credentials.save_credential(ctx.tenant_id, body.vendor, body.config)
    return SuccessResponse(success=result["success"])


@router.delete("/{vendor}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_credential(
    vendor: str,
    ctx: RequireAdmin,
    credentials: CredentialStoreDep,
) -> Response:
    """Remove a vendor credential with its catalog entries and bindings.

    Requires admin role.
    """
    await credentials.delete_credential(ctx.tenant_id, vendor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/models", response_model=ModelListResponse)
async def list_available_models(
    ctx: RequireNormal,
    reconciler: ReconcilerDep,
    category: Annotated[str | None, Query()] = None,
) -> ModelListResponse:
    """List enabled models, optionally for one category."""
    return _entry_list(await reconciler.get_available_models(ctx.tenant_id, category))


@router.get("/catalog", response_model=ModelListResponse)
async def get_catalog(ctx: RequireNormal, reconciler: ReconcilerDep) -> ModelListResponse:
    """List every catalog entry, including disabled and retired ones."""
    return _entry_list(await reconciler.get_catalog(ctx.tenant_id))


@router.post(
    "/catalog",
    response_model=ModelEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_custom_model(
    body: CustomModelCreate,
    ctx: RequireAdmin,
    reconciler: ReconcilerDep,
) -> ModelEntryResponse:
    """Declare a custom model.

    Requires admin role.
    """
    entry = await reconciler.create_custom_model(
        ctx.tenant_id,
        vendor=body.vendor,
        model_id=body.model_id,
        category=body.category,
        display_name=body.display_name,
    )
    return _entry_response(entry)


@router.patch("/catalog/{entry_id}", response_model=ModelEntryResponse)
async def update_model(
    entry_id: UUID,
    body: ModelEntryUpdate,
    ctx: RequireAdmin,
    reconciler: ReconcilerDep,
) -> ModelEntryResponse:
    """Enable or disable an entry, or edit a custom entry.

    Requires admin role.
    """
    entry = await reconciler.update_tenant_model(
        ctx.tenant_id,
        entry_id,
        enabled=body.enabled,
        display_name=body.display_name,
        category=body.category,
    )
    return _entry_response(entry)


@router.delete("/catalog/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_model(
    entry_id: UUID,
    ctx: RequireAdmin,
    reconciler: ReconcilerDep,
) -> Response:
    """Delete a custom entry.

    Requires admin role.
    """
    await reconciler.delete_tenant_model(ctx.tenant_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/settings", response_model=ModelSettingsResponse)
async def get_model_settings(
    ctx: RequireNormal,
    model_settings: ModelSettingsDep,
) -> ModelSettingsResponse:
    """List the tenant's default model per category."""
    return ModelSettingsResponse(settings=await model_settings.get_model_settings(ctx.tenant_id))


@router.post("/settings", response_model=DefaultModelBinding)
async def update_model_setting(
    body: ModelSettingUpdate,
    ctx: RequireAdmin,
    model_settings: ModelSettingsDep,
) -> DefaultModelBinding:
    """Set the default model for a category.

    Requires admin role.
    """
    return await model_settings.update_model_setting(
        ctx.tenant_id,
        category=body.category,
        vendor=body.vendor,
        model_id=body.model_id,
    )
