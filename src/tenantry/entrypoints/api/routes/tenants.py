"""Tenant and membership API routes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, EmailStr

from tenantry.core.auth.types import MemberInfo, Membership, Tenant, TenantRole
from tenantry.core.exceptions import MissingTenantContext
from tenantry.core.tenancy.directory import TenantDirectory
from tenantry.entrypoints.api.deps import get_directory
from tenantry.entrypoints.api.middleware.jwt_auth import CurrentUser
from tenantry.entrypoints.api.middleware.tenant_context import (
    RequireAdmin,
    RequireNormal,
    RequireOwner,
)

router = APIRouter(prefix="/tenants", tags=["tenants"])

# Annotated types for dependency injection
DirectoryDep = Annotated[TenantDirectory, Depends(get_directory)]


class TenantCreate(BaseModel):
    """Tenant creation request."""

    name: str
    description: str | None = None


class TenantUpdate(BaseModel):
    """Tenant update request."""

    name: str | None = None
    description: str | None = None
    settings: dict[str, Any] | None = None


class TenantResponse(BaseModel):
    """Tenant response, with the caller's membership when known."""

    id: UUID
    name: str
    description: str | None
    plan: str
    status: str
    owner_id: UUID
    created_at: datetime
    role: TenantRole | None = None
    is_current: bool | None = None


class TenantListResponse(BaseModel):
    """Response for listing tenants."""

    tenants: list[TenantResponse]
    total: int


class MemberInvite(BaseModel):
    """Invite member request."""

    email: EmailStr
    role: TenantRole = TenantRole.NORMAL


class MemberRoleUpdate(BaseModel):
    """Change member role request."""

    role: TenantRole


class MemberResponse(BaseModel):
    """Member response."""

    user_id: UUID
    email: str
    name: str | None = None
    role: TenantRole
    invited_by: UUID | None = None
    created_at: datetime


class MemberListResponse(BaseModel):
    """Response for listing members."""

    members: list[MemberResponse]
    total: int


def _tenant_response(tenant: Tenant, membership: Membership | None = None) -> TenantResponse:
    return TenantResponse(
        id=tenant.id,
        name=tenant.name,
        description=tenant.description,
        plan=tenant.plan,
        status=tenant.status,
        owner_id=tenant.owner_id,
        created_at=tenant.created_at,
        role=membership.role if membership else None,
        is_current=membership.is_current if membership else None,
    )


def _member_response(member: MemberInfo) -> MemberResponse:
    return MemberResponse(
        user_id=member.user_id,
        email=member.email,
        name=member.name,
        role=member.role,
        invited_by=member.invited_by,
        created_at=member.created_at,
    )


@router.get("/", response_model=TenantListResponse)
async def list_tenants(user_id: CurrentUser, directory: DirectoryDep) -> TenantListResponse:
    """List every tenant the caller belongs to."""
    pairs = await directory.list_user_tenants(user_id)
    tenants = [_tenant_response(tenant, membership) for tenant, membership in pairs]
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.get("/current", response_model=TenantResponse)
async def get_current_tenant(user_id: CurrentUser, directory: DirectoryDep) -> TenantResponse:
    """Get the caller's current tenant.

    Raises MissingTenantContext (403) when the caller has none selected.
    """
    tenant = await directory.get_current_tenant(user_id)
    if tenant is None:
        raise MissingTenantContext()
    return _tenant_response(tenant).model_copy(update={"is_current": True})


@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    body: TenantCreate,
    user_id: CurrentUser,
    directory: DirectoryDep,
) -> TenantResponse:
    """Create a tenant owned by the caller and switch to it."""
    tenant = await directory.create_tenant(user_id, body.name, body.description)
    return _tenant_response(tenant).model_copy(
        update={"role": TenantRole.OWNER, "is_current": True}
    )


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: UUID,
    ctx: RequireNormal,
    directory: DirectoryDep,
) -> TenantResponse:
    """Get a tenant the caller belongs to."""
    tenant = await directory.get_tenant(ctx.tenant_id)
    return _tenant_response(tenant).model_copy(update={"role": ctx.role})


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: UUID,
    body: TenantUpdate,
    ctx: RequireAdmin,
    directory: DirectoryDep,
) -> TenantResponse:
    """Update tenant details.

    Requires admin role.
    """
    tenant = await directory.update_tenant(
        ctx.tenant_id,
        name=body.name,
        description=body.description,
        settings=body.settings,
    )
    return _tenant_response(tenant).model_copy(update={"role": ctx.role})


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: UUID,
    ctx: RequireOwner,
    directory: DirectoryDep,
) -> Response:
    """Delete a tenant with its memberships and catalog.

    Requires owner role.
    """
    await directory.delete_tenant(ctx.tenant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{tenant_id}/switch", response_model=TenantResponse)
async def switch_tenant(
    tenant_id: UUID,
    ctx: RequireNormal,
    directory: DirectoryDep,
) -> TenantResponse:
    """Make this tenant the caller's current one."""
    tenant = await directory.switch_tenant(ctx.user_id, ctx.tenant_id)
    return _tenant_response(tenant).model_copy(update={"role": ctx.role, "is_current": True})


@router.get("/{tenant_id}/members", response_model=MemberListResponse)
async def list_members(
    tenant_id: UUID,
    ctx: RequireNormal,
    directory: DirectoryDep,
) -> MemberListResponse:
    """List the tenant's members."""
    members = [_member_response(m) for m in await directory.list_members(ctx.tenant_id)]
    return MemberListResponse(members=members, total=len(members))


@router.post(
    "/{tenant_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_member(
    tenant_id: UUID,
    body: MemberInvite,
    ctx: RequireAdmin,
    directory: DirectoryDep,
) -> MemberResponse:
    """Add an existing account to the tenant.

    Requires admin role.
    """
    await directory.invite_member(
        ctx.tenant_id,
        body.email,
        role=body.role,
        invited_by=ctx.user_id,
    )
    members = await directory.list_members(ctx.tenant_id)
    invited = next(m for m in members if m.email.lower() == body.email.lower())
    return _member_response(invited)


@router.patch("/{tenant_id}/members/{user_id}", response_model=MemberResponse)
async def update_member_role(
    tenant_id: UUID,
    user_id: UUID,
    body: MemberRoleUpdate,
    ctx: RequireAdmin,
    directory: DirectoryDep,
) -> MemberResponse:
    """Change a member's role.

    Requires admin role. The owner cannot be changed.
    """
    await directory.update_member_role(ctx.tenant_id, user_id, body.role)
    members = await directory.list_members(ctx.tenant_id)
    return _member_response(next(m for m in members if m.user_id == user_id))


@router.delete("/{tenant_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    tenant_id: UUID,
    user_id: UUID,
    ctx: RequireAdmin,
    directory: DirectoryDep,
) -> Response:
    """Remove a member from the tenant.

    Requires admin role. The owner cannot be removed.
    """
    await directory.remove_member(ctx.tenant_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
