"""Tenant context dependencies.

Every tenant-scoped route declares its minimum role through one of the
Require* aliases. The tenant is taken from the ``tenant_id`` path parameter,
then the ``X-Tenant-ID`` header, then the caller's current tenant.
"""

from collections.abc import Callable
from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, Request

from tenantry.core.auth.context import AuthorizationPipeline
from tenantry.core.auth.types import TenantContext, TenantRole
from tenantry.entrypoints.api.deps import get_pipeline
from tenantry.entrypoints.api.middleware.jwt_auth import CurrentUser

TENANT_HEADER = "X-Tenant-ID"


def requested_tenant_id(request: Request) -> UUID | None:
    """Tenant id carried by the request, if any.

    Raises:
        HTTPException: 400 if the value is not a UUID.
    """
    raw = request.path_params.get("tenant_id") or request.headers.get(TENANT_HEADER)
    if not raw:
        return None
    try:
        return UUID(str(raw))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid tenant id") from None


def require_tenant_role(min_role: TenantRole) -> Callable[..., Any]:
    """Dependency to require a minimum role in the request's tenant.

    Usage:
        @router.delete("/{tenant_id}")
        async def delete_tenant(
            ctx: Annotated[TenantContext, Depends(require_tenant_role(TenantRole.OWNER))],
        ):
            ...

    Args:
        min_role: Minimum required role.

    Returns:
        Dependency function resolving the TenantContext.
    """

    async def tenant_checker(
        request: Request,
        user_id: CurrentUser,
        pipeline: Annotated[AuthorizationPipeline, Depends(get_pipeline)],
    ) -> TenantContext:
        context = await pipeline.authorize(user_id, requested_tenant_id(request), min_role)
        request.state.tenant_context = context
        return context

    return tenant_checker


# Common role dependencies for convenience
RequireNormal = Annotated[TenantContext, Depends(require_tenant_role(TenantRole.NORMAL))]
RequireEditor = Annotated[TenantContext, Depends(require_tenant_role(TenantRole.EDITOR))]
RequireAdmin = Annotated[TenantContext, Depends(require_tenant_role(TenantRole.ADMIN))]
RequireOwner = Annotated[TenantContext, Depends(require_tenant_role(TenantRole.OWNER))]
