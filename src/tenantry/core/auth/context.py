"""Tenant context resolution and role checks.

The pipeline runs two independent checks in a fixed order: membership first,
then role. A role is only meaningful once the membership behind it exists.
"""

from uuid import UUID

import structlog

from tenantry.core.auth.repository import TenantRepository
from tenantry.core.auth.types import ROLE_HIERARCHY, Membership, TenantContext, TenantRole
from tenantry.core.exceptions import InsufficientRole, MissingTenantContext, NotAMember

logger = structlog.get_logger()


def role_rank(role: TenantRole) -> int:
    """Position of a role in the hierarchy, higher means more permissions."""
    return ROLE_HIERARCHY.index(role)


def acceptable_roles(min_role: TenantRole) -> list[TenantRole]:
    """Roles that satisfy a minimum role requirement, lowest first."""
    return ROLE_HIERARCHY[role_rank(min_role) :]


def check_role(role: TenantRole, min_role: TenantRole) -> None:
    """Verify a role ranks at least as high as min_role.

    Raises:
        InsufficientRole: With the acceptable roles for diagnostics.
    """
    if role_rank(role) < role_rank(min_role):
        raise InsufficientRole(role, acceptable_roles(min_role))


class AuthorizationPipeline:
    """Resolves (tenant, role) for a caller and enforces role requirements."""

    def __init__(self, repo: TenantRepository) -> None:
        """Initialize with tenant repository.

        Args:
            repo: Repository used for membership lookups.
        """
        self._repo = repo

    async def check_membership(self, user_id: UUID, tenant_id: UUID) -> Membership:
        """Return the caller's membership in tenant_id.

        Raises:
            NotAMember: If no membership row exists.
        """
        membership = await self._repo.get_membership(tenant_id, user_id)
        if membership is None:
            logger.warning(
                "tenant_access_denied",
                user_id=str(user_id),
                tenant_id=str(tenant_id),
            )
            raise NotAMember()
        return membership

    async def resolve_context(self, user_id: UUID, tenant_id: UUID | None = None) -> TenantContext:
        """Resolve the tenant and role a request acts under.

        Args:
            user_id: Authenticated caller.
            tenant_id: Tenant carried by the request, if any. When omitted the
                caller's current tenant is used.

        Returns:
            The resolved TenantContext.

        Raises:
            MissingTenantContext: No tenant given and no current membership.
            NotAMember: Caller is not a member of the resolved tenant.
        """
        if tenant_id is None:
            current = await self._repo.get_current_membership(user_id)
            if current is None:
                logger.info("tenant_context_missing", user_id=str(user_id))
                raise MissingTenantContext()
            membership = current
        else:
            membership = await self.check_membership(user_id, tenant_id)

        return TenantContext(
            user_id=user_id,
            tenant_id=membership.tenant_id,
            role=membership.role,
        )

    async def authorize(
        self,
        user_id: UUID,
        tenant_id: UUID | None = None,
        min_role: TenantRole = TenantRole.NORMAL,
    ) -> TenantContext:
        """Resolve context, then require min_role.

        Raises:
            MissingTenantContext: No tenant given and no current membership.
            NotAMember: Caller is not a member of the resolved tenant.
            InsufficientRole: Caller's role ranks below min_role.
        """
        context = await self.resolve_context(user_id, tenant_id)
        try:
            check_role(context.role, min_role)
        except InsufficientRole:
            logger.warning(
                "tenant_role_denied",
                user_id=str(user_id),
                tenant_id=str(context.tenant_id),
                role=context.role.value,
                required=min_role.value,
            )
            raise
        return context
