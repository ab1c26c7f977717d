"""Tenant directory: workspaces, memberships and the current-tenant flag."""

from typing import Any
from uuid import UUID

import structlog

from tenantry.core.auth.repository import TenantRepository
from tenantry.core.auth.types import MemberInfo, Membership, Tenant, TenantRole
from tenantry.core.exceptions import (
    AlreadyMember,
    CannotModifyOwner,
    InvalidRole,
    InvalidTenantInput,
    MemberNotFound,
    NotAMember,
    TenantNotFound,
    UserNotFound,
)

logger = structlog.get_logger()

MAX_TENANT_NAME_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 200


class TenantDirectory:
    """Service for tenant and membership operations.

    Caller authorization is enforced by the AuthorizationPipeline before any
    of these methods run; the directory only enforces membership and ownership rules.
    """

    def __init__(self, repo: TenantRepository) -> None:
        """Initialize with tenant repository.

        Args:
            repo: Tenant repository for database operations.
        """
        self._repo = repo

    async def create_tenant(
        self,
        user_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Tenant:
        """Create a tenant owned by user_id and make it their current one.

        Args:
            user_id: Owner of the new tenant.
            name: Tenant display name.
            description: Optional description.

        Returns:
            The created tenant.

        Raises:
            InvalidTenantInput: If name or description is empty or too long.
        """
        name = self._validate_name(name)
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidTenantInput(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

        tenant = await self._repo.create_tenant_with_owner(user_id, name, description)

        logger.info(
            "tenant_created",
            tenant_id=str(tenant.id),
            owner_id=str(user_id),
        )
        return tenant

    async def provision_default_tenant(self, user_id: UUID, display_name: str | None) -> Tenant:
        """Create the default workspace for a freshly registered user."""
        base = (display_name or "").strip() or "My"
        name = f"{base}'s Workspace"[:MAX_TENANT_NAME_LENGTH]
        return await self.create_tenant(user_id, name)

    async def switch_tenant(self, user_id: UUID, tenant_id: UUID) -> Tenant:
        """Make tenant_id the user's only current tenant.

        Raises:
            NotAMember: If the user has no membership in tenant_id.
        """
        switched = await self._repo.set_current_tenant(user_id, tenant_id)
        if not switched:
            raise NotAMember()

        tenant = await self._repo.get_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFound(f"Tenant {tenant_id} not found")

        logger.info("tenant_switched", user_id=str(user_id), tenant_id=str(tenant_id))
        return tenant

    async def delete_tenant(self, tenant_id: UUID) -> None:
        """Delete a tenant together with its memberships and catalog.

        Raises:
            TenantNotFound: If the tenant does not exist.
        """
        deleted = await self._repo.delete_tenant(tenant_id)
        if not deleted:
            raise TenantNotFound(f"Tenant {tenant_id} not found")
        logger.info("tenant_deleted", tenant_id=str(tenant_id))

    async def get_tenant(self, tenant_id: UUID) -> Tenant:
        """Get a tenant by ID.

        Raises:
            TenantNotFound: If the tenant does not exist.
        """
        tenant = await self._repo.get_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFound(f"Tenant {tenant_id} not found")
        return tenant

    async def update_tenant(
        self,
        tenant_id: UUID,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Tenant:
        """Update tenant name, description or settings.

        Raises:
            TenantNotFound: If the tenant does not exist.
            InvalidTenantInput: If name or description is invalid.
        """
        if name is not None:
            name = self._validate_name(name)
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidTenantInput(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )

        tenant = await self._repo.update_tenant(
            tenant_id,
            name=name,
            description=description,
            settings=settings,
        )
        if tenant is None:
            raise TenantNotFound(f"Tenant {tenant_id} not found")

        logger.info("tenant_updated", tenant_id=str(tenant_id))
        return tenant

    async def list_user_tenants(self, user_id: UUID) -> list[tuple[Tenant, Membership]]:
        """All tenants the user belongs to, with their membership."""
        return await self._repo.list_user_tenants(user_id)

    async def get_current_tenant(self, user_id: UUID) -> Tenant | None:
        """The user's current tenant, or None if none is selected."""
        membership = await self._repo.get_current_membership(user_id)
        if membership is None:
            return None
        return await self._repo.get_tenant(membership.tenant_id)

    async def list_members(self, tenant_id: UUID) -> list[MemberInfo]:
        """List a tenant's members."""
        return await self._repo.list_members(tenant_id)

    async def invite_member(
        self,
        tenant_id: UUID,
        email: str,
        role: TenantRole = TenantRole.NORMAL,
        invited_by: UUID | None = None,
    ) -> Membership:
        """Add an existing account to a tenant.

        The new membership is never current; the invitee switches explicitly.

        Raises:
            InvalidRole: If role is owner.
            UserNotFound: If no account matches email.
            AlreadyMember: If the account already belongs to the tenant.
        """
        self._ensure_assignable(role)

        user = await self._repo.find_user_by_email(email)
        if user is None:
            raise UserNotFound(f"No account found for {email}")

        existing = await self._repo.get_membership(tenant_id, user.id)
        if existing is not None:
            raise AlreadyMember(f"{email} is already a member of this workspace")

        membership = await self._repo.add_member(
            tenant_id=tenant_id,
            user_id=user.id,
            role=role,
            invited_by=invited_by,
        )

        logger.info(
            "member_invited",
            tenant_id=str(tenant_id),
            user_id=str(user.id),
            role=role.value,
        )
        return membership

    async def update_member_role(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role: TenantRole,
    ) -> Membership:
        """Change a member's role.

        Raises:
            MemberNotFound: If the membership does not exist.
            CannotModifyOwner: If the target is the owner.
            InvalidRole: If the new role is owner.
        """
        await self._get_modifiable_member(tenant_id, user_id)
        self._ensure_assignable(role)

        updated = await self._repo.update_member_role(tenant_id, user_id, role)
        if updated is None:
            raise MemberNotFound(f"User {user_id} is not a member of this workspace")

        logger.info(
            "member_role_updated",
            tenant_id=str(tenant_id),
            user_id=str(user_id),
            role=role.value,
        )
        return updated

    async def remove_member(self, tenant_id: UUID, user_id: UUID) -> None:
        """Remove a member from a tenant.

        Raises:
            MemberNotFound: If the membership does not exist.
            CannotModifyOwner: If the target is the owner.
        """
        await self._get_modifiable_member(tenant_id, user_id)

        removed = await self._repo.remove_member(tenant_id, user_id)
        if not removed:
            raise MemberNotFound(f"User {user_id} is not a member of this workspace")

        logger.info("member_removed", tenant_id=str(tenant_id), user_id=str(user_id))

    async def _get_modifiable_member(self, tenant_id: UUID, user_id: UUID) -> Membership:
        membership = await self._repo.get_membership(tenant_id, user_id)
        if membership is None:
            raise MemberNotFound(f"User {user_id} is not a member of this workspace")
        if membership.role == TenantRole.OWNER:
            raise CannotModifyOwner("The workspace owner cannot be modified or removed")
        return membership

    def _ensure_assignable(self, role: TenantRole) -> None:
        if role == TenantRole.OWNER:
            raise InvalidRole("The owner role is fixed at workspace creation")

    def _validate_name(self, name: str) -> str:
        name = name.strip()
        if not name:
            raise InvalidTenantInput("Tenant name cannot be empty")
        if len(name) > MAX_TENANT_NAME_LENGTH:
            raise InvalidTenantInput(
                f"Tenant name cannot exceed {MAX_TENANT_NAME_LENGTH} characters"
            )
        return name
