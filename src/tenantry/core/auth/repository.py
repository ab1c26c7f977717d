"""Tenant repository protocol for database operations."""

from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from tenantry.core.auth.types import MemberInfo, Membership, Tenant, TenantRole, User


@runtime_checkable
class TenantRepository(Protocol):
    """Protocol for tenant, membership and identity lookups.

    Implementations provide actual database access (PostgreSQL, in-memory).
    Methods documented as atomic must run in a single transaction.
    """

    # User operations
    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        ...

    async def find_user_by_email(self, email: str) -> User | None:
        """Get user by email address."""
        ...

    # Tenant operations
    async def get_tenant(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        ...

    async def create_tenant_with_owner(
        self,
        owner_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Tenant:
        """Atomically create a tenant and make its owner's membership current."""
        ...

    async def update_tenant(
        self,
        tenant_id: UUID,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Tenant | None:
        """Update tenant fields."""
        ...

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        """Atomically delete a tenant with everything scoped to it."""
        ...

    async def list_user_tenants(self, user_id: UUID) -> list[tuple[Tenant, Membership]]:
        """Get all tenants a user belongs to with their memberships."""
        ...

    # Membership operations
    async def get_membership(self, tenant_id: UUID, user_id: UUID) -> Membership | None:
        """Get user's membership in a tenant."""
        ...

    async def get_current_membership(self, user_id: UUID) -> Membership | None:
        """Get the user's membership flagged as current, if any."""
        ...

    async def set_current_tenant(self, user_id: UUID, tenant_id: UUID) -> bool:
        """Atomically make tenant_id the user's only current membership.

        Returns False if the user has no membership in tenant_id.
        """
        ...

    async def add_member(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role: TenantRole,
        invited_by: UUID | None = None,
    ) -> Membership:
        """Add a non-current membership."""
        ...

    async def update_member_role(
        self, tenant_id: UUID, user_id: UUID, role: TenantRole
    ) -> Membership | None:
        """Change a member's role."""
        ...

    async def remove_member(self, tenant_id: UUID, user_id: UUID) -> bool:
        """Delete a membership."""
        ...

    async def list_members(self, tenant_id: UUID) -> list[MemberInfo]:
        """List tenant members with account details."""
        ...
