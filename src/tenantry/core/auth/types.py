"""Auth and tenancy domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class TenantRole(str, Enum):
    """Tenant membership roles, lowest first."""

    NORMAL = "normal"
    EDITOR = "editor"
    ADMIN = "admin"
    OWNER = "owner"


# Role hierarchy - higher index = more permissions
ROLE_HIERARCHY = [TenantRole.NORMAL, TenantRole.EDITOR, TenantRole.ADMIN, TenantRole.OWNER]


class User(BaseModel):
    """User domain model."""

    id: UUID
    email: EmailStr
    name: str | None = None
    is_active: bool = True
    created_at: datetime


class Tenant(BaseModel):
    """Tenant (workspace) domain model."""

    id: UUID
    name: str
    description: str | None = None
    plan: str = "free"
    status: str = "active"
    owner_id: UUID
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime | None = None


class Membership(BaseModel):
    """User's membership in a tenant."""

    tenant_id: UUID
    user_id: UUID
    role: TenantRole
    is_current: bool = False
    invited_by: UUID | None = None
    created_at: datetime


class MemberInfo(BaseModel):
    """Membership joined with the member's account details."""

    user_id: UUID
    email: EmailStr
    name: str | None = None
    role: TenantRole
    invited_by: UUID | None = None
    created_at: datetime


class TokenPayload(BaseModel):
    """JWT token payload claims."""

    sub: str  # user_id
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp


@dataclass(frozen=True)
class TenantContext:
    """Resolved tenant context for one request.

    Passed explicitly to every downstream call that acts within a tenant.
    """

    user_id: UUID
    tenant_id: UUID
    role: TenantRole
