"""Auth domain types and utilities."""

from tenantry.core.auth.context import (
    AuthorizationPipeline,
    acceptable_roles,
    check_role,
    role_rank,
)
from tenantry.core.auth.jwt import TokenError, create_access_token, decode_token
from tenantry.core.auth.repository import TenantRepository
from tenantry.core.auth.types import (
    ROLE_HIERARCHY,
    MemberInfo,
    Membership,
    Tenant,
    TenantContext,
    TenantRole,
    TokenPayload,
    User,
)

__all__ = [
    "User",
    "Tenant",
    "Membership",
    "MemberInfo",
    "TenantRole",
    "TenantContext",
    "TokenPayload",
    "ROLE_HIERARCHY",
    "AuthorizationPipeline",
    "acceptable_roles",
    "check_role",
    "role_rank",
    "create_access_token",
    "decode_token",
    "TokenError",
    "TenantRepository",
]
