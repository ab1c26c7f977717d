"""Request authentication and tenant authorization dependencies."""

from .jwt_auth import CurrentUser, verify_jwt
from .tenant_context import (
    RequireAdmin,
    RequireEditor,
    RequireNormal,
    RequireOwner,
    require_tenant_role,
)

__all__ = [
    "CurrentUser",
    "verify_jwt",
    "require_tenant_role",
    "RequireNormal",
    "RequireEditor",
    "RequireAdmin",
    "RequireOwner",
]
