"""Domain-specific exceptions.

All exceptions in the tenantry system inherit from TenantryError,
making it easy to catch all system errors while still being able
to handle specific error types.

Every error carries an HTTP status and a stable machine-readable code so
the API layer can translate it without a per-route mapping.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tenantry.core.auth.types import TenantRole


class TenantryError(Exception):
    """Base exception for all tenantry errors.

    Attributes:
        status_code: HTTP status used when surfaced through the API.
        code: Stable identifier for clients.
    """

    status_code: int = 400
    code: str = "tenantry_error"


# Authorization failures. Surfaced as access denied, never retried.


class AuthorizationError(TenantryError):
    """Caller may not act within the requested tenant."""

    status_code = 403
    code = "forbidden"


class MissingTenantContext(AuthorizationError):
    """No tenant was supplied and the caller has no current tenant."""

    code = "missing_tenant_context"

    def __init__(self, message: str = "No active tenant, select a workspace first") -> None:
        """Initialize MissingTenantContext."""
        super().__init__(message)


class NotAMember(AuthorizationError):
    """Caller has no membership in the resolved tenant."""

    code = "not_a_member"

    def __init__(self, message: str = "You are not a member of this workspace") -> None:
        """Initialize NotAMember."""
        super().__init__(message)


class InsufficientRole(AuthorizationError):
    """Caller's role ranks below the route's minimum role.

    Attributes:
        role: The caller's role.
        acceptable_roles: Roles that would have satisfied the requirement.
    """

    code = "insufficient_role"

    def __init__(self, role: TenantRole, acceptable_roles: Sequence[TenantRole]) -> None:
        """Initialize InsufficientRole.

        Args:
            role: The caller's role.
            acceptable_roles: Roles that satisfy the requirement, lowest first.
        """
        self.role = role
        self.acceptable_roles = list(acceptable_roles)
        names = ", ".join(r.value for r in self.acceptable_roles)
        super().__init__(f"Insufficient role '{role.value}', requires one of: {names}")


# Tenant and membership errors.


class UserNotFound(TenantryError):
    """No account matches the given identity."""

    status_code = 404
    code = "user_not_found"


class TenantNotFound(TenantryError):
    """Tenant does not exist."""

    status_code = 404
    code = "tenant_not_found"


class AlreadyMember(TenantryError):
    """User already holds a membership in the tenant."""

    status_code = 409
    code = "already_member"


class MemberNotFound(TenantryError):
    """Membership does not exist."""

    status_code = 404
    code = "member_not_found"


class CannotModifyOwner(TenantryError):
    """The owner membership can be neither removed nor re-roled."""

    status_code = 400
    code = "cannot_modify_owner"


class InvalidRole(TenantryError):
    """Role is unknown or may not be assigned."""

    status_code = 400
    code = "invalid_role"


class InvalidTenantInput(TenantryError):
    """Tenant name or description fails validation."""

    status_code = 400
    code = "invalid_tenant_input"


# Catalog errors.


class VendorNotSupported(TenantryError):
    """Vendor is not one of the registered adapters."""

    status_code = 400
    code = "vendor_not_supported"


class InvalidCategory(TenantryError):
    """Model category is not one of the closed set."""

    status_code = 400
    code = "invalid_category"


class InvalidModelInput(TenantryError):
    """Custom model fields fail validation."""

    status_code = 400
    code = "invalid_model_input"


class ModelAlreadyExists(TenantryError):
    """(tenant, vendor, model_id) is already in the catalog."""

    status_code = 409
    code = "model_already_exists"


class ModelNotFound(TenantryError):
    """Catalog entry does not exist in the tenant."""

    status_code = 404
    code = "model_not_found"


class CannotDeleteAutoModel(TenantryError):
    """Only custom entries may be deleted."""

    status_code = 400
    code = "cannot_delete_auto_model"


class CannotModifyAutoModel(TenantryError):
    """Display name and category of discovered entries belong to the vendor."""

    status_code = 400
    code = "cannot_modify_auto_model"


class CredentialNotFound(TenantryError):
    """No credential stored for the vendor in this tenant."""

    status_code = 404
    code = "credential_not_found"


# Vendor failures. Recovered locally by the catalog, never retried inline.


class VendorError(TenantryError):
    """Vendor call failed.

    Attributes:
        vendor: Vendor name the call was made against.
    """

    status_code = 502
    code = "vendor_error"

    def __init__(self, vendor: str, message: str) -> None:
        """Initialize VendorError.

        Args:
            vendor: Vendor name.
            message: Error description.
        """
        super().__init__(message)
        self.vendor = vendor


class VendorUnreachable(VendorError):
    """Vendor endpoint timed out or returned a server error."""

    code = "vendor_unreachable"


class InvalidCredential(VendorError):
    """Vendor rejected the credential, or the credential is incomplete."""

    status_code = 400
    code = "invalid_credential"


class DecryptionError(TenantryError):
    """Stored credential could not be decrypted.

    Treated as a fatal configuration error for that credential row only.
    """

    status_code = 500
    code = "decryption_error"
