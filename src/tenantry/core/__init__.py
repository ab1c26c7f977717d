"""Core domain - tenant authorization, tenancy and the model catalog.

Nothing in here talks to a database or a vendor directly; those live in
tenantry.adapters behind the protocols declared alongside each domain.
"""

from .exceptions import (
    AuthorizationError,
    TenantryError,
    VendorError,
)

__all__ = [
    "TenantryError",
    "AuthorizationError",
    "VendorError",
]
