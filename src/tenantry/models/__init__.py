"""SQLAlchemy models for the application database."""
from tenantry.models.base import BaseModel
from tenantry.models.provider import ProviderCredential, TenantModel, TenantModelSetting
from tenantry.models.tenant import Tenant, TenantMembership
from tenantry.models.user import User

__all__ = [
    "BaseModel",
    "User",
    "Tenant",
    "TenantMembership",
    "ProviderCredential",
    "TenantModel",
    "TenantModelSetting",
]
