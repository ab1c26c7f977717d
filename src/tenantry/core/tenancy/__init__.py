"""Tenancy core domain."""

from tenantry.core.tenancy.directory import TenantDirectory

__all__ = ["TenantDirectory"]
