"""Tenant repository adapters."""

from .postgres import PostgresTenantRepository

__all__ = ["PostgresTenantRepository"]
