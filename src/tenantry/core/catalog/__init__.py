"""Model catalog domain: credentials, reconciliation and default models."""

from .credentials import CredentialStore, decode_config
from .diff import (
    EntryRetirement,
    EntryUpdate,
    ReconciliationPlan,
    dedupe_descriptors,
    plan_reconciliation,
)
from .interfaces import Cipher, VendorAdapter, VendorResolver
from .reconciler import CatalogReconciler
from .repository import CatalogRepository
from .settings import ModelSettingsStore
from .types import (
    CatalogEntry,
    CredentialSummary,
    DefaultModelBinding,
    ModelCategory,
    ModelDescriptor,
    ModelSource,
    ProviderCredential,
)

__all__ = [
    # Types
    "CatalogEntry",
    "CredentialSummary",
    "DefaultModelBinding",
    "ModelCategory",
    "ModelDescriptor",
    "ModelSource",
    "ProviderCredential",
    # Diff
    "EntryRetirement",
    "EntryUpdate",
    "ReconciliationPlan",
    "dedupe_descriptors",
    "plan_reconciliation",
    # Interfaces
    "Cipher",
    "CatalogRepository",
    "VendorAdapter",
    "VendorResolver",
    # Services
    "CatalogReconciler",
    "CredentialStore",
    "ModelSettingsStore",
    "decode_config",
]
