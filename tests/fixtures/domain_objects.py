"""Domain object and service fixtures for testing."""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

import pytest

from tenantry.adapters.crypto.fernet import FernetCipher
from tenantry.adapters.db.memory import InMemoryStore
from tenantry.core.auth.context import AuthorizationPipeline
from tenantry.core.auth.types import Tenant, User
from tenantry.core.catalog.credentials import CredentialStore
from tenantry.core.catalog.reconciler import CatalogReconciler
from tenantry.core.catalog.settings import ModelSettingsStore
from tenantry.core.tenancy.directory import TenantDirectory
from tests.fixtures.vendors import FakeVendorResolver


async def store_credential(
    store: InMemoryStore,
    cipher: FernetCipher,
    tenant_id: UUID,
    vendor: str,
    config: dict[str, Any] | None = None,
) -> None:
    """Write an encrypted credential straight into the store, skipping validation."""
    payload = json.dumps(config or {"api_key": f"{vendor}-key"})
    await store.upsert_credential(tenant_id, vendor, cipher.encrypt(payload))


@pytest.fixture
def store() -> InMemoryStore:
    """Return an empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def cipher() -> FernetCipher:
    """Return a cipher with a fresh key."""
    return FernetCipher(FernetCipher.generate_key())


@pytest.fixture
def owner(store: InMemoryStore) -> User:
    """Return a registered account that will own the sample tenant."""
    return store.add_user("owner@example.com", name="Olivia Owner")


@pytest.fixture
def member(store: InMemoryStore) -> User:
    """Return a registered account with no memberships yet."""
    return store.add_user("member@example.com", name="Max Member")


@pytest.fixture
def outsider(store: InMemoryStore) -> User:
    """Return a registered account that belongs to no sample tenant."""
    return store.add_user("outsider@example.com")


@pytest.fixture
async def tenant(store: InMemoryStore, owner: User) -> Tenant:
    """Return a tenant owned by the owner fixture."""
    return await store.create_tenant_with_owner(owner.id, "Acme")


@pytest.fixture
def directory(store: InMemoryStore) -> TenantDirectory:
    """Return a tenant directory over the store."""
    return TenantDirectory(store)


@pytest.fixture
def pipeline(store: InMemoryStore) -> AuthorizationPipeline:
    """Return an authorization pipeline over the store."""
    return AuthorizationPipeline(store)


@pytest.fixture
def reconciler(
    store: InMemoryStore, cipher: FernetCipher, vendors: FakeVendorResolver
) -> CatalogReconciler:
    """Return a reconciler over the store and fake vendors."""
    return CatalogReconciler(store, cipher, vendors, vendor_timeout=1.0)


@pytest.fixture
def credential_store(
    store: InMemoryStore,
    cipher: FernetCipher,
    vendors: FakeVendorResolver,
    reconciler: CatalogReconciler,
) -> CredentialStore:
    """Return a credential store wired to the reconciler."""
    return CredentialStore(store, cipher, vendors, reconciler)


@pytest.fixture
def model_settings(store: InMemoryStore) -> ModelSettingsStore:
    """Return a model settings store over the store."""
    return ModelSettingsStore(store)
