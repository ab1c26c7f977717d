"""Tests for InMemoryStore."""

import asyncio

import pytest

from tenantry.adapters.db.memory import InMemoryStore
from tenantry.core.auth.repository import TenantRepository
from tenantry.core.auth.types import Tenant, TenantRole, User
from tenantry.core.catalog.diff import plan_reconciliation
from tenantry.core.catalog.repository import CatalogRepository
from tenantry.core.catalog.types import ModelCategory, ModelDescriptor
from tenantry.core.exceptions import AlreadyMember, ModelAlreadyExists


class TestProtocols:
    """The store stands in for both repositories."""

    def test_implements_repositories(self, store: InMemoryStore) -> None:
        """Should implement TenantRepository and CatalogRepository."""
        assert isinstance(store, TenantRepository)
        assert isinstance(store, CatalogRepository)


class TestCurrentTenant:
    """Tests for the one-current-membership rule."""

    async def test_concurrent_switches_leave_one_current(
        self, store: InMemoryStore, member: User, owner: User
    ) -> None:
        """Racing switches for one user end with exactly one current tenant."""
        tenants = [
            await store.create_tenant_with_owner(owner.id, f"Tenant {i}") for i in range(5)
        ]
        for t in tenants:
            await store.add_member(t.id, member.id, TenantRole.NORMAL)

        await asyncio.gather(*(store.set_current_tenant(member.id, t.id) for t in tenants))

        assert len(store.current_memberships(member.id)) == 1

    async def test_switch_without_membership(
        self, store: InMemoryStore, outsider: User, tenant: Tenant
    ) -> None:
        """Switching into a tenant without membership returns False."""
        assert await store.set_current_tenant(outsider.id, tenant.id) is False
        assert store.current_memberships(outsider.id) == []

    async def test_duplicate_member(
        self, store: InMemoryStore, member: User, tenant: Tenant
    ) -> None:
        """Adding the same member twice raises AlreadyMember."""
        await store.add_member(tenant.id, member.id, TenantRole.EDITOR)

        with pytest.raises(AlreadyMember):
            await store.add_member(tenant.id, member.id, TenantRole.EDITOR)


class TestCatalogWrites:
    """Tests for catalog writes mirroring the SQL semantics."""

    async def test_duplicate_custom_entry(self, store: InMemoryStore, tenant: Tenant) -> None:
        """The (tenant, vendor, model_id) key is unique."""
        await store.insert_custom_entry(tenant.id, "openai", "m1", "M1", ModelCategory.LLM)

        with pytest.raises(ModelAlreadyExists):
            await store.insert_custom_entry(tenant.id, "openai", "m1", "M1", ModelCategory.LLM)

    async def test_plan_never_overwrites_custom(
        self, store: InMemoryStore, tenant: Tenant
    ) -> None:
        """An upsert that collides with a custom row leaves it alone."""
        custom = await store.insert_custom_entry(
            tenant.id, "openai", "gpt-4o", "Mine", ModelCategory.LLM
        )
        plan = plan_reconciliation(
            "openai", [ModelDescriptor(id="gpt-4o", display_name="GPT-4o")], []
        )

        await store.apply_plan(tenant.id, plan)

        assert await store.list_entries(tenant.id) == [custom]

    async def test_replayed_plan_is_harmless(self, store: InMemoryStore, tenant: Tenant) -> None:
        """Applying the same plan twice yields one row per model."""
        plan = plan_reconciliation(
            "openai", [ModelDescriptor(id="gpt-4o", display_name="GPT-4o")], []
        )

        await store.apply_plan(tenant.id, plan)
        await store.apply_plan(tenant.id, plan)

        assert [e.model_id for e in await store.list_entries(tenant.id)] == ["gpt-4o"]

    async def test_enabling_clears_retired(self, store: InMemoryStore, tenant: Tenant) -> None:
        """Manually enabling a retired entry un-retires it."""
        await store.apply_plan(
            tenant.id,
            plan_reconciliation("openai", [ModelDescriptor(id="a", display_name="A")], []),
        )
        existing = await store.list_entries(tenant.id)
        await store.apply_plan(tenant.id, plan_reconciliation("openai", [], existing))
        retired = (await store.list_entries(tenant.id))[0]
        assert retired.retired is True

        updated = await store.update_entry(tenant.id, retired.id, enabled=True)

        assert updated is not None
        assert updated.enabled is True
        assert updated.retired is False

    async def test_delete_tenant_cascades(
        self, store: InMemoryStore, owner: User, tenant: Tenant
    ) -> None:
        """Deleting a tenant removes every row scoped to it."""
        await store.upsert_credential(tenant.id, "openai", "token")
        await store.insert_custom_entry(tenant.id, "openai", "m1", "M1", ModelCategory.LLM)
        await store.upsert_binding(tenant.id, ModelCategory.LLM, "openai", "m1")

        assert await store.delete_tenant(tenant.id) is True

        assert store.memberships == {}
        assert store.credentials == {}
        assert store.entries == {}
        assert store.bindings == {}
        assert await store.delete_tenant(tenant.id) is False
