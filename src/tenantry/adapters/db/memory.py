"""In-memory store for local runs and tests.

Implements both TenantRepository and CatalogRepository. Every mutation
holds one asyncio.Lock, which gives each multi-row operation the same
all-or-nothing visibility a database transaction does.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from tenantry.core.auth.types import MemberInfo, Membership, Tenant, TenantRole, User
from tenantry.core.catalog.diff import ReconciliationPlan
from tenantry.core.catalog.types import (
    CatalogEntry,
    DefaultModelBinding,
    ModelCategory,
    ModelSource,
    ProviderCredential,
)
from tenantry.core.exceptions import AlreadyMember, ModelAlreadyExists


def _now() -> datetime:
    return datetime.now(UTC)


class InMemoryStore:
    """Dict-backed tenant and catalog repository.

    Attributes:
        users: Accounts by id.
        tenants: Tenants by id.
        memberships: Memberships by (tenant_id, user_id).
        credentials: Credentials by (tenant_id, vendor).
        entries: Catalog entries by id.
        bindings: Default-model bindings by (tenant_id, category).
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.users: dict[UUID, User] = {}
        self.tenants: dict[UUID, Tenant] = {}
        self.memberships: dict[tuple[UUID, UUID], Membership] = {}
        self.credentials: dict[tuple[UUID, str], ProviderCredential] = {}
        self.entries: dict[UUID, CatalogEntry] = {}
        self.bindings: dict[tuple[UUID, ModelCategory], DefaultModelBinding] = {}
        self._lock = asyncio.Lock()

    # Seeding, used by the demo lifespan and tests
    def add_user(self, email: str, name: str | None = None, user_id: UUID | None = None) -> User:
        """Register an account directly. Registration itself lives elsewhere."""
        user = User(id=user_id or uuid4(), email=email, name=name, created_at=_now())
        self.users[user.id] = user
        return user

    def current_memberships(self, user_id: UUID) -> list[Membership]:
        return [m for m in self.memberships.values() if m.user_id == user_id and m.is_current]

    def _set_current(self, user_id: UUID, tenant_id: UUID) -> None:
        for key, membership in self.memberships.items():
            if membership.user_id != user_id:
                continue
            is_target = membership.tenant_id == tenant_id
            if membership.is_current != is_target:
                self.memberships[key] = membership.model_copy(update={"is_current": is_target})

    # User operations
    async def get_user_by_id(self, user_id: UUID) -> User | None:
        return self.users.get(user_id)

    async def find_user_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self.users.values():
            if user.email.lower() == wanted:
                return user
        return None

    # Tenant operations
    async def get_tenant(self, tenant_id: UUID) -> Tenant | None:
        return self.tenants.get(tenant_id)

    async def create_tenant_with_owner(
        self,
        owner_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Tenant:
        async with self._lock:
            tenant = Tenant(
                id=uuid4(),
                name=name,
                description=description,
                owner_id=owner_id,
                created_at=_now(),
            )
            self.tenants[tenant.id] = tenant
            self.memberships[(tenant.id, owner_id)] = Membership(
                tenant_id=tenant.id,
                user_id=owner_id,
                role=TenantRole.OWNER,
                created_at=_now(),
            )
            self._set_current(owner_id, tenant.id)
            return tenant

    async def update_tenant(
        self,
        tenant_id: UUID,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> Tenant | None:
        async with self._lock:
            tenant = self.tenants.get(tenant_id)
            if tenant is None:
                return None
            changes: dict[str, Any] = {}
            if name is not None:
                changes["name"] = name
            if description is not None:
                changes["description"] = description
            if settings is not None:
                changes["settings"] = settings
            if changes:
                tenant = tenant.model_copy(update={**changes, "updated_at": _now()})
                self.tenants[tenant_id] = tenant
            return tenant

    async def delete_tenant(self, tenant_id: UUID) -> bool:
        async with self._lock:
            if self.tenants.pop(tenant_id, None) is None:
                return False
            for store in (self.memberships, self.credentials, self.bindings):
                for key in [k for k in store if k[0] == tenant_id]:
                    del store[key]
            for entry_id in [k for k, e in self.entries.items() if e.tenant_id == tenant_id]:
                del self.entries[entry_id]
            return True

    async def list_user_tenants(self, user_id: UUID) -> list[tuple[Tenant, Membership]]:
        pairs = [
            (self.tenants[m.tenant_id], m)
            for m in self.memberships.values()
            if m.user_id == user_id and m.tenant_id in self.tenants
        ]
        return sorted(pairs, key=lambda pair: pair[1].created_at)

    # Membership operations
    async def get_membership(self, tenant_id: UUID, user_id: UUID) -> Membership | None:
        return self.memberships.get((tenant_id, user_id))

    async def get_current_membership(self, user_id: UUID) -> Membership | None:
        current = self.current_memberships(user_id)
        return current[0] if current else None

    async def set_current_tenant(self, user_id: UUID, tenant_id: UUID) -> bool:
        async with self._lock:
            if (tenant_id, user_id) not in self.memberships:
                return False
            self._set_current(user_id, tenant_id)
            return True

    async def add_member(
        self,
        tenant_id: UUID,
        user_id: UUID,
        role: TenantRole,
        invited_by: UUID | None = None,
    ) -> Membership:
        async with self._lock:
            if (tenant_id, user_id) in self.memberships:
                raise AlreadyMember("User is already a member of this workspace")
            membership = Membership(
                tenant_id=tenant_id,
                user_id=user_id,
                role=role,
                invited_by=invited_by,
                created_at=_now(),
            )
            self.memberships[(tenant_id, user_id)] = membership
            return membership

    async def update_member_role(
        self, tenant_id: UUID, user_id: UUID, role: TenantRole
    ) -> Membership | None:
        async with self._lock:
            membership = self.memberships.get((tenant_id, user_id))
            if membership is None:
                return None
            membership = membership.model_copy(update={"role": role})
            self.memberships[(tenant_id, user_id)] = membership
            return membership

    async def remove_member(self, tenant_id: UUID, user_id: UUID) -> bool:
        async with self._lock:
            return self.memberships.pop((tenant_id, user_id), None) is not None

    async def list_members(self, tenant_id: UUID) -> list[MemberInfo]:
        members = []
        for membership in sorted(self.memberships.values(), key=lambda m: m.created_at):
            user = self.users.get(membership.user_id)
            if membership.tenant_id != tenant_id or user is None:
                continue
            members.append(
                MemberInfo(
                    user_id=user.id,
                    email=user.email,
                    name=user.name,
                    role=membership.role,
                    invited_by=membership.invited_by,
                    created_at=membership.created_at,
                )
            )
        return members

    # Credential operations
    async def list_credentials(
        self, tenant_id: UUID, valid_only: bool = False
    ) -> list[ProviderCredential]:
        credentials = [
            c
            for (t, _), c in self.credentials.items()
            if t == tenant_id and (c.is_valid or not valid_only)
        ]
        return sorted(credentials, key=lambda c: c.vendor)

    async def get_credential(self, tenant_id: UUID, vendor: str) -> ProviderCredential | None:
        return self.credentials.get((tenant_id, vendor))

    async def upsert_credential(
        self, tenant_id: UUID, vendor: str, encrypted_config: str
    ) -> ProviderCredential:
        async with self._lock:
            now = _now()
            existing = self.credentials.get((tenant_id, vendor))
            credential = ProviderCredential(
                tenant_id=tenant_id,
                vendor=vendor,
                encrypted_config=encrypted_config,
                is_valid=True,
                last_validated_at=now,
                created_at=existing.created_at if existing else now,
                updated_at=now if existing else None,
            )
            self.credentials[(tenant_id, vendor)] = credential
            return credential

    async def delete_credential(self, tenant_id: UUID, vendor: str) -> bool:
        async with self._lock:
            if self.credentials.pop((tenant_id, vendor), None) is None:
                return False
            for entry_id, entry in list(self.entries.items()):
                if entry.tenant_id == tenant_id and entry.vendor == vendor:
                    del self.entries[entry_id]
            for key, binding in list(self.bindings.items()):
                if key[0] == tenant_id and binding.vendor == vendor:
                    del self.bindings[key]
            return True

    # Catalog operations
    async def list_entries(
        self,
        tenant_id: UUID,
        vendor: str | None = None,
        enabled_only: bool = False,
        category: ModelCategory | None = None,
    ) -> list[CatalogEntry]:
        entries = [
            e
            for e in self.entries.values()
            if e.tenant_id == tenant_id
            and (vendor is None or e.vendor == vendor)
            and (e.enabled or not enabled_only)
            and (category is None or e.category == category)
        ]
        return sorted(entries, key=lambda e: (e.vendor, e.display_name))

    async def get_entry(self, tenant_id: UUID, entry_id: UUID) -> CatalogEntry | None:
        entry = self.entries.get(entry_id)
        return entry if entry is not None and entry.tenant_id == tenant_id else None

    async def find_entry(self, tenant_id: UUID, vendor: str, model_id: str) -> CatalogEntry | None:
        return self._find(tenant_id, vendor, model_id)

    def _find(self, tenant_id: UUID, vendor: str, model_id: str) -> CatalogEntry | None:
        for entry in self.entries.values():
            if (entry.tenant_id, entry.vendor, entry.model_id) == (tenant_id, vendor, model_id):
                return entry
        return None

    def _drop_bindings(self, tenant_id: UUID, vendor: str, model_ids: set[str]) -> None:
        for key, binding in list(self.bindings.items()):
            if key[0] == tenant_id and binding.vendor == vendor and binding.model_id in model_ids:
                del self.bindings[key]

    async def insert_custom_entry(
        self,
        tenant_id: UUID,
        vendor: str,
        model_id: str,
        display_name: str,
        category: ModelCategory,
    ) -> CatalogEntry:
        async with self._lock:
            if self._find(tenant_id, vendor, model_id) is not None:
                raise ModelAlreadyExists(f"Model '{model_id}' already exists for {vendor}")
            entry = CatalogEntry(
                id=uuid4(),
                tenant_id=tenant_id,
                vendor=vendor,
                model_id=model_id,
                display_name=display_name,
                category=category,
                source=ModelSource.CUSTOM,
                created_at=_now(),
            )
            self.entries[entry.id] = entry
            return entry

    async def update_entry(
        self,
        tenant_id: UUID,
        entry_id: UUID,
        enabled: bool | None = None,
        display_name: str | None = None,
        category: ModelCategory | None = None,
    ) -> CatalogEntry | None:
        async with self._lock:
            entry = self.entries.get(entry_id)
            if entry is None or entry.tenant_id != tenant_id:
                return None
            changes: dict[str, Any] = {}
            if enabled is not None:
                changes["enabled"] = enabled
                if enabled:
                    changes["retired"] = False
            if display_name is not None:
                changes["display_name"] = display_name
            if category is not None:
                changes["category"] = category
            if not changes:
                return entry
            entry = entry.model_copy(update={**changes, "updated_at": _now()})
            self.entries[entry_id] = entry
            if enabled is False:
                self._drop_bindings(tenant_id, entry.vendor, {entry.model_id})
            return entry

    async def delete_entry(self, tenant_id: UUID, entry_id: UUID) -> bool:
        async with self._lock:
            entry = self.entries.get(entry_id)
            if entry is None or entry.tenant_id != tenant_id:
                return False
            del self.entries[entry_id]
            self._drop_bindings(tenant_id, entry.vendor, {entry.model_id})
            return True

    async def apply_plan(self, tenant_id: UUID, plan: ReconciliationPlan) -> None:
        async with self._lock:
            now = _now()
            upserts = [(m.id, m.display_name, m.category) for m in plan.inserts] + [
                (u.model_id, u.display_name, ModelCategory(u.category)) for u in plan.updates
            ]
            for model_id, display_name, category in upserts:
                current = self._find(tenant_id, plan.vendor, model_id)
                if current is None:
                    entry = CatalogEntry(
                        id=uuid4(),
                        tenant_id=tenant_id,
                        vendor=plan.vendor,
                        model_id=model_id,
                        display_name=display_name,
                        category=category,
                        source=ModelSource.AUTO,
                        created_at=now,
                    )
                    self.entries[entry.id] = entry
                elif current.source == ModelSource.AUTO:
                    self.entries[current.id] = current.model_copy(
                        update={
                            "display_name": display_name,
                            "category": category,
                            "enabled": True if current.retired else current.enabled,
                            "retired": False,
                            "updated_at": now,
                        }
                    )

            retired: set[str] = set()
            for retirement in plan.retirements:
                entry = self.entries.get(retirement.entry_id)
                if (
                    entry is None
                    or entry.tenant_id != tenant_id
                    or entry.vendor != plan.vendor
                    or entry.source != ModelSource.AUTO
                ):
                    continue
                self.entries[entry.id] = entry.model_copy(
                    update={"enabled": False, "retired": True, "updated_at": now}
                )
                retired.add(entry.model_id)
            self._drop_bindings(tenant_id, plan.vendor, retired)

    # Binding operations
    async def list_bindings(self, tenant_id: UUID) -> list[DefaultModelBinding]:
        bindings = [b for (t, _), b in self.bindings.items() if t == tenant_id]
        return sorted(bindings, key=lambda b: b.category.value)

    async def get_binding(
        self, tenant_id: UUID, category: ModelCategory
    ) -> DefaultModelBinding | None:
        return self.bindings.get((tenant_id, category))

    async def upsert_binding(
        self,
        tenant_id: UUID,
        category: ModelCategory,
        vendor: str,
        model_id: str,
    ) -> DefaultModelBinding:
        async with self._lock:
            binding = DefaultModelBinding(
                tenant_id=tenant_id,
                category=category,
                vendor=vendor,
                model_id=model_id,
                updated_at=_now(),
            )
            self.bindings[(tenant_id, category)] = binding
            return binding
